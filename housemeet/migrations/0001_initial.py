import django.core.validators
import django.db.models.deletion
import django.db.models.expressions
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ts", models.DateTimeField(auto_now_add=True)),
                ("action", models.CharField(max_length=64)),
                ("payload", models.JSONField(blank=True, default=dict)),
            ],
            options={"ordering": ("-ts",)},
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("category", models.CharField(blank=True, max_length=64)),
                ("distance", models.CharField(blank=True, max_length=32)),
                (
                    "gender",
                    models.CharField(
                        choices=[("male", "Male"), ("female", "Female"), ("mixed", "Mixed")],
                        default="mixed",
                        max_length=8,
                    ),
                ),
                ("age_group", models.CharField(blank=True, max_length=32)),
                ("max_participants_per_house", models.PositiveIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("event_order", models.PositiveIntegerField(default=0)),
                ("scheduled_for", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ("event_order", "pk")},
        ),
        migrations.CreateModel(
            name="House",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64, unique=True)),
                ("color", models.CharField(max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("age", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "gender",
                    models.CharField(choices=[("male", "Male"), ("female", "Female")], max_length=8),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "house",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="housemeet.house",
                    ),
                ),
            ],
            options={"ordering": ("name", "pk")},
        ),
        migrations.CreateModel(
            name="Result",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("time_seconds", models.DecimalField(blank=True, decimal_places=3, max_digits=9, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("completed", "Completed"),
                            ("disqualified", "Disqualified"),
                            ("did_not_start", "Did Not Start"),
                            ("did_not_finish", "Did Not Finish"),
                        ],
                        max_length=16,
                    ),
                ),
                ("position", models.PositiveIntegerField(blank=True, null=True)),
                ("points", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="results",
                        to="housemeet.event",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="results",
                        to="housemeet.participant",
                    ),
                ),
            ],
            options={
                "ordering": (
                    "event",
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("position"), nulls_last=True
                    ),
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("time_seconds"), nulls_last=True
                    ),
                    "pk",
                ),
            },
        ),
        migrations.CreateModel(
            name="LaneAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("lane", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lanes",
                        to="housemeet.event",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lanes",
                        to="housemeet.participant",
                    ),
                ),
            ],
            options={
                "ordering": ("event", "lane"),
                "constraints": [
                    models.UniqueConstraint(fields=("event", "participant"), name="unique_lane_per_participant"),
                    models.UniqueConstraint(fields=("event", "lane"), name="unique_participant_per_lane"),
                ],
            },
        ),
    ]
