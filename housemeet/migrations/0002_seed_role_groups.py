from django.db import migrations

ROLE_GROUPS = ("Administrators", "Officials")


def seed_role_groups(apps, schema_editor):
    Group = apps.get_model("auth", "Group")
    for name in ROLE_GROUPS:
        Group.objects.get_or_create(name=name)


def unseed_role_groups(apps, schema_editor):
    Group = apps.get_model("auth", "Group")
    Group.objects.filter(name__in=ROLE_GROUPS).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
        ("housemeet", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_role_groups, unseed_role_groups),
    ]
