"""Serializers for the house meet REST endpoints."""

from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from . import models, services


class HouseSerializer(serializers.ModelSerializer):
    participant_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = models.House
        fields = ["id", "name", "color", "participant_count", "created_at"]


class EventSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.Event
        fields = [
            "id",
            "name",
            "category",
            "distance",
            "gender",
            "age_group",
            "max_participants_per_house",
            "is_active",
            "event_order",
            "scheduled_for",
            "created_at",
        ]


class ParticipantSerializer(serializers.ModelSerializer):
    house_name = serializers.CharField(source="house.name", read_only=True)
    house_color = serializers.CharField(source="house.color", read_only=True)

    class Meta:
        model = models.Participant
        fields = ["id", "name", "house", "house_name", "house_color", "age", "gender", "created_at"]


class ResultSerializer(serializers.ModelSerializer):
    participant_name = serializers.CharField(source="participant.name", read_only=True)
    house_name = serializers.CharField(source="participant.house.name", read_only=True)
    house_color = serializers.CharField(source="participant.house.color", read_only=True)
    event_name = serializers.CharField(source="event.name", read_only=True)

    class Meta:
        model = models.Result
        fields = [
            "id",
            "event",
            "event_name",
            "participant",
            "participant_name",
            "house_name",
            "house_color",
            "time_seconds",
            "status",
            "position",
            "points",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ElapsedTimeField(serializers.Field):
    """Accepts seconds as a number or an ``m:ss.SS`` string."""

    def to_internal_value(self, data):
        try:
            return services.parse_time(data)
        except (TypeError, ValueError) as exc:
            raise serializers.ValidationError(str(exc)) from exc

    def to_representation(self, value):
        return None if value is None else str(value)


class OutcomeSerializer(serializers.Serializer):
    participant_id = serializers.IntegerField()
    time_seconds = ElapsedTimeField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=models.Result.Status.choices)


class ResultSubmissionSerializer(serializers.Serializer):
    results = OutcomeSerializer(many=True, allow_empty=True)

    def validate_results(self, value):
        wanted = {item["participant_id"] for item in value}
        known = set(
            models.Participant.objects.filter(id__in=wanted).values_list("id", flat=True)
        )
        missing = sorted(wanted - known)
        if missing:
            raise serializers.ValidationError(
                f"Unknown participant ids: {', '.join(str(pk) for pk in missing)}."
            )
        return value


class LaneSerializer(serializers.ModelSerializer):
    participant_name = serializers.CharField(source="participant.name", read_only=True)
    house_id = serializers.IntegerField(source="participant.house_id", read_only=True)
    house_name = serializers.CharField(source="participant.house.name", read_only=True)

    class Meta:
        model = models.LaneAssignment
        fields = ["event", "lane", "participant", "participant_name", "house_id", "house_name"]
        read_only_fields = fields


class LaneRequestSerializer(serializers.Serializer):
    participant_id = serializers.IntegerField()
    lane = serializers.IntegerField()


class LaneAssignmentSerializer(serializers.Serializer):
    assignments = LaneRequestSerializer(many=True)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        wanted = {item["participant_id"] for item in attrs["assignments"]}
        found = models.Participant.objects.filter(id__in=wanted).count()
        if found != len(wanted):
            raise serializers.ValidationError("One or more participants not found.")
        return attrs


class HouseTotalSerializer(serializers.Serializer):
    house_id = serializers.IntegerField()
    name = serializers.CharField()
    color = serializers.CharField()
    total_points = serializers.IntegerField()
    participant_count = serializers.IntegerField()
    event_wins = serializers.IntegerField()
    average_points = serializers.DecimalField(max_digits=8, decimal_places=2)


class PerformerTotalSerializer(serializers.Serializer):
    participant_id = serializers.IntegerField()
    name = serializers.CharField()
    house_id = serializers.IntegerField()
    house_name = serializers.CharField()
    total_points = serializers.IntegerField()
    event_count = serializers.IntegerField()
    best_position = serializers.IntegerField(allow_null=True)


class EventSummarySerializer(serializers.Serializer):
    event_id = serializers.IntegerField()
    name = serializers.CharField()
    participant_count = serializers.IntegerField()
    completed_count = serializers.IntegerField()
    has_results = serializers.BooleanField()
    average_time = serializers.DecimalField(max_digits=9, decimal_places=2, allow_null=True)


class ProgressionPointSerializer(serializers.Serializer):
    event_id = serializers.IntegerField()
    event_name = serializers.CharField()
    totals = serializers.SerializerMethodField()

    def get_totals(self, obj) -> Dict[str, int]:
        return {str(house_id): points for house_id, points in obj.totals.items()}


class StandingsSerializer(serializers.Serializer):
    houses = HouseTotalSerializer(many=True)
    top_performers = PerformerTotalSerializer(many=True)
    events = EventSummarySerializer(many=True)
    wins = serializers.SerializerMethodField()
    progression = ProgressionPointSerializer(many=True)

    def get_wins(self, obj) -> Dict[str, int]:
        return {str(house_id): count for house_id, count in obj.wins.items()}
