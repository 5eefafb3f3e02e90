"""Database models for the house meet application."""
from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from . import scoring


class House(models.Model):
    """A team that participants compete for."""

    name = models.CharField(max_length=64, unique=True)
    color = models.CharField(max_length=32)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    """A single timed race with its own ranking."""

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        MIXED = "mixed", "Mixed"

    name = models.CharField(max_length=120)
    category = models.CharField(max_length=64, blank=True)
    distance = models.CharField(max_length=32, blank=True)
    gender = models.CharField(max_length=8, choices=Gender.choices, default=Gender.MIXED)
    age_group = models.CharField(max_length=32, blank=True)
    max_participants_per_house = models.PositiveIntegerField(default=1)
    is_active = models.BooleanField(default=True)
    event_order = models.PositiveIntegerField(default=0)
    scheduled_for = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("event_order", "pk")

    def __str__(self) -> str:
        return self.name


class Participant(models.Model):
    """Represents a competitor belonging to a house."""

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"

    name = models.CharField(max_length=120)
    house = models.ForeignKey(House, on_delete=models.CASCADE, related_name="participants")
    age = models.PositiveIntegerField(blank=True, null=True)
    gender = models.CharField(max_length=8, choices=Gender.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name", "pk")

    def __str__(self) -> str:
        return self.name


class Result(models.Model):
    """Stored outcome of one participant in one event, with its resolved score."""

    class Status(models.TextChoices):
        COMPLETED = scoring.COMPLETED, "Completed"
        DISQUALIFIED = scoring.DISQUALIFIED, "Disqualified"
        DID_NOT_START = scoring.DID_NOT_START, "Did Not Start"
        DID_NOT_FINISH = scoring.DID_NOT_FINISH, "Did Not Finish"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="results")
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="results")
    time_seconds = models.DecimalField(max_digits=9, decimal_places=3, blank=True, null=True)
    status = models.CharField(max_length=16, choices=Status.choices)
    position = models.PositiveIntegerField(blank=True, null=True)
    points = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = (
            "event",
            models.F("position").asc(nulls_last=True),
            models.F("time_seconds").asc(nulls_last=True),
            "pk",
        )

    def __str__(self) -> str:
        return f"{self.participant} - {self.event}"

    @property
    def elapsed_time(self):
        return self.time_seconds


class LaneAssignment(models.Model):
    """Lane a participant swims in for an event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="lanes")
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="lanes")
    lane = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "participant"], name="unique_lane_per_participant"),
            models.UniqueConstraint(fields=["event", "lane"], name="unique_participant_per_lane"),
        ]
        ordering = ("event", "lane")

    def __str__(self) -> str:
        return f"Lane {self.lane}: {self.participant} ({self.event})"


class AuditLog(models.Model):
    """Simple audit trail for user actions."""

    ts = models.DateTimeField(auto_now_add=True)
    action = models.CharField(max_length=64)
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ("-ts",)

    def __str__(self) -> str:
        return f"{self.action} at {self.ts:%Y-%m-%d %H:%M:%S}"
