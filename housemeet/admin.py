"""Admin registrations for the housemeet application."""
from django.contrib import admin

from . import models


@admin.register(models.House)
class HouseAdmin(admin.ModelAdmin):
    list_display = ("name", "color", "created_at")
    search_fields = ("name",)


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "distance",
        "gender",
        "age_group",
        "max_participants_per_house",
        "event_order",
        "is_active",
    )
    list_filter = ("category", "gender", "is_active")
    search_fields = ("name", "age_group")


@admin.register(models.Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("name", "house", "age", "gender")
    list_filter = ("house", "gender")
    search_fields = ("name",)


@admin.register(models.Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ("event", "participant", "time_seconds", "status", "position", "points")
    list_filter = ("event", "status")
    search_fields = ("participant__name", "event__name")
    readonly_fields = ("position", "points")


@admin.register(models.LaneAssignment)
class LaneAssignmentAdmin(admin.ModelAdmin):
    list_display = ("event", "lane", "participant")
    list_filter = ("event",)


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("ts", "action")
    list_filter = ("action", "ts")
    search_fields = ("action",)
