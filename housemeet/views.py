"""CSV exports for the house meet application."""
from __future__ import annotations

import csv

from django.contrib.auth.decorators import login_required
from django.db.models import F
from django.http import HttpRequest, HttpResponse
from django.utils import timezone

from . import models, services


@login_required
def export_results_csv(request: HttpRequest) -> HttpResponse:
    """Download every stored result with its scoring allocation."""

    results = models.Result.objects.select_related("event", "participant__house").order_by(
        "event__event_order",
        "event_id",
        F("position").asc(nulls_last=True),
        F("time_seconds").asc(nulls_last=True),
        "pk",
    )
    stamp = timezone.localdate().isoformat()
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="meet-results-{stamp}.csv"'
    writer = csv.writer(response)
    writer.writerow(
        [
            "Position",
            "Participant",
            "House",
            "Event",
            "Distance",
            "Category",
            "Gender",
            "Age Group",
            "Time",
            "Points",
            "Status",
            "Date",
        ]
    )
    for result in results:
        event = result.event
        writer.writerow(
            [
                services.ordinal(result.position),
                result.participant.name,
                result.participant.house.name,
                event.name,
                event.distance,
                event.category,
                event.get_gender_display(),
                event.age_group,
                services.format_time(result.time_seconds),
                result.points,
                result.get_status_display(),
                timezone.localdate(result.created_at).isoformat(),
            ]
        )
    return response


@login_required
def export_standings_csv(request: HttpRequest) -> HttpResponse:
    """Download house totals, top performers and event summaries."""

    standings = services.load_standings(house=request.GET.get("house") or None)
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = 'attachment; filename="meet-standings.csv"'
    writer = csv.writer(response)
    writer.writerow(["House standings"])
    writer.writerow(["Rank", "House", "Points", "Event wins", "Participants", "Avg points"])
    for rank, row in enumerate(standings.houses, start=1):
        writer.writerow(
            [
                rank,
                row.name,
                row.total_points,
                row.event_wins,
                row.participant_count,
                row.average_points,
            ]
        )
    writer.writerow([])
    writer.writerow(["Top performers"])
    writer.writerow(["Participant", "House", "Points", "Events", "Best position"])
    for row in standings.top_performers:
        writer.writerow(
            [
                row.name,
                row.house_name,
                row.total_points,
                row.event_count,
                services.ordinal(row.best_position),
            ]
        )
    writer.writerow([])
    writer.writerow(["Events"])
    writer.writerow(["Event", "Entries", "Finishers", "Average time"])
    for row in standings.events:
        writer.writerow(
            [
                row.name,
                row.participant_count,
                row.completed_count,
                services.format_time(row.average_time) if row.average_time is not None else "",
            ]
        )
    return response
