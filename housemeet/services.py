"""Domain helpers and result processing logic for the house meet app."""

from __future__ import annotations

import logging
import random
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction

from . import models, scoring, standings

__all__ = [
    "SCOREBOARD_GROUP",
    "LaneAssignmentError",
    "parse_time",
    "format_time",
    "ordinal",
    "submit_event_results",
    "rescore_event",
    "load_standings",
    "serialize_house_totals",
    "broadcast_standings",
    "assign_lanes",
    "seed_demo_meet",
]

logger = logging.getLogger(__name__)

SCOREBOARD_GROUP = "scoreboard"

# Result.time_seconds holds 9 digits with 3 after the point.
MAX_TIME_SECONDS = Decimal("1000000")


class LaneAssignmentError(ValueError):
    """Raised when a lane request cannot be applied to an event."""


def parse_time(value: str | float | Decimal | None) -> Decimal | None:
    """Parse time strings such as ``m:ss.SS`` or ``ss.SS`` into seconds.

    Values are taken as given; zero or negative times are not rejected here.
    """

    if value in (None, ""):
        return None
    if isinstance(value, bool):
        raise ValueError("Invalid time value supplied.")
    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, (int, float)):
        candidate = Decimal(str(value))
    else:
        text = value.strip()
        if not text:
            return None
        if ":" in text:
            parts = text.split(":")
            if len(parts) != 2:
                raise ValueError("Use m:ss.SS or ss.SS for times.")
            minutes, seconds = parts
            try:
                candidate = Decimal(minutes) * Decimal(60) + Decimal(seconds)
            except InvalidOperation as exc:
                raise ValueError("Invalid time value supplied.") from exc
        else:
            try:
                candidate = Decimal(text)
            except InvalidOperation as exc:
                raise ValueError("Invalid time value supplied.") from exc
    if not candidate.is_finite():
        raise ValueError("Invalid time value supplied.")
    if abs(candidate) >= MAX_TIME_SECONDS:
        raise ValueError(f"Times must be under {MAX_TIME_SECONDS} seconds.")
    try:
        return candidate.quantize(Decimal("0.001"))
    except InvalidOperation as exc:
        raise ValueError("Invalid time value supplied.") from exc


def format_time(seconds: Decimal | float | None) -> str:
    """Render seconds as ``m:ss.SS`` (or ``ss.SS`` under a minute)."""

    if seconds is None:
        return "N/A"
    value = Decimal(str(seconds)).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    value = abs(value)
    minutes, remainder = divmod(value, 60)
    if minutes:
        return f"{sign}{int(minutes)}:{remainder:05.2f}"
    return f"{sign}{remainder:.2f}"


def ordinal(position: int | None) -> str:
    """Return ``1st``, ``2nd``, ``11th`` style labels; ``N/A`` for no position."""

    if not position:
        return "N/A"
    if 10 <= position % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"


def _log_submission(event: models.Event, rows: list[models.Result], user: Any = None) -> None:
    models.AuditLog.objects.create(
        action="event_results_submit",
        payload={
            "event_id": event.pk,
            "event_name": event.name,
            "user": getattr(user, "username", None) or None,
            "results": len(rows),
            "finishers": sum(1 for row in rows if row.position is not None),
        },
    )


def _lock_event(event: models.Event) -> None:
    # Serializes every read-and-replace of one event's results.
    models.Event.objects.select_for_update().filter(pk=event.pk).first()


def _replace_results(event: models.Event, ranked: list[scoring.RankedResult]) -> list[models.Result]:
    _lock_event(event)
    models.Result.objects.filter(event=event).delete()
    rows = [
        models.Result(
            event=event,
            participant_id=item.participant_id,
            time_seconds=item.elapsed_time,
            status=item.status,
            position=item.position,
            points=item.points,
        )
        for item in ranked
    ]
    return models.Result.objects.bulk_create(rows)


def submit_event_results(
    event: models.Event,
    outcomes: Iterable[scoring.ParticipantOutcome | Mapping[str, Any]],
    *,
    user: Any = None,
) -> list[models.Result]:
    """Resolve and store the complete result set for ``event``.

    Every previously stored result for the event is discarded. The returned
    rows follow the order of ``outcomes``.
    """

    ranked = scoring.resolve(outcomes)
    with transaction.atomic():
        stored = _replace_results(event, ranked)
        _log_submission(event, stored, user)
        transaction.on_commit(lambda: broadcast_standings(event_id=event.pk))
    logger.info(
        "stored %d results for event %s (%d finishers)",
        len(stored),
        event.pk,
        sum(1 for row in stored if row.position is not None),
    )
    return stored


def rescore_event(event: models.Event) -> list[models.Result]:
    """Re-resolve the outcomes already stored for ``event``.

    Stored rows are read under the event lock that submissions also take.
    """

    with transaction.atomic():
        _lock_event(event)
        existing = list(models.Result.objects.filter(event=event).order_by("pk"))
        outcomes = [
            scoring.ParticipantOutcome(
                participant_id=row.participant_id,
                status=row.status,
                elapsed_time=row.time_seconds,
            )
            for row in existing
        ]
        ranked = scoring.resolve(outcomes)
        changed = sum(
            1
            for row, item in zip(existing, ranked)
            if (row.position, row.points) != (item.position, item.points)
        )
        stored = _replace_results(event, ranked)
        models.AuditLog.objects.create(
            action="event_results_rescore",
            payload={"event_id": event.pk, "results": len(stored), "changed": changed},
        )
        transaction.on_commit(lambda: broadcast_standings(event_id=event.pk))
    logger.info("rescored event %s: %d of %d results changed", event.pk, changed, len(stored))
    return stored


def load_standings(*, house: str | None = None, top_n: int | None = None) -> standings.Standings:
    """Read the full result set and derive every standings view from it."""

    if top_n is None:
        top_n = getattr(settings, "HOUSEMEET_TOP_PERFORMERS", 10)
    return standings.aggregate(
        models.Result.objects.only(
            "id", "event_id", "participant_id", "time_seconds", "status", "position", "points"
        ),
        models.House.objects.all(),
        models.Participant.objects.only("id", "name", "house_id"),
        events=models.Event.objects.all(),
        top_n=top_n,
        house_name=house,
    )


def serialize_house_totals(rows: Iterable[standings.HouseTotal]) -> list[dict[str, object]]:
    return [
        {
            "house_id": row.house_id,
            "name": row.name,
            "color": row.color,
            "total_points": row.total_points,
            "participant_count": row.participant_count,
            "event_wins": row.event_wins,
            "average_points": str(row.average_points),
        }
        for row in rows
    ]


def broadcast_standings(event_id: int | None = None) -> None:
    """Push fresh house totals to live scoreboard clients."""

    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        "type": "STANDINGS_UPDATED",
        "event_id": event_id,
        "houses": serialize_house_totals(load_standings().houses),
    }
    try:
        async_to_sync(channel_layer.group_send)(
            SCOREBOARD_GROUP,
            {"type": "broadcast", "event": payload},
        )
    except Exception as exc:  # results are already committed at this point
        logger.warning("scoreboard broadcast failed for event %s: %s", event_id, exc)


def assign_lanes(
    event: models.Event,
    assignments: Iterable[Mapping[str, Any]],
) -> list[models.LaneAssignment]:
    """Create or move participants into lanes for ``event``."""

    max_lanes = getattr(settings, "HOUSEMEET_MAX_LANES", 10)
    requested = [(int(item["participant_id"]), int(item["lane"])) for item in assignments]
    seen: set[int] = set()
    for _, lane in requested:
        if lane < 1 or lane > max_lanes:
            raise LaneAssignmentError(f"Lanes must be between 1 and {max_lanes}.")
        if lane in seen:
            raise LaneAssignmentError(f"Lane {lane} is assigned more than once.")
        seen.add(lane)

    saved: list[models.LaneAssignment] = []
    with transaction.atomic():
        participant_ids = [participant_id for participant_id, _ in requested]
        # Clear lanes being reassigned so moves between lanes do not collide.
        models.LaneAssignment.objects.filter(event=event, lane__in=seen).exclude(
            participant_id__in=participant_ids
        ).delete()
        models.LaneAssignment.objects.filter(event=event, participant_id__in=participant_ids).delete()
        for participant_id, lane in requested:
            saved.append(
                models.LaneAssignment.objects.create(
                    event=event,
                    participant_id=participant_id,
                    lane=lane,
                )
            )
    logger.info("assigned %d lanes for event %s", len(saved), event.pk)
    return saved


DEMO_HOUSES = (("Phoenix", "red"), ("Griffin", "blue"), ("Dragon", "green"), ("Pegasus", "yellow"))
DEMO_EVENTS = (
    ("50m Freestyle", "Freestyle", "50m"),
    ("50m Backstroke", "Backstroke", "50m"),
    ("50m Breaststroke", "Breaststroke", "50m"),
    ("100m Individual Medley", "Medley", "100m"),
)


def seed_demo_meet(*, swimmers_per_house: int = 3, seed: int = 2024) -> dict[str, int]:
    """Create demo houses, events, participants and scored results."""

    rng = random.Random(seed)
    houses = [
        models.House.objects.get_or_create(name=name, defaults={"color": color})[0]
        for name, color in DEMO_HOUSES
    ]
    participants: list[models.Participant] = []
    for house in houses:
        for number in range(1, swimmers_per_house + 1):
            participant, _ = models.Participant.objects.get_or_create(
                name=f"{house.name} Swimmer {number}",
                house=house,
                defaults={
                    "age": rng.randint(11, 17),
                    "gender": rng.choice(models.Participant.Gender.values),
                },
            )
            participants.append(participant)

    events = []
    for order, (name, category, distance) in enumerate(DEMO_EVENTS, start=1):
        event, _ = models.Event.objects.get_or_create(
            name=name,
            defaults={
                "category": category,
                "distance": distance,
                "age_group": "Open",
                "max_participants_per_house": swimmers_per_house,
                "event_order": order,
            },
        )
        events.append(event)

    results = 0
    for event in events:
        outcomes = []
        for participant in participants:
            roll = rng.random()
            if roll < 0.05:
                outcomes.append({"participant_id": participant.pk, "status": scoring.DISQUALIFIED})
            elif roll < 0.1:
                outcomes.append({"participant_id": participant.pk, "status": scoring.DID_NOT_START})
            else:
                elapsed = Decimal(str(round(rng.uniform(30, 75), 2)))
                outcomes.append(
                    {"participant_id": participant.pk, "status": scoring.COMPLETED, "elapsed_time": elapsed}
                )
        results += len(submit_event_results(event, outcomes))
    return {"houses": len(houses), "participants": len(participants), "events": len(events), "results": results}
