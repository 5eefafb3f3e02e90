"""House standings and leaderboards derived from stored results.

Every view here is recomputed from the full result set on each call; nothing
is cached or accumulated between calls. Inputs are duck-typed so model
instances and plain records can both be passed:

* results need ``participant_id``, ``points`` and ``position`` (``event_id``,
  ``status`` and ``time_seconds``/``elapsed_time`` feed the event views);
* houses need ``id`` and ``name`` (``color`` optional);
* participants need ``id``, ``name`` and ``house_id``;
* events need ``id`` and ``name``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from .scoring import COMPLETED

__all__ = [
    "HouseTotal",
    "PerformerTotal",
    "EventSummary",
    "ProgressionPoint",
    "Standings",
    "aggregate",
    "house_totals",
    "top_performers",
    "event_summaries",
    "house_wins",
    "house_progression",
]


@dataclass(frozen=True)
class HouseTotal:
    house_id: Any
    name: str
    total_points: int
    color: str = ""
    participant_count: int = 0
    event_wins: int = 0

    @property
    def average_points(self) -> Decimal:
        """Points per registered participant, zero for an empty house."""

        if not self.participant_count:
            return Decimal("0")
        return (Decimal(self.total_points) / self.participant_count).quantize(Decimal("0.01"))


@dataclass(frozen=True)
class PerformerTotal:
    participant_id: Any
    name: str
    house_id: Any
    house_name: str
    total_points: int
    event_count: int
    best_position: int | None


@dataclass(frozen=True)
class EventSummary:
    event_id: Any
    name: str
    participant_count: int
    completed_count: int
    average_time: Decimal | None

    @property
    def has_results(self) -> bool:
        return self.participant_count > 0


@dataclass(frozen=True)
class ProgressionPoint:
    """Cumulative house points after an event has been scored."""

    event_id: Any
    event_name: str
    totals: dict[Any, int]


@dataclass(frozen=True)
class Standings:
    houses: list[HouseTotal]
    top_performers: list[PerformerTotal]
    events: list[EventSummary] = field(default_factory=list)
    wins: dict[Any, int] = field(default_factory=dict)
    progression: list[ProgressionPoint] = field(default_factory=list)


def _elapsed(result: Any) -> Decimal | None:
    value = getattr(result, "time_seconds", None)
    if value is None:
        value = getattr(result, "elapsed_time", None)
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _house_lookup(participants: Iterable[Any]) -> dict[Any, Any]:
    return {participant.id: participant.house_id for participant in participants}


def house_wins(results: Iterable[Any], participants: Iterable[Any]) -> dict[Any, int]:
    """Count first places per house."""

    owner = _house_lookup(participants)
    wins: dict[Any, int] = defaultdict(int)
    for result in results:
        house_id = owner.get(result.participant_id)
        if house_id is not None and result.position == 1:
            wins[house_id] += 1
    return dict(wins)


def house_totals(
    results: Iterable[Any],
    houses: Iterable[Any],
    participants: Iterable[Any],
) -> list[HouseTotal]:
    """Sum points per house, highest first and by name on equal totals.

    Houses without any results are still listed with a total of zero.
    """

    results = list(results)
    participants = list(participants)
    owner = _house_lookup(participants)

    points: dict[Any, int] = defaultdict(int)
    for result in results:
        house_id = owner.get(result.participant_id)
        if house_id is None:
            continue
        points[house_id] += result.points or 0

    members: dict[Any, int] = defaultdict(int)
    for participant in participants:
        members[participant.house_id] += 1

    wins = house_wins(results, participants)
    rows = [
        HouseTotal(
            house_id=house.id,
            name=house.name,
            total_points=points.get(house.id, 0),
            color=getattr(house, "color", "") or "",
            participant_count=members.get(house.id, 0),
            event_wins=wins.get(house.id, 0),
        )
        for house in houses
    ]
    rows.sort(key=lambda row: (-row.total_points, row.name))
    return rows


def top_performers(
    results: Iterable[Any],
    houses: Iterable[Any],
    participants: Iterable[Any],
    limit: int | None = 10,
) -> list[PerformerTotal]:
    """Participants ranked by summed points.

    Equal totals are ordered by best single position (unplaced last), then by
    name. Participants without results are left out.
    """

    house_names = {house.id: house.name for house in houses}
    by_id = {participant.id: participant for participant in participants}

    points: dict[Any, int] = defaultdict(int)
    counts: dict[Any, int] = defaultdict(int)
    best: dict[Any, int] = {}
    for result in results:
        if result.participant_id not in by_id:
            continue
        pid = result.participant_id
        points[pid] += result.points or 0
        counts[pid] += 1
        if result.position is not None and (pid not in best or result.position < best[pid]):
            best[pid] = result.position

    rows = []
    for pid, event_count in counts.items():
        participant = by_id[pid]
        rows.append(
            PerformerTotal(
                participant_id=pid,
                name=participant.name,
                house_id=participant.house_id,
                house_name=house_names.get(participant.house_id, ""),
                total_points=points[pid],
                event_count=event_count,
                best_position=best.get(pid),
            )
        )
    rows.sort(
        key=lambda row: (
            -row.total_points,
            row.best_position is None,
            row.best_position or 0,
            row.name,
        )
    )
    if limit is not None:
        return rows[:limit]
    return rows


def event_summaries(results: Iterable[Any], events: Iterable[Any]) -> list[EventSummary]:
    """Participation and completion counts per event, in the order given."""

    grouped: dict[Any, list[Any]] = defaultdict(list)
    for result in results:
        grouped[getattr(result, "event_id", None)].append(result)

    summaries = []
    for event in events:
        rows = grouped.get(event.id, [])
        times = [
            _elapsed(row)
            for row in rows
            if getattr(row, "status", None) == COMPLETED and _elapsed(row) is not None
        ]
        average = None
        if times:
            average = (sum(times, Decimal("0")) / len(times)).quantize(Decimal("0.01"))
        summaries.append(
            EventSummary(
                event_id=event.id,
                name=event.name,
                participant_count=len(rows),
                completed_count=sum(1 for row in rows if row.position is not None),
                average_time=average,
            )
        )
    return summaries


def house_progression(
    results: Iterable[Any],
    houses: Iterable[Any],
    participants: Iterable[Any],
    events: Iterable[Any],
) -> list[ProgressionPoint]:
    """Running house totals after each event that has results."""

    owner = _house_lookup(participants)
    house_ids = [house.id for house in houses]

    per_event: dict[Any, dict[Any, int]] = defaultdict(lambda: defaultdict(int))
    for result in results:
        house_id = owner.get(result.participant_id)
        if house_id is None:
            continue
        per_event[getattr(result, "event_id", None)][house_id] += result.points or 0

    running = {house_id: 0 for house_id in house_ids}
    points = []
    for event in events:
        if event.id not in per_event:
            continue
        for house_id, value in per_event[event.id].items():
            if house_id in running:
                running[house_id] += value
        points.append(
            ProgressionPoint(event_id=event.id, event_name=event.name, totals=dict(running))
        )
    return points


def aggregate(
    results: Iterable[Any],
    houses: Iterable[Any],
    participants: Iterable[Any],
    *,
    events: Iterable[Any] = (),
    top_n: int | None = 10,
    house_name: str | None = None,
) -> Standings:
    """Build every standings view from the authoritative result set.

    ``house_name`` narrows the house totals and performer list to one house;
    event summaries and progression always cover the whole meet.
    """

    results = list(results)
    houses = list(houses)
    participants = list(participants)
    events = list(events)

    totals = house_totals(results, houses, participants)
    performers = top_performers(
        results,
        houses,
        participants,
        limit=None if house_name else top_n,
    )
    if house_name:
        selected = {house.id for house in houses if house.name == house_name}
        totals = [row for row in totals if row.house_id in selected]
        performers = [row for row in performers if row.house_id in selected]
        if top_n is not None:
            performers = performers[:top_n]

    return Standings(
        houses=totals,
        top_performers=performers,
        events=event_summaries(results, events),
        wins=house_wins(results, participants),
        progression=house_progression(results, houses, participants, events),
    )
