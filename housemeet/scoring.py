"""Position and points resolution for a single event.

The resolver is pure: it takes the outcomes recorded for one race and returns
each participant's position and points without touching the database.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

__all__ = [
    "COMPLETED",
    "DISQUALIFIED",
    "DID_NOT_START",
    "DID_NOT_FINISH",
    "STATUSES",
    "POINTS_BY_POSITION",
    "OutcomeValidationError",
    "ParticipantOutcome",
    "RankedResult",
    "coerce_outcome",
    "points_for_position",
    "resolve",
]


COMPLETED = "completed"
DISQUALIFIED = "disqualified"
DID_NOT_START = "did_not_start"
DID_NOT_FINISH = "did_not_finish"

STATUSES: tuple[str, ...] = (COMPLETED, DISQUALIFIED, DID_NOT_START, DID_NOT_FINISH)

POINTS_BY_POSITION: dict[int, int] = {1: 4, 2: 3, 3: 2, 4: 1}


class OutcomeValidationError(ValueError):
    """Raised when an outcome is missing a field or carries an unusable value."""


@dataclass(frozen=True)
class ParticipantOutcome:
    """Raw outcome of one participant in one event."""

    participant_id: Any
    status: str
    elapsed_time: Decimal | None = None

    @property
    def is_finisher(self) -> bool:
        return self.status == COMPLETED and self.elapsed_time is not None


@dataclass(frozen=True)
class RankedResult:
    """Outcome extended with the resolved position and points."""

    participant_id: Any
    status: str
    elapsed_time: Decimal | None
    position: int | None
    points: int

    def as_outcome(self) -> ParticipantOutcome:
        return ParticipantOutcome(
            participant_id=self.participant_id,
            status=self.status,
            elapsed_time=self.elapsed_time,
        )


def _coerce_time(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise OutcomeValidationError("Elapsed time must be a number.")
    if isinstance(value, Decimal):
        elapsed = value
    elif isinstance(value, (int, float)):
        elapsed = Decimal(str(value))
    elif isinstance(value, str):
        try:
            elapsed = Decimal(value.strip())
        except InvalidOperation as exc:
            raise OutcomeValidationError(f"Invalid elapsed time {value!r}.") from exc
    else:
        raise OutcomeValidationError(f"Invalid elapsed time {value!r}.")
    if not elapsed.is_finite():
        raise OutcomeValidationError(f"Elapsed time must be finite, got {value!r}.")
    return elapsed


def coerce_outcome(raw: ParticipantOutcome | Mapping[str, Any]) -> ParticipantOutcome:
    """Return a :class:`ParticipantOutcome` built from ``raw``.

    Mappings may spell the time as ``elapsed_time`` or ``time_seconds``. Missing
    ``participant_id`` or ``status`` fields fail loudly instead of defaulting.
    The elapsed time of a non-completed outcome is dropped.
    """

    if isinstance(raw, ParticipantOutcome):
        outcome = replace(raw, elapsed_time=_coerce_time(raw.elapsed_time))
    elif isinstance(raw, Mapping):
        if raw.get("participant_id") is None:
            raise OutcomeValidationError("Outcome is missing participant_id.")
        if raw.get("status") in (None, ""):
            raise OutcomeValidationError(
                f"Outcome for participant {raw['participant_id']} is missing status."
            )
        time_value = raw.get("elapsed_time", raw.get("time_seconds"))
        outcome = ParticipantOutcome(
            participant_id=raw["participant_id"],
            status=raw["status"],
            elapsed_time=_coerce_time(time_value),
        )
    else:
        raise OutcomeValidationError(f"Unsupported outcome type {type(raw).__name__}.")

    if outcome.status not in STATUSES:
        raise OutcomeValidationError(
            f"Unknown status {outcome.status!r} for participant {outcome.participant_id}."
        )
    if outcome.status != COMPLETED and outcome.elapsed_time is not None:
        outcome = replace(outcome, elapsed_time=None)
    return outcome


def points_for_position(position: int | None) -> int:
    """Map a finishing position to points; unplaced and 5th or worse score zero."""

    if position is None:
        return 0
    return POINTS_BY_POSITION.get(position, 0)


def resolve(outcomes: Iterable[ParticipantOutcome | Mapping[str, Any]]) -> list[RankedResult]:
    """Rank one event's outcomes by ascending time and award points.

    Ties share a position and the following time skips ahead by the size of
    the tie group (10.0, 10.0, 12.0 -> 1, 1, 3). Non-finishers get no position
    and zero points. The result at index ``i`` belongs to the input at ``i``.
    """

    coerced = [coerce_outcome(raw) for raw in outcomes]

    finishers = sorted(
        (index for index, outcome in enumerate(coerced) if outcome.is_finisher),
        key=lambda index: coerced[index].elapsed_time,
    )
    positions: dict[int, int] = {}
    previous_time: Decimal | None = None
    current = 0
    for place, index in enumerate(finishers, start=1):
        elapsed = coerced[index].elapsed_time
        if place == 1 or elapsed != previous_time:
            current = place
            previous_time = elapsed
        positions[index] = current

    ranked: list[RankedResult] = []
    for index, outcome in enumerate(coerced):
        position = positions.get(index)
        ranked.append(
            RankedResult(
                participant_id=outcome.participant_id,
                status=outcome.status,
                elapsed_time=outcome.elapsed_time,
                position=position,
                points=points_for_position(position),
            )
        )
    return ranked
