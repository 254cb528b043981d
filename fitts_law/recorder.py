"""Measurement recording for completed pointing trials.

:func:`build_trial_record` turns the geometry and timing of one finished trial
into an immutable :class:`TrialRecord`.  Records are kept in a
:class:`RecordStore`, which only ever grows and hands out read-only views so
that analysis and export cannot alter the session data.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Iterator, Tuple

from .errors import TimingAnomaly
from .geometry import Point, euclidean_distance
from .sequence import TrialSpec

ANONYMOUS_PARTICIPANT = "anonymous"


@dataclass(frozen=True)
class TrialRecord:
    """Result of one completed trial."""

    trial_number: int
    participant_id: str
    timestamp: str
    condition_index: int
    distance: float
    width: float
    id: float
    movement_time_ms: float
    error_distance: float
    accurate: bool
    click_x: float
    click_y: float
    target_x: float
    target_y: float


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""

    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def normalize_participant_id(participant_id: str | None) -> str:
    """Return a trimmed participant label, defaulting to ``"anonymous"``."""

    label = (participant_id or "").strip()
    return label or ANONYMOUS_PARTICIPANT


def build_trial_record(
    *,
    spec: TrialSpec,
    trial_number: int,
    participant_id: str,
    start_ms: float,
    end_ms: float,
    target: Point,
    click: Point,
    timestamp: str | None = None,
) -> TrialRecord:
    """Build the record for a trial whose target was hit at ``end_ms``.

    ``target`` must be the centre where the target was actually drawn, i.e.
    after clamping to the presentation bounds.  A negative or non-finite
    movement time means the clock ran backwards, produced a bad reading, or
    events were delivered out of order, and raises :class:`TimingAnomaly`
    instead of producing a record.
    """

    movement_time = end_ms - start_ms
    if not math.isfinite(movement_time) or movement_time < 0:
        raise TimingAnomaly(
            f"Invalid movement time ({movement_time:.2f} ms) on trial {trial_number}",
            start_ms=start_ms,
            end_ms=end_ms,
        )
    error_distance = euclidean_distance(click, target)
    return TrialRecord(
        trial_number=trial_number,
        participant_id=participant_id,
        timestamp=timestamp or utc_timestamp(),
        condition_index=spec.condition_index,
        distance=spec.distance,
        width=spec.width,
        id=spec.id,
        movement_time_ms=movement_time,
        error_distance=error_distance,
        accurate=error_distance <= spec.width / 2.0,
        click_x=float(click[0]),
        click_y=float(click[1]),
        target_x=float(target[0]),
        target_y=float(target[1]),
    )


class RecordStore:
    """Ordered, append-only collection of :class:`TrialRecord` objects."""

    def __init__(self) -> None:
        self._records: list[TrialRecord] = []

    def append(self, record: TrialRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> Tuple[TrialRecord, ...]:
        """Read-only snapshot of the records in completion order."""

        return tuple(self._records)

    def accuracy_pct(self) -> float:
        """Percentage of accurate trials so far (0.0 when empty)."""

        if not self._records:
            return 0.0
        hits = sum(1 for record in self._records if record.accurate)
        return 100.0 * hits / len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TrialRecord]:
        return iter(tuple(self._records))


__all__ = [
    "ANONYMOUS_PARTICIPANT",
    "RecordStore",
    "TrialRecord",
    "build_trial_record",
    "normalize_participant_id",
    "utc_timestamp",
]
