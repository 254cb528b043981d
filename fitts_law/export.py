"""CSV export of the raw trial records."""
from __future__ import annotations

import csv
from datetime import date
import io
from typing import Iterable, List

from .recorder import TrialRecord, normalize_participant_id

EXPORT_HEADERS: List[str] = [
    "Trial",
    "ParticipantID",
    "Timestamp",
    "Condition",
    "Distance",
    "Width",
    "ID",
    "MovementTime",
    "ErrorDistance",
    "Accurate",
    "ClickX",
    "ClickY",
    "TargetX",
    "TargetY",
]


def _number(value: float) -> str:
    """Render distances and widths without a spurious ``.0``."""

    return f"{value:g}" if float(value).is_integer() else repr(float(value))


def record_to_row(record: TrialRecord) -> List[str]:
    """Return the CSV cells for ``record`` in :data:`EXPORT_HEADERS` order."""

    return [
        str(record.trial_number),
        record.participant_id,
        record.timestamp,
        str(record.condition_index),
        _number(record.distance),
        _number(record.width),
        f"{record.id:.4f}",
        f"{record.movement_time_ms:.2f}",
        f"{record.error_distance:.2f}",
        "1" if record.accurate else "0",
        f"{record.click_x:.2f}",
        f"{record.click_y:.2f}",
        f"{record.target_x:.2f}",
        f"{record.target_y:.2f}",
    ]


def records_to_csv(records: Iterable[TrialRecord]) -> str:
    """Serialize ``records`` as CSV text with a header row.

    An empty iterable yields just the header line.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for record in records:
        writer.writerow(record_to_row(record))
    return buffer.getvalue()


def export_filename(participant_id: str | None, on: date | None = None) -> str:
    """Return ``fitts_law_<participant>_<YYYY-MM-DD>.csv``."""

    day = on or date.today()
    return f"fitts_law_{normalize_participant_id(participant_id)}_{day.isoformat()}.csv"


__all__ = ["EXPORT_HEADERS", "export_filename", "record_to_row", "records_to_csv"]
