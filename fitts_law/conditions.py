"""Condition model for the Fitts's Law pointing task.

A condition is one (distance, width) pair.  Its index of difficulty (ID) uses
the Shannon formulation of Fitts's Law, ``log2(D / W + 1)``.  The default set
spans easy, medium, and hard targets so that the regression of movement time
on ID has a useful range to work with.  Custom sets can be stored as JSON and
loaded with :func:`load_conditions`.
"""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Sequence, Tuple

from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Default condition set (pixels)
# ---------------------------------------------------------------------------

DEFAULT_CONDITIONS: Tuple[Tuple[float, float], ...] = (
    # easy
    (100.0, 80.0),
    (150.0, 80.0),
    (200.0, 80.0),
    # medium
    (200.0, 40.0),
    (300.0, 40.0),
    (400.0, 40.0),
    # hard
    (300.0, 20.0),
    (400.0, 20.0),
    (500.0, 20.0),
)


def index_of_difficulty(distance: float, width: float) -> float:
    """Return the Shannon index of difficulty in bits.

    Parameters
    ----------
    distance:
        Amplitude of the movement, from the start control to the target centre.
    width:
        Target width measured along the movement axis.

    Raises
    ------
    ConfigurationError
        If either value is not a finite positive number.
    """

    _check_positive("distance", distance)
    _check_positive("width", width)
    return math.log2(distance / width + 1.0)


def _check_positive(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"Condition {name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"Condition {name} must be positive, got {value!r}")


@dataclass(frozen=True)
class Condition:
    """One fixed (distance, width) pairing and its index of difficulty."""

    distance: float
    width: float
    id: float

    @classmethod
    def from_pair(cls, distance: float, width: float) -> "Condition":
        difficulty = index_of_difficulty(distance, width)
        return cls(distance=float(distance), width=float(width), id=difficulty)


def build_conditions(pairs: Iterable[Sequence[float]]) -> List[Condition]:
    """Turn ordered ``(distance, width)`` pairs into :class:`Condition` objects.

    The order of ``pairs`` is kept; a condition's position in the returned list
    is its condition index for the rest of the session.
    """

    conditions: List[Condition] = []
    for position, pair in enumerate(pairs):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ConfigurationError(
                f"Condition {position} must be a (distance, width) pair, got {pair!r}"
            )
        distance, width = pair
        conditions.append(Condition.from_pair(distance, width))
    if not conditions:
        raise ConfigurationError("At least one condition is required")
    return conditions


def _coerce_pair(entry: Any, position: int) -> Tuple[float, float]:
    """Accept ``{"distance": d, "width": w}`` objects or ``[d, w]`` lists."""

    if isinstance(entry, dict):
        try:
            return entry["distance"], entry["width"]
        except KeyError as exc:
            raise ConfigurationError(
                f"Condition {position} is missing the {exc.args[0]!r} field"
            ) from exc
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return entry[0], entry[1]
    raise ConfigurationError(
        f"Condition {position} must be an object or a [distance, width] list"
    )


def load_conditions(path: str | os.PathLike[str]) -> List[Condition]:
    """Load an ordered condition set from a JSON file.

    The file must contain a list.  Each entry is either an object with
    ``distance`` and ``width`` keys or a two element ``[distance, width]``
    list.  Extra keys on objects (labels, notes) are ignored.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Condition file '{path}' does not exist.")
    with path.open("r", encoding="utf-8") as condition_file:
        try:
            loaded: Any = json.load(condition_file)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Condition file '{path.name}' is not valid JSON") from exc
    if not isinstance(loaded, list):
        raise ConfigurationError(
            f"Condition file '{path.name}' must contain a JSON list of conditions."
        )
    return build_conditions(_coerce_pair(entry, index) for index, entry in enumerate(loaded))


__all__ = [
    "DEFAULT_CONDITIONS",
    "Condition",
    "build_conditions",
    "index_of_difficulty",
    "load_conditions",
]
