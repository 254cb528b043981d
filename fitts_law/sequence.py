"""Trial sequencing: conditions x repetitions in an unbiased random order."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Sequence, TypeVar

from .conditions import Condition
from .errors import ConfigurationError

T = TypeVar("T")


@dataclass(frozen=True)
class TrialSpec:
    """A condition scheduled at a given position of the session."""

    condition: Condition
    condition_index: int
    position: int

    @property
    def distance(self) -> float:
        return self.condition.distance

    @property
    def width(self) -> float:
        return self.condition.width

    @property
    def id(self) -> float:
        return self.condition.id


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random | None = None) -> List[T]:
    """Return a shuffled copy of ``items``.

    Walks from the last index down to 1 and swaps each slot with a uniformly
    chosen index in ``[0, i]``, so every permutation is equally likely given a
    uniform source.  ``items`` itself is left untouched.
    """

    source = rng or random.Random()
    shuffled: List[T] = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = source.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def validate_repetitions(repetitions: object) -> int:
    """Return ``repetitions`` as an int, rejecting anything below one."""

    if isinstance(repetitions, bool) or not isinstance(repetitions, int):
        raise ConfigurationError(
            f"Repetition count must be a positive integer, got {repetitions!r}"
        )
    if repetitions < 1:
        raise ConfigurationError(f"Repetition count must be at least 1, got {repetitions}")
    return repetitions


def build_trial_sequence(
    conditions: Sequence[Condition],
    repetitions: int,
    rng: random.Random | None = None,
) -> List[TrialSpec]:
    """Expand ``conditions`` into ``len(conditions) * repetitions`` shuffled trials.

    Each condition appears exactly ``repetitions`` times.  Pass a seeded
    ``random.Random`` for a reproducible order.
    """

    count = validate_repetitions(repetitions)
    if not conditions:
        raise ConfigurationError("At least one condition is required")

    unordered = [
        (index, condition)
        for _ in range(count)
        for index, condition in enumerate(conditions)
    ]
    ordered = fisher_yates_shuffle(unordered, rng)
    return [
        TrialSpec(condition=condition, condition_index=index, position=position)
        for position, (index, condition) in enumerate(ordered)
    ]


__all__ = [
    "TrialSpec",
    "build_trial_sequence",
    "fisher_yates_shuffle",
    "validate_repetitions",
]
