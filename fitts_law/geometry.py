"""Presentation-surface geometry for target placement.

Coordinates follow the screen convention used by the recorded data: the origin
is the top-left corner of the presentation area, ``x`` grows to the right and
``y`` grows downwards.  The PsychoPy layer converts its centred pixel units to
this frame before handing clicks to the core.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
import random
from typing import Tuple

from .errors import ConfigurationError

Point = Tuple[float, float]

FULL_TURN: float = 2.0 * math.pi


@dataclass(frozen=True)
class Bounds:
    """Size of the presentation area in pixels."""

    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Presentation bounds must be positive, got {self.width}x{self.height}"
            )

    @property
    def center(self) -> Point:
        return self.width / 2.0, self.height / 2.0

    def fits(self, size: float) -> bool:
        """Return ``True`` if a square target of ``size`` fits on both axes."""

        return size <= self.width and size <= self.height


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def polar_offset(center: Point, distance: float, angle: float) -> Point:
    """Return the point ``distance`` away from ``center`` at ``angle`` radians."""

    cx, cy = center
    return cx + distance * math.cos(angle), cy + distance * math.sin(angle)


def clamp_target(position: Point, width: float, bounds: Bounds) -> Point:
    """Keep a target of ``width`` entirely inside ``bounds``.

    Each axis is clamped independently to ``[width / 2, dimension - width / 2]``.
    """

    half = width / 2.0
    x, y = position
    return (
        clamp(x, half, bounds.width - half),
        clamp(y, half, bounds.height - half),
    )


def random_angle(rng: random.Random) -> float:
    """Return a uniform angle in ``[0, 2*pi)``."""

    return rng.random() * FULL_TURN


def place_target(
    distance: float,
    width: float,
    bounds: Bounds,
    angle: float,
) -> Point:
    """Return the clamped centre of a target ``distance`` from the bounds centre."""

    return clamp_target(polar_offset(bounds.center, distance, angle), width, bounds)


def euclidean_distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


__all__ = [
    "Bounds",
    "Point",
    "clamp",
    "clamp_target",
    "euclidean_distance",
    "place_target",
    "polar_offset",
    "random_angle",
]
