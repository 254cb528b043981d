"""Exception types shared by the Fitts's Law experiment modules."""
from __future__ import annotations


class FittsLawError(Exception):
    """Base class for every error raised by :mod:`fitts_law`."""


class ConfigurationError(FittsLawError, ValueError):
    """Raised when the condition set or session options are invalid.

    This is the only fatal error kind: the experiment must not start.
    """


class SequenceStateError(FittsLawError):
    """Raised when an event arrives while no trial can accept it."""


class TimingAnomaly(FittsLawError):
    """Raised when a trial's movement time comes out negative."""

    def __init__(self, message: str, *, start_ms: float, end_ms: float) -> None:
        super().__init__(message)
        self.start_ms = start_ms
        self.end_ms = end_ms


class RegressionUndefined(FittsLawError):
    """Raised when the condition means cannot support a regression line."""


class ExperimentAbort(FittsLawError):
    """Raised when the participant issues a quit command (e.g., presses ESC)."""


__all__ = [
    "FittsLawError",
    "ConfigurationError",
    "SequenceStateError",
    "TimingAnomaly",
    "RegressionUndefined",
    "ExperimentAbort",
]
