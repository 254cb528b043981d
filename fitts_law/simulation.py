"""Scripted synthetic participant for dry runs without a display.

The participant follows Fitts's Law, ``MT = a + b * ID``, with Gaussian timing
noise, and lands its clicks around the target centre with a spread tied to
the target width.  With the default spread (``width / 4.133``) roughly 4% of
clicks fall outside the target, the conventional error rate for effective
target width.
"""
from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Optional

from .analysis import AnalysisResult
from .errors import SequenceStateError
from .trial import TrialRunner, TrialState

EFFECTIVE_WIDTH_FACTOR: float = 4.133


@dataclass
class SimulatedParticipant:
    """Parameters of the synthetic pointing model."""

    intercept_ms: float = 150.0
    slope_ms_per_bit: float = 120.0
    timing_sd_ms: float = 40.0
    spread_factor: float = EFFECTIVE_WIDTH_FACTOR
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def movement_time(self, difficulty: float) -> float:
        expected = self.intercept_ms + self.slope_ms_per_bit * difficulty
        return max(1.0, self._rng.gauss(expected, self.timing_sd_ms))

    def click_offset(self, width: float) -> tuple[float, float]:
        sigma = width / self.spread_factor
        return self._rng.gauss(0.0, sigma), self._rng.gauss(0.0, sigma)


def run_simulated_session(
    runner: TrialRunner,
    participant: SimulatedParticipant,
    *,
    repetitions: int,
    participant_id: str = "simulated",
) -> AnalysisResult:
    """Play a whole session through ``runner`` on a virtual clock."""

    runner.initialize(repetitions, participant_id)
    now = 0.0
    while runner.state is not TrialState.FINISHED:
        spec = runner.current_spec
        if spec is None:
            raise SequenceStateError(f"Runner stalled in state {runner.state.value}")
        target = runner.on_start_triggered(now)
        assert target is not None
        now += participant.movement_time(spec.id)
        dx, dy = participant.click_offset(spec.width)
        runner.on_target_hit(target[0] + dx, target[1] + dy, now)
        now += runner.settle_delay_ms
        runner.poll(now)

    assert runner.results is not None
    return runner.results


__all__ = ["SimulatedParticipant", "run_simulated_session"]
