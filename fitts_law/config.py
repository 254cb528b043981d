"""Configuration helpers for the Fitts's Law pointing experiment.

The :class:`ExperimentConfig` dataclass stores the user-editable parameters for
both the trial engine and the PsychoPy window.  Keeping these values in a
separate module makes it easy to discover what can be tweaked without touching
the trial or data management code.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .conditions import DEFAULT_CONDITIONS, Condition, build_conditions
from .errors import ConfigurationError
from .geometry import Bounds
from .sequence import validate_repetitions


@dataclass
class ExperimentConfig:
    """Container for experiment parameters and runtime options."""

    experiment_name: str = "fitts_law"
    condition_pairs: List[Tuple[float, float]] = field(
        default_factory=lambda: list(DEFAULT_CONDITIONS)
    )
    repetitions: int = 5
    participant_id: str = ""
    settle_delay_ms: float = 500.0
    start_target_size: float = 60.0
    results_directory: str = "data"
    full_screen: bool = False
    window_size: Tuple[int, int] = (1200, 800)
    background_color: Sequence[float] = (1.0, 1.0, 1.0)
    target_color: str = "#667eea"
    start_color: str = "#f5576c"
    quit_keys: Tuple[str, ...] = ("escape",)
    screen_index: int = 0
    seed: Optional[int] = None
    log_trials_to_console: bool = False
    debug_mode: bool = False
    debug_window_size: Tuple[int, int] = (1024, 768)

    def active_window_size(self) -> Tuple[int, int]:
        if self.debug_mode:
            return self.debug_window_size
        return self.window_size

    def bounds(self) -> Bounds:
        """Return the presentation area used for target placement."""

        width, height = self.active_window_size()
        return Bounds(width=float(width), height=float(height))

    def conditions(self) -> List[Condition]:
        return build_conditions(self.condition_pairs)

    def validate(self) -> List[Condition]:
        """Check every option the trial engine depends on.

        Returns the built conditions so callers do not have to rebuild them.
        Raises :class:`ConfigurationError` on the first problem found.
        """

        conditions = self.conditions()
        validate_repetitions(self.repetitions)
        if self.settle_delay_ms < 0:
            raise ConfigurationError(
                f"Settle delay must not be negative, got {self.settle_delay_ms}"
            )
        bounds = self.bounds()
        widest = max(condition.width for condition in conditions)
        if not bounds.fits(max(widest, self.start_target_size)):
            raise ConfigurationError(
                f"Window {bounds.width:g}x{bounds.height:g} is too small for a "
                f"{max(widest, self.start_target_size):g} px target"
            )
        return conditions

    def instructions_text(self) -> str:
        """Return an instruction string for the on-screen dialog."""

        quit_names = ", ".join(key.upper() for key in self.quit_keys)
        return (
            "Fitts's Law Pointing Task\n\n"
            "Click the START button in the middle of the screen. A target will "
            "appear somewhere around it.\n"
            "Move to the target and click it as quickly and accurately as you can.\n\n"
            f"Each of the {len(self.condition_pairs)} target sizes/distances is shown "
            f"{self.repetitions} times in random order.\n"
            f"Press {quit_names} at any time to exit early."
        )
