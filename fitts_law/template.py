"""Reusable experiment template utilities.

The :class:`BaseExperiment` class provides lightweight helpers for saving
participant information, the trial CSV, and the analysis summary.  Concrete
experiments extend it and focus on the task-specific presentation logic.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import math
from pathlib import Path
from typing import Dict, Iterable

from .analysis import AnalysisResult
from .export import records_to_csv
from .recorder import TrialRecord


def _json_safe(value: float) -> float | None:
    return value if math.isfinite(value) else None


@dataclass
class BaseExperiment:
    """Core functionality for saving experiment data."""

    experiment_name: str
    results_directory: str = "data"

    def __post_init__(self) -> None:
        self.experiment_info: Dict[str, str] = {}
        self.data_filename: Path | None = None

    # ------------------------------------------------------------------
    # File naming helpers
    # ------------------------------------------------------------------
    def output_dir(self) -> Path:
        path = Path(self.results_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _default_filename(self, suffix: str) -> Path:
        participant = self.experiment_info.get("Participant ID") or "anonymous"
        return self.output_dir() / f"{self.experiment_name}_{participant}{suffix}"

    # ------------------------------------------------------------------
    # Info saving
    # ------------------------------------------------------------------
    def save_experiment_info(self, filename: Path | None = None) -> Path:
        """Write the participant information to disk as JSON."""

        output_filename = filename or self._default_filename("_info.json")
        with open(output_filename, "w", encoding="utf-8") as info_file:
            json.dump(self.experiment_info, info_file, indent=2)
        return output_filename

    # ------------------------------------------------------------------
    # CSV handling
    # ------------------------------------------------------------------
    def save_records_csv(
        self,
        records: Iterable[TrialRecord],
        filename: Path | None = None,
    ) -> Path:
        """Write the trial records (header plus one row per trial) to CSV."""

        output_filename = filename or self._default_filename(".csv")
        with open(output_filename, "w", newline="", encoding="utf-8") as csv_file:
            csv_file.write(records_to_csv(records))
        self.data_filename = output_filename
        return output_filename

    # ------------------------------------------------------------------
    # Analysis summary
    # ------------------------------------------------------------------
    def save_summary_json(self, result: AnalysisResult, filename: Path | None = None) -> Path:
        """Persist the per-condition summaries and regression for inspection."""

        output_filename = filename or self._default_filename("_summary.json")
        payload = {
            "experiment_name": self.experiment_name,
            "data_filename": str(self.data_filename) if self.data_filename else None,
            "conditions": [
                {**asdict(summary), "throughput": _json_safe(summary.throughput)}
                for summary in result.summaries
            ],
            "regression": asdict(result.regression) if result.regression else None,
            "regression_error": result.regression_error,
        }
        with open(output_filename, "w", encoding="utf-8") as summary_file:
            json.dump(payload, summary_file, indent=2)
        return output_filename


__all__ = ["BaseExperiment"]
