"""Descriptive statistics and Fitts's Law regression over trial records.

Trials are grouped by their condition index.  The floating point index of
difficulty is only used for ordering and display, so two conditions whose IDs
agree to many decimal places are never merged by accident.  The regression is
fitted to one point per condition (the mean movement time), not to the raw
trials.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import RegressionUndefined
from .recorder import TrialRecord


@dataclass(frozen=True)
class ConditionSummary:
    """Aggregated statistics for one condition."""

    condition_index: int
    id: float
    distance: float
    width: float
    mean_mt: float
    sd_mt: float
    error_rate_pct: float
    throughput: float
    trial_count: int


@dataclass(frozen=True)
class RegressionResult:
    """Least-squares fit ``MT = intercept + slope * ID``."""

    slope: float
    intercept: float
    r_squared: float

    def predict(self, difficulty: float) -> float:
        return self.intercept + self.slope * difficulty

    def equation(self) -> str:
        return f"MT = {self.intercept:.1f} + {self.slope:.1f} × ID"


@dataclass(frozen=True)
class AnalysisResult:
    """Summaries plus the regression, or the reason it could not be fitted."""

    summaries: Tuple[ConditionSummary, ...]
    regression: Optional[RegressionResult]
    regression_error: Optional[str] = None

    @property
    def regression_defined(self) -> bool:
        return self.regression is not None


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def population_sd(values: Sequence[float]) -> float:
    """Standard deviation dividing by N, not N - 1."""

    centre = mean(values)
    return math.sqrt(sum((value - centre) ** 2 for value in values) / len(values))


def throughput_bits_per_s(difficulty: float, mean_mt_ms: float) -> float:
    """Return ``ID / MT`` in bits per second (infinite for a zero mean MT)."""

    if mean_mt_ms <= 0:
        return math.inf
    return difficulty / (mean_mt_ms / 1000.0)


def _summarize_group(condition_index: int, records: List[TrialRecord]) -> ConditionSummary:
    first = records[0]
    times = [record.movement_time_ms for record in records]
    mean_mt = mean(times)
    errors = sum(1 for record in records if not record.accurate)
    return ConditionSummary(
        condition_index=condition_index,
        id=first.id,
        distance=first.distance,
        width=first.width,
        mean_mt=mean_mt,
        sd_mt=population_sd(times),
        error_rate_pct=100.0 * errors / len(records),
        throughput=throughput_bits_per_s(first.id, mean_mt),
        trial_count=len(records),
    )


def summarize_conditions(records: Iterable[TrialRecord]) -> Tuple[ConditionSummary, ...]:
    """Return one :class:`ConditionSummary` per condition, sorted by ID."""

    groups: Dict[int, List[TrialRecord]] = {}
    for record in records:
        groups.setdefault(record.condition_index, []).append(record)
    summaries = [_summarize_group(index, group) for index, group in groups.items()]
    summaries.sort(key=lambda summary: (summary.id, summary.condition_index))
    return tuple(summaries)


def fit_regression(summaries: Sequence[ConditionSummary]) -> RegressionResult:
    """Ordinary least squares of mean MT on ID across condition summaries.

    Raises
    ------
    RegressionUndefined
        With fewer than two condition groups, or when every group has the same
        ID so the slope denominator vanishes.
    """

    n = len(summaries)
    if n < 2:
        raise RegressionUndefined(
            f"Regression needs at least two condition groups, got {n}"
        )

    ids = [summary.id for summary in summaries]
    mts = [summary.mean_mt for summary in summaries]
    sum_id = sum(ids)
    sum_mt = sum(mts)
    sum_id_mt = sum(i * m for i, m in zip(ids, mts))
    sum_id_sq = sum(i * i for i in ids)

    denominator = n * sum_id_sq - sum_id * sum_id
    if math.isclose(denominator, 0.0, abs_tol=1e-12 * max(1.0, n * sum_id_sq)):
        raise RegressionUndefined("All condition groups share the same index of difficulty")

    slope = (n * sum_id_mt - sum_id * sum_mt) / denominator
    intercept = (sum_mt - slope * sum_id) / n

    mean_mt = sum_mt / n
    ss_total = sum((mt - mean_mt) ** 2 for mt in mts)
    ss_residual = sum((mt - (slope * i + intercept)) ** 2 for i, mt in zip(ids, mts))
    # Flat means leave no variance to explain; the horizontal line fits exactly.
    r_squared = 1.0 if ss_total == 0 else 1.0 - ss_residual / ss_total
    return RegressionResult(slope=slope, intercept=intercept, r_squared=r_squared)


def analyze(records: Iterable[TrialRecord]) -> AnalysisResult:
    """Summarize ``records`` and fit the regression when it is defined."""

    summaries = summarize_conditions(records)
    try:
        regression = fit_regression(summaries)
    except RegressionUndefined as exc:
        return AnalysisResult(summaries=summaries, regression=None, regression_error=str(exc))
    return AnalysisResult(summaries=summaries, regression=regression)


def format_summary_table(result: AnalysisResult) -> str:
    """Render the per-condition results table and the regression caption."""

    header = (
        f"{'ID':>6} {'D':>7} {'W':>6} {'MT (ms)':>9} {'SD':>8} "
        f"{'Err %':>6} {'TP':>7} {'n':>4}"
    )
    lines = [header, "-" * len(header)]
    for summary in result.summaries:
        lines.append(
            f"{summary.id:>6.2f} {summary.distance:>7g} {summary.width:>6g} "
            f"{summary.mean_mt:>9.1f} {summary.sd_mt:>8.1f} "
            f"{summary.error_rate_pct:>6.1f} {summary.throughput:>7.2f} "
            f"{summary.trial_count:>4d}"
        )
    if not result.summaries:
        lines.append("(no trials recorded)")
    lines.append("")
    if result.regression is not None:
        lines.append(result.regression.equation())
        lines.append(f"R² = {result.regression.r_squared:.3f}")
    else:
        lines.append(f"Regression undefined: {result.regression_error}")
    return "\n".join(lines)


__all__ = [
    "AnalysisResult",
    "ConditionSummary",
    "RegressionResult",
    "analyze",
    "fit_regression",
    "format_summary_table",
    "mean",
    "population_sd",
    "summarize_conditions",
    "throughput_bits_per_s",
]
