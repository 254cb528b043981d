"""Fitts's Law pointing experiment.

This package exposes the pieces of a Fitts's Law study: the condition model,
the shuffled trial sequence, the trial state machine, trial recording,
per-condition analysis with the MT-on-ID regression, and CSV export.  None of
these import PsychoPy; the window and mouse handling live in
:mod:`fitts_law.experiment` and are only loaded when the task is launched.
"""

from .analysis import (
    AnalysisResult,
    ConditionSummary,
    RegressionResult,
    analyze,
    fit_regression,
    format_summary_table,
    summarize_conditions,
)
from .conditions import DEFAULT_CONDITIONS, Condition, build_conditions, index_of_difficulty, load_conditions
from .config import ExperimentConfig
from .errors import (
    ConfigurationError,
    ExperimentAbort,
    FittsLawError,
    RegressionUndefined,
    SequenceStateError,
    TimingAnomaly,
)
from .export import EXPORT_HEADERS, export_filename, records_to_csv
from .geometry import Bounds, place_target
from .recorder import RecordStore, TrialRecord, build_trial_record
from .sequence import TrialSpec, build_trial_sequence, fisher_yates_shuffle
from .trial import ScheduledTransition, TrialRunner, TrialState
from .cli import main as run_experiment

__all__ = [
    "AnalysisResult",
    "Bounds",
    "Condition",
    "ConditionSummary",
    "ConfigurationError",
    "DEFAULT_CONDITIONS",
    "EXPORT_HEADERS",
    "ExperimentAbort",
    "ExperimentConfig",
    "FittsLawError",
    "RecordStore",
    "RegressionResult",
    "RegressionUndefined",
    "ScheduledTransition",
    "SequenceStateError",
    "TimingAnomaly",
    "TrialRecord",
    "TrialRunner",
    "TrialSpec",
    "TrialState",
    "analyze",
    "build_conditions",
    "build_trial_record",
    "build_trial_sequence",
    "export_filename",
    "fisher_yates_shuffle",
    "fit_regression",
    "format_summary_table",
    "index_of_difficulty",
    "load_conditions",
    "place_target",
    "records_to_csv",
    "run_experiment",
    "summarize_conditions",
]
