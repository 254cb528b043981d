"""Trial state machine for the Fitts's Law pointing task.

The :class:`TrialRunner` owns the whole session: the shuffled trial sequence,
the pointer into it, and the append-only record store.  A presentation layer
(PsychoPy, a test, or the scripted participant in :mod:`fitts_law.simulation`)
drives it by calling the named event methods:

``initialize`` → ``on_start_triggered`` → ``on_target_hit`` → ``poll`` ...

Each event is handled to completion before returning.  Events that arrive in
a state that cannot accept them (a hit before START, a second hit during the
settling pause, anything after the last trial) are ignored.

The pause between trials is a :class:`ScheduledTransition` rather than a
sleep; the caller advances time through :meth:`TrialRunner.poll`, which makes
the timing fully deterministic under test.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import random
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from .analysis import AnalysisResult, ConditionSummary, RegressionResult, analyze
from .conditions import Condition
from .errors import ConfigurationError, SequenceStateError, TimingAnomaly
from .export import records_to_csv
from .geometry import Bounds, Point, place_target, random_angle
from .recorder import RecordStore, TrialRecord, build_trial_record, normalize_participant_id
from .sequence import TrialSpec, build_trial_sequence

if TYPE_CHECKING:
    from .config import ExperimentConfig

CompletionCallback = Callable[
    [Tuple[ConditionSummary, ...], Optional[RegressionResult]], None
]

DEFAULT_SETTLE_DELAY_MS: float = 500.0


def monotonic_ms() -> float:
    """Default clock: a monotonic timestamp in milliseconds."""

    return time.perf_counter() * 1000.0


class TrialState(Enum):
    IDLE = "idle"
    AWAITING_START = "awaiting_start"
    AWAITING_TARGET = "awaiting_target"
    RECORDED = "recorded"
    FINISHED = "finished"


@dataclass
class ScheduledTransition:
    """A deferred action that fires once ``due_ms`` has been reached."""

    due_ms: float
    action: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def is_due(self, now_ms: float) -> bool:
        return not self.cancelled and now_ms >= self.due_ms


class TrialRunner:
    """Drive one participant through the shuffled trial sequence."""

    def __init__(
        self,
        conditions: Sequence[Condition],
        bounds: Bounds,
        *,
        settle_delay_ms: float = DEFAULT_SETTLE_DELAY_MS,
        rng: random.Random | None = None,
        clock: Callable[[], float] = monotonic_ms,
        on_complete: CompletionCallback | None = None,
        log_to_console: bool = False,
    ) -> None:
        if not conditions:
            raise ConfigurationError("At least one condition is required")
        if settle_delay_ms < 0:
            raise ConfigurationError(f"Settle delay must not be negative, got {settle_delay_ms}")
        self.conditions: Tuple[Condition, ...] = tuple(conditions)
        self.bounds = bounds
        self.settle_delay_ms = settle_delay_ms
        self.on_complete = on_complete
        self.log_to_console = log_to_console
        self._rng = rng or random.Random()
        self._clock = clock

        self.state = TrialState.IDLE
        self.participant_id = normalize_participant_id(None)
        self.results: AnalysisResult | None = None
        self.timing_anomalies: List[TimingAnomaly] = []
        self.ignored_events = 0
        self._sequence: List[TrialSpec] = []
        self._pointer = 0
        self._store = RecordStore()
        self._pending: ScheduledTransition | None = None
        self._target: Point | None = None
        self._start_ms: float | None = None

    @classmethod
    def from_config(
        cls,
        config: "ExperimentConfig",
        *,
        clock: Callable[[], float] = monotonic_ms,
        on_complete: CompletionCallback | None = None,
    ) -> "TrialRunner":
        """Build a runner from a validated :class:`ExperimentConfig`."""

        conditions = config.validate()
        return cls(
            conditions,
            config.bounds(),
            settle_delay_ms=config.settle_delay_ms,
            rng=random.Random(config.seed),
            clock=clock,
            on_complete=on_complete,
            log_to_console=config.log_trials_to_console,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def records(self) -> Tuple[TrialRecord, ...]:
        return self._store.records

    @property
    def sequence(self) -> Tuple[TrialSpec, ...]:
        return tuple(self._sequence)

    @property
    def current_spec(self) -> TrialSpec | None:
        """The trial currently on screen, if any."""

        if self.state in (TrialState.AWAITING_START, TrialState.AWAITING_TARGET):
            return self._sequence[self._pointer]
        return None

    @property
    def target_position(self) -> Point | None:
        return self._target

    @property
    def pending_transition(self) -> ScheduledTransition | None:
        return self._pending

    @property
    def last_movement_time_ms(self) -> float | None:
        records = self._store.records
        return records[-1].movement_time_ms if records else None

    def progress(self) -> Tuple[int, int]:
        """Return ``(completed, total)`` trial counts."""

        return len(self._store), len(self._sequence)

    def running_accuracy_pct(self) -> float:
        return self._store.accuracy_pct()

    def export_records(self) -> str:
        """Return the records collected so far as CSV text."""

        return records_to_csv(self._store.records)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def initialize(self, repetitions: int, participant_id: str | None = None) -> TrialSpec:
        """Build a fresh shuffled sequence and wait for the first START.

        Any previous session held by this runner is discarded.
        """

        sequence = build_trial_sequence(self.conditions, repetitions, self._rng)
        self._cancel_pending()
        self._sequence = sequence
        self._pointer = 0
        self._store = RecordStore()
        self._clear_trial_context()
        self.participant_id = normalize_participant_id(participant_id)
        self.results = None
        self.timing_anomalies = []
        self.ignored_events = 0
        self.state = TrialState.AWAITING_START
        self._log(
            f"Session for '{self.participant_id}': {len(sequence)} trials "
            f"({len(self.conditions)} conditions x {repetitions})"
        )
        return sequence[0]

    def reset(self) -> None:
        """Drop the session and return to :attr:`TrialState.IDLE`."""

        self._cancel_pending()
        self._sequence = []
        self._pointer = 0
        self._store = RecordStore()
        self._clear_trial_context()
        self.participant_id = normalize_participant_id(None)
        self.results = None
        self.timing_anomalies = []
        self.ignored_events = 0
        self.state = TrialState.IDLE

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def on_start_triggered(self, timestamp_ms: float | None = None) -> Point | None:
        """Handle the START action: place the target and begin timing.

        Returns the clamped target centre, or ``None`` if the event was ignored.
        """

        try:
            spec = self._require(TrialState.AWAITING_START)
        except SequenceStateError as exc:
            self._ignore(exc)
            return None

        target = place_target(spec.distance, spec.width, self.bounds, random_angle(self._rng))
        self._target = target
        self._start_ms = self._now(timestamp_ms)
        self.state = TrialState.AWAITING_TARGET
        return target

    def on_target_hit(
        self,
        click_x: float,
        click_y: float,
        click_timestamp_ms: float | None = None,
    ) -> TrialRecord | None:
        """Handle a click on the target and record the trial.

        Returns the new record, or ``None`` if the event was ignored.  A negative
        movement time is rejected: the same trial goes back to waiting for START
        and the :class:`TimingAnomaly` is re-raised after being logged.
        """

        try:
            spec = self._require(TrialState.AWAITING_TARGET)
        except SequenceStateError as exc:
            self._ignore(exc)
            return None

        assert self._target is not None and self._start_ms is not None
        end_ms = self._now(click_timestamp_ms)
        try:
            record = build_trial_record(
                spec=spec,
                trial_number=self._pointer + 1,
                participant_id=self.participant_id,
                start_ms=self._start_ms,
                end_ms=end_ms,
                target=self._target,
                click=(click_x, click_y),
            )
        except TimingAnomaly as exc:
            self.timing_anomalies.append(exc)
            self._clear_trial_context()
            self.state = TrialState.AWAITING_START
            print(f"Warning: {exc}; trial {self._pointer + 1} will be shown again.")
            raise

        self._store.append(record)
        self._pointer += 1
        self._clear_trial_context()
        self.state = TrialState.RECORDED
        self._pending = ScheduledTransition(
            due_ms=end_ms + self.settle_delay_ms,
            action=self._advance,
        )
        self._log(
            f"Trial {record.trial_number}/{len(self._sequence)} "
            f"ID={record.id:.2f} MT={record.movement_time_ms:.0f} ms "
            f"error={record.error_distance:.1f} px "
            f"{'hit' if record.accurate else 'miss'}"
        )
        return record

    def poll(self, now_ms: float | None = None) -> bool:
        """Fire the settling transition if it is due.  Returns ``True`` if it fired."""

        pending = self._pending
        if pending is None or not pending.is_due(self._now(now_ms)):
            return False
        self._pending = None
        pending.action()
        return True

    def cancel_pending(self) -> bool:
        """Cancel the scheduled transition, if any.  Returns ``True`` if one was dropped.

        The runner then stays in :attr:`TrialState.RECORDED` until
        :meth:`reset` or :meth:`initialize` is called.
        """

        return self._cancel_pending()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _advance(self) -> None:
        if self._pointer < len(self._sequence):
            self.state = TrialState.AWAITING_START
            return
        self.state = TrialState.FINISHED
        self.results = analyze(self._store.records)
        self._log(f"Session complete: {len(self._store)} trials recorded")
        if self.on_complete is not None:
            self.on_complete(self.results.summaries, self.results.regression)

    def _require(self, expected: TrialState) -> TrialSpec:
        if self.state is not expected:
            raise SequenceStateError(
                f"Expected {expected.value} but runner is {self.state.value}"
            )
        return self._sequence[self._pointer]

    def _ignore(self, exc: SequenceStateError) -> None:
        self.ignored_events += 1
        self._log(f"Ignored event: {exc}")

    def _cancel_pending(self) -> bool:
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        pending.cancel()
        return True

    def _clear_trial_context(self) -> None:
        self._target = None
        self._start_ms = None

    def _now(self, timestamp_ms: float | None) -> float:
        return self._clock() if timestamp_ms is None else float(timestamp_ms)

    def _log(self, message: str) -> None:
        if self.log_to_console:
            print(message)


__all__ = [
    "DEFAULT_SETTLE_DELAY_MS",
    "ScheduledTransition",
    "TrialRunner",
    "TrialState",
    "monotonic_ms",
]
