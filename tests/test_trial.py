import math
import random

import pytest

from fitts_law.conditions import build_conditions
from fitts_law.config import ExperimentConfig
from fitts_law.errors import ConfigurationError, TimingAnomaly
from fitts_law.geometry import Bounds, euclidean_distance
from fitts_law.trial import TrialRunner, TrialState


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_runner(bounds=Bounds(2000, 2000), pairs=((200, 40), (400, 20)), **kwargs):
    kwargs.setdefault("rng", random.Random(11))
    kwargs.setdefault("clock", FakeClock())
    return TrialRunner(build_conditions(pairs), bounds, **kwargs)


def complete_trial(runner, start_ms, mt_ms=400.0):
    target = runner.on_start_triggered(start_ms)
    record = runner.on_target_hit(target[0], target[1], start_ms + mt_ms)
    runner.poll(start_ms + mt_ms + runner.settle_delay_ms)
    return record


def test_initialize_returns_first_trial():
    runner = make_runner()
    assert runner.state is TrialState.IDLE
    first = runner.initialize(3, "  ")
    assert runner.state is TrialState.AWAITING_START
    assert runner.current_spec == first
    assert first.position == 0
    assert runner.participant_id == "anonymous"
    assert runner.progress() == (0, 6)


def test_invalid_repetitions_block_start():
    runner = make_runner()
    with pytest.raises(ConfigurationError):
        runner.initialize(0, "p01")
    assert runner.state is TrialState.IDLE


def test_events_before_initialize_are_ignored():
    runner = make_runner()
    assert runner.on_start_triggered(0.0) is None
    assert runner.on_target_hit(10.0, 10.0, 5.0) is None
    assert runner.ignored_events == 2
    assert runner.state is TrialState.IDLE


def test_hit_without_start_produces_no_record():
    runner = make_runner()
    runner.initialize(1, "p01")
    assert runner.on_target_hit(1000.0, 1000.0, 50.0) is None
    assert runner.records == ()
    assert runner.state is TrialState.AWAITING_START


def test_start_places_target_at_condition_distance():
    runner = make_runner()
    spec = runner.initialize(1, "p01")
    target = runner.on_start_triggered(100.0)
    assert runner.state is TrialState.AWAITING_TARGET
    assert runner.target_position == target
    assert euclidean_distance(target, runner.bounds.center) == pytest.approx(spec.distance)
    # a second START while the target is up is ignored
    assert runner.on_start_triggered(150.0) is None


def test_target_hit_records_trial_and_schedules_pause():
    runner = make_runner()
    spec = runner.initialize(2, "p01")
    target = runner.on_start_triggered(1000.0)
    record = runner.on_target_hit(target[0] + 3.0, target[1] + 4.0, 1450.0)

    assert record.trial_number == 1
    assert record.condition_index == spec.condition_index
    assert record.movement_time_ms == pytest.approx(450.0)
    assert record.error_distance == pytest.approx(5.0)
    assert record.accurate
    assert (record.target_x, record.target_y) == target
    assert runner.state is TrialState.RECORDED
    assert runner.records == (record,)
    assert runner.last_movement_time_ms == pytest.approx(450.0)
    assert runner.running_accuracy_pct() == pytest.approx(100.0)

    # stale click during the settling pause
    assert runner.on_target_hit(target[0], target[1], 1500.0) is None
    assert runner.on_start_triggered(1500.0) is None
    assert runner.target_position is None
    assert len(runner.records) == 1

    assert runner.poll(1949.0) is False
    assert runner.state is TrialState.RECORDED
    assert runner.poll(1950.0) is True
    assert runner.state is TrialState.AWAITING_START
    assert runner.current_spec == runner.sequence[1]


def test_pause_uses_runner_clock_when_no_time_given():
    clock = FakeClock(now=0.0)
    runner = make_runner(clock=clock)
    runner.initialize(1, "p01")
    clock.now = 10.0
    target = runner.on_start_triggered()
    clock.now = 310.0
    record = runner.on_target_hit(*target)
    assert record.movement_time_ms == pytest.approx(300.0)
    clock.now = 700.0
    assert runner.poll() is False
    clock.now = 810.0
    assert runner.poll() is True


def test_targets_are_clamped_to_small_bounds():
    runner = make_runner(bounds=Bounds(300, 300), pairs=((500, 20),))
    runner.initialize(20, "p01")
    now = 0.0
    for _ in range(20):
        x, y = runner.on_start_triggered(now)
        assert 10.0 <= x <= 290.0
        assert 10.0 <= y <= 290.0
        now += 300.0
        record = runner.on_target_hit(x, y, now)
        assert (record.target_x, record.target_y) == (x, y)
        now += 500.0
        runner.poll(now)


def test_full_session_runs_analysis_and_signals_completion():
    calls = []
    runner = make_runner(on_complete=lambda summaries, regression: calls.append((summaries, regression)))
    runner.initialize(3, "p01")
    now = 0.0
    while runner.state is not TrialState.FINISHED:
        mt = 300.0 + 100.0 * runner.current_spec.id
        complete_trial(runner, now, mt)
        now += 2000.0

    assert [r.trial_number for r in runner.records] == [1, 2, 3, 4, 5, 6]
    assert runner.current_spec is None
    assert len(calls) == 1
    summaries, regression = calls[0]
    assert len(summaries) == 2
    assert all(summary.trial_count == 3 for summary in summaries)
    assert regression.slope == pytest.approx(100.0)
    assert regression.intercept == pytest.approx(300.0)
    assert runner.results.summaries == summaries

    # nothing is accepted once the session is over
    assert runner.on_start_triggered(now) is None
    assert runner.on_target_hit(0.0, 0.0, now) is None
    assert len(runner.records) == 6


def test_single_condition_session_reports_undefined_regression():
    calls = []
    runner = make_runner(pairs=((200, 40),), on_complete=lambda s, r: calls.append(r))
    runner.initialize(2, "p01")
    complete_trial(runner, 0.0)
    complete_trial(runner, 2000.0)
    assert runner.state is TrialState.FINISHED
    assert calls == [None]
    assert runner.results.regression_error


def test_negative_movement_time_reshows_the_same_trial():
    runner = make_runner()
    first = runner.initialize(1, "p01")
    target = runner.on_start_triggered(1000.0)
    with pytest.raises(TimingAnomaly):
        runner.on_target_hit(target[0], target[1], 900.0)

    assert runner.records == ()
    assert runner.state is TrialState.AWAITING_START
    assert runner.current_spec == first
    assert len(runner.timing_anomalies) == 1
    assert runner.pending_transition is None

    record = complete_trial(runner, 2000.0)
    assert record.trial_number == 1
    assert record.condition_index == first.condition_index


def test_non_finite_click_time_reshows_the_same_trial():
    runner = make_runner()
    first = runner.initialize(1, "p01")
    target = runner.on_start_triggered(100.0)
    with pytest.raises(TimingAnomaly):
        runner.on_target_hit(target[0], target[1], float("nan"))

    assert runner.records == ()
    assert runner.state is TrialState.AWAITING_START
    assert runner.pending_transition is None
    assert runner.current_spec == first
    assert len(runner.timing_anomalies) == 1

    complete_trial(runner, 1000.0)
    assert runner.state is TrialState.FINISHED
    assert len(runner.records) == 1
    assert runner.results is not None


def test_cancelled_pause_never_fires():
    runner = make_runner()
    runner.initialize(1, "p01")
    target = runner.on_start_triggered(0.0)
    runner.on_target_hit(target[0], target[1], 300.0)
    pending = runner.pending_transition
    assert runner.cancel_pending() is True
    assert pending.cancelled
    assert runner.poll(math.inf) is False
    assert runner.state is TrialState.RECORDED
    assert runner.cancel_pending() is False


def test_reset_and_reinitialize_start_over():
    runner = make_runner()
    runner.initialize(1, "p01")
    runner.on_target_hit(0.0, 0.0, 5000.0)
    target = runner.on_start_triggered(6000.0)
    with pytest.raises(TimingAnomaly):
        runner.on_target_hit(target[0], target[1], 5000.0)
    assert runner.ignored_events == 1
    runner.reset()
    assert runner.state is TrialState.IDLE
    assert runner.records == ()
    assert runner.progress() == (0, 0)
    assert runner.timing_anomalies == []
    assert runner.ignored_events == 0
    assert runner.participant_id == "anonymous"

    runner.initialize(2, "p02")
    assert runner.participant_id == "p02"
    assert runner.progress() == (0, 4)


def test_export_records_at_any_time():
    runner = make_runner()
    runner.initialize(1, "p01")
    assert runner.export_records().count("\n") == 1
    complete_trial(runner, 0.0)
    lines = runner.export_records().splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("1,p01,")


def test_from_config_is_reproducible_with_a_seed():
    config = ExperimentConfig(seed=5, repetitions=2)
    first = TrialRunner.from_config(config)
    second = TrialRunner.from_config(config)
    first.initialize(config.repetitions, "a")
    second.initialize(config.repetitions, "b")
    assert [s.condition_index for s in first.sequence] == [
        s.condition_index for s in second.sequence
    ]
    assert first.on_start_triggered(0.0) == second.on_start_triggered(0.0)


def test_negative_settle_delay_rejected():
    with pytest.raises(ConfigurationError):
        make_runner(settle_delay_ms=-5)
