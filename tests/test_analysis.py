import math

import pytest

from fitts_law.analysis import (
    analyze,
    fit_regression,
    format_summary_table,
    summarize_conditions,
)
from fitts_law.conditions import Condition
from fitts_law.errors import RegressionUndefined
from fitts_law.recorder import TrialRecord

_counter = iter(range(1, 10_000))


def make_record(condition_index, distance, width, mt, accurate=True):
    condition = Condition.from_pair(distance, width)
    return TrialRecord(
        trial_number=next(_counter),
        participant_id="p01",
        timestamp="2024-01-02T03:04:05.678Z",
        condition_index=condition_index,
        distance=condition.distance,
        width=condition.width,
        id=condition.id,
        movement_time_ms=mt,
        error_distance=0.0 if accurate else width,
        accurate=accurate,
        click_x=0.0,
        click_y=0.0,
        target_x=0.0,
        target_y=0.0,
    )


def test_mean_and_population_sd():
    records = [make_record(0, 200, 40, mt) for mt in (400, 500, 600)]
    (summary,) = summarize_conditions(records)
    assert summary.mean_mt == pytest.approx(500.0)
    assert summary.sd_mt == pytest.approx(math.sqrt((100**2 + 0 + 100**2) / 3))
    assert summary.sd_mt == pytest.approx(81.65, abs=0.01)
    assert summary.trial_count == 3


def test_error_rate_and_throughput():
    records = [
        make_record(0, 300, 20, 800, accurate=True),
        make_record(0, 300, 20, 800, accurate=True),
        make_record(0, 300, 20, 800, accurate=False),
        make_record(0, 300, 20, 800, accurate=True),
    ]
    (summary,) = summarize_conditions(records)
    assert summary.error_rate_pct == pytest.approx(25.0)
    assert summary.throughput == pytest.approx(4.0 / 0.8)


def test_groups_sorted_by_id_and_keyed_by_condition_index():
    records = [
        make_record(0, 500, 20, 900),
        make_record(1, 100, 80, 300),
        # same index of difficulty as condition 3, still its own group
        make_record(2, 100, 50, 400),
        make_record(3, 200, 100, 420),
    ]
    summaries = summarize_conditions(records)
    assert [s.condition_index for s in summaries] == [1, 2, 3, 0]
    assert summaries[1].id == pytest.approx(summaries[2].id)


def test_two_groups_fit_perfectly():
    records = [make_record(0, 100, 80, 350), make_record(1, 500, 20, 900)]
    regression = fit_regression(summarize_conditions(records))
    assert regression.r_squared == pytest.approx(1.0)


def test_regression_matches_least_squares_formula():
    # IDs of exactly 1, 2 and 3 bits: D/W = 1, 3, 7
    records = [
        make_record(0, 10, 10, 300),
        make_record(1, 30, 10, 500),
        make_record(2, 70, 10, 400),
    ]
    regression = fit_regression(summarize_conditions(records))
    assert regression.slope == pytest.approx(50.0)
    assert regression.intercept == pytest.approx(300.0)
    assert regression.r_squared == pytest.approx(0.25)
    assert regression.predict(2.0) == pytest.approx(400.0)
    assert regression.equation() == "MT = 300.0 + 50.0 × ID"


def test_regression_uses_condition_means_not_raw_trials():
    records = [
        make_record(0, 10, 10, 100),
        make_record(0, 10, 10, 300),
        make_record(1, 30, 10, 400),
        make_record(2, 70, 10, 600),
    ]
    regression = fit_regression(summarize_conditions(records))
    assert regression.slope == pytest.approx(200.0)
    assert regression.intercept == pytest.approx(0.0, abs=1e-9)
    assert regression.r_squared == pytest.approx(1.0)


def test_flat_means_report_a_perfect_horizontal_fit():
    records = [make_record(0, 10, 10, 500), make_record(1, 30, 10, 500)]
    regression = fit_regression(summarize_conditions(records))
    assert regression.slope == pytest.approx(0.0)
    assert regression.r_squared == 1.0


def test_regression_undefined_for_a_single_group():
    summaries = summarize_conditions([make_record(0, 200, 40, 500)])
    with pytest.raises(RegressionUndefined):
        fit_regression(summaries)


def test_regression_undefined_when_ids_do_not_vary():
    summaries = summarize_conditions(
        [make_record(0, 100, 50, 400), make_record(1, 200, 100, 450)]
    )
    with pytest.raises(RegressionUndefined):
        fit_regression(summaries)


def test_analyze_reports_undefined_regression():
    result = analyze([make_record(0, 200, 40, 500)])
    assert not result.regression_defined
    assert result.regression is None
    assert "two condition groups" in result.regression_error
    assert "Regression undefined" in format_summary_table(result)


def test_analyze_empty_records():
    result = analyze([])
    assert result.summaries == ()
    assert result.regression is None
    assert "(no trials recorded)" in format_summary_table(result)


def test_summary_table_lists_every_condition():
    records = [make_record(0, 100, 80, 350), make_record(1, 500, 20, 900)]
    table = format_summary_table(analyze(records))
    assert "MT = " in table
    assert "R² = 1.000" in table
    assert len(table.splitlines()) == 2 + 2 + 1 + 2
