import pytest

from analysis import (
    bands_to_dataframe,
    calculate_chance_of_success,
    calculate_percentiles,
    generate_percentile_band_data,
    summarize_outcomes,
)
from engine.runner import build_result


def _runs(*paths):
    return [build_result(f"sim-{i}", p) for i, p in enumerate(paths)]


def test_empty_input_gives_zero_result():
    chance = calculate_chance_of_success([])
    assert chance.to_dict() == {
        "success_rate": 0.0,
        "successful_simulations": 0,
        "total_simulations": 0,
        "yearly_success_rates": [],
    }


def test_all_successful():
    chance = calculate_chance_of_success(_runs([1, 2], [3, 4], [5, 6]))
    assert chance.success_rate == 100
    assert chance.successful_simulations == 3
    assert chance.yearly_success_rates == (100.0, 100.0)


def test_all_failed():
    chance = calculate_chance_of_success(_runs([0], [5, 0]))
    assert chance.success_rate == 0


def test_yearly_rates_ignore_runs_that_already_ended():
    chance = calculate_chance_of_success(_runs([100, 50, 25], [100, 0]))
    assert chance.success_rate == 50
    # year 2 only has the surviving run in its denominator
    assert chance.yearly_success_rates == (100.0, 50.0, 100.0)


def test_percentiles_of_nothing():
    assert calculate_percentiles([], [10, 50, 90]) == {}


def test_nearest_rank_percentiles():
    sims = _runs(*[[float(v)] for v in range(1, 11)])
    result = calculate_percentiles(sims, [0, 10, 50, 90, 100])
    assert result == {0: [1.0], 10: [2.0], 50: [6.0], 90: [10.0], 100: [10.0]}


def test_percentiles_use_only_runs_alive_that_year():
    sims = _runs([10, 20, 30], [5, 0], [1])
    result = calculate_percentiles(sims, [50])
    assert result[50] == [5.0, 20.0, 30.0]


def test_band_rows_carry_age():
    rows = generate_percentile_band_data(_runs([1, 2], [3, 4]), [50], start_age=40)
    assert [(r.year, r.age) for r in rows] == [(0, 40), (1, 41)]
    assert rows[1][50] == 4.0


def test_bands_dataframe_columns():
    rows = generate_percentile_band_data(_runs([1, 2], [3, 4]), [10, 50], start_age=40)
    frame = bands_to_dataframe(rows)
    assert list(frame.columns) == ["year", "age", "p10", "p50"]
    assert bands_to_dataframe([]).empty


def test_summarize_outcomes():
    summary = summarize_outcomes(_runs([100, 200], [50, 0], [300, 400]))
    assert list(summary["Metric"]) == ["Final Balance", "Years Projected", "Depletion Year"]
    final = summary.set_index("Metric").loc["Final Balance"]
    assert final["Count"] == 3
    assert final["Mean"] == pytest.approx(200.0)
    assert final["Min"] == 0.0
