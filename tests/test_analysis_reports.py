import pytest

from analysis import (
    analyze_sequence_risk,
    calculate_chance_of_success,
    compute_run_metrics,
    depletion_probability_by_age,
    generate_plan_report,
    success_confidence_interval,
)
from analysis.aggregator import ChanceOfSuccess
from core.config import InflationSettings, MonteCarloConfig, ProjectionSettings, ReturnSequenceConfig
from core.schema import Profile
from engine import run_monte_carlo_analysis
from engine.runner import build_result


def test_confidence_interval_half_success():
    chance = ChanceOfSuccess(success_rate=50.0, successful_simulations=50, total_simulations=100)
    interval = success_confidence_interval(chance)
    assert interval.probability == 0.5
    assert interval.margin_of_error == pytest.approx(0.098, rel=1e-3)
    assert interval.lower_bound == pytest.approx(0.402, rel=1e-3)


def test_confidence_interval_clipped_and_empty():
    certain = ChanceOfSuccess(success_rate=100.0, successful_simulations=10, total_simulations=10)
    assert success_confidence_interval(certain).upper_bound == 1.0
    empty = success_confidence_interval(calculate_chance_of_success([]))
    assert (empty.probability, empty.margin_of_error) == (0.0, 0.0)


def test_confidence_level_must_be_a_fraction():
    chance = calculate_chance_of_success([])
    with pytest.raises(ValueError):
        success_confidence_interval(chance, level=95)


def test_sequence_risk_split():
    sims = [
        build_result("early", [50, 0]),
        build_result("late", [100] * 15 + [0]),
        build_result("ok", [100] * 20),
    ]
    sequences = [[-20.0] * 20, [5.0] * 20, [8.0] * 20]
    report = analyze_sequence_risk(sims, sequences, window=10)
    assert (report.total_failures, report.early_failures, report.late_failures) == (2, 1, 1)
    assert report.early_failure_rate == pytest.approx(1 / 3)
    assert report.mean_early_return_failed == pytest.approx(-7.5)
    assert report.mean_early_return_successful == pytest.approx(8.0)


def test_depletion_probability_by_age():
    sims = [build_result("a", [1, 0]), build_result("b", [1] * 30 + [0]), build_result("c", [1] * 40)]
    probs = depletion_probability_by_age(sims, start_age=60, ages=[70, 95])
    assert probs == {70: pytest.approx(1 / 3), 95: pytest.approx(2 / 3)}


def test_run_metrics_drawdown():
    frame = compute_run_metrics([build_result("a", [100, 50, 100]), build_result("b", [10, 0])])
    assert list(frame["max_drawdown"]) == [0.5, 1.0]
    assert list(frame["peak_balance"]) == [100.0, 10.0]


def _doomed_analysis():
    profile = Profile(
        age=60,
        current_savings=100_000,
        annual_growth_rate=0,
        annual_spending=50_000,
        projection_settings=ProjectionSettings(inflation=InflationSettings(rate=0)),
    )
    config = MonteCarloConfig(
        num_simulations=20,
        return_sequence_config=ReturnSequenceConfig(mean_return=0, volatility=0, years=40, seed=1),
    )
    return run_monte_carlo_analysis(profile, config)


def test_plan_report_flags_failing_plan():
    report = generate_plan_report(_doomed_analysis(), start_age=60, plan_name="Tight")
    assert report.success_rate == 0.0
    assert report.median_depletion_age == 61
    assert report.prob_depleted_by_85 == 1.0
    assert any(f.startswith("LOW_SUCCESS") for f in report.flags)
    assert any(f.startswith("EARLY_DEPLETION") for f in report.flags)
    assert any(f.startswith("LONGEVITY_RISK") for f in report.flags)

    table = report.to_dataframe()
    assert table.iloc[0]["Value"] == "Tight"
    assert table.iloc[-1]["Metric"] == "FLAGS"


def test_plan_report_needs_simulations(make_profile):
    config = MonteCarloConfig(num_simulations=0, return_sequence_config=ReturnSequenceConfig(years=5))
    with pytest.raises(ValueError):
        generate_plan_report(run_monte_carlo_analysis(make_profile(), config), start_age=60)
