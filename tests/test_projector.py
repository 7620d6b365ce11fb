import pytest

from engine import project, projection_table


def test_fixed_growth_without_sequence(make_profile):
    balances = project(make_profile(current_savings=100_000, annual_growth_rate=5))
    assert balances == pytest.approx([105_000, 110_250, 115_762.5])


def test_sequence_overrides_fixed_rate_including_zero(make_profile):
    profile = make_profile(current_savings=100_000, annual_growth_rate=5)
    assert project(profile, [10, -10, 0]) == pytest.approx([110_000, 99_000, 99_000])


def test_short_sequence_falls_back_to_fixed_rate(make_profile):
    profile = make_profile(current_savings=100_000, annual_growth_rate=5)
    assert project(profile, [0]) == pytest.approx([100_000, 105_000, 110_250])


def test_spending_compounds_with_inflation(make_profile):
    profile = make_profile(
        current_savings=100_000, annual_growth_rate=0, annual_spending=10_000, inflation_rate=10,
        max_projection_years=2,
    )
    # first projected year is already inflated: 11,000 then 12,100
    assert project(profile) == pytest.approx([89_000, 76_900])


def test_spending_stays_nominal_when_adjustment_off(make_profile):
    profile = make_profile(
        current_savings=100_000, annual_growth_rate=0, annual_spending=10_000, inflation_rate=10,
        adjust_spending=False, max_projection_years=2,
    )
    assert project(profile) == pytest.approx([90_000, 80_000])


def test_depletion_floors_at_zero_and_stops(make_profile):
    profile = make_profile(
        current_savings=15_000, annual_growth_rate=0, annual_spending=10_000, max_projection_years=10,
    )
    assert project(profile) == [5_000, 0.0]


def test_horizon_ends_at_age_100(make_profile):
    profile = make_profile(age=97, max_projection_years=None)
    assert len(project(profile)) == 3
    assert project(make_profile(age=100, max_projection_years=None)) == []


def test_each_call_returns_a_fresh_list(make_profile):
    profile = make_profile()
    first = project(profile)
    first.append(-1)
    assert len(project(profile)) == 3


def test_projection_table_matches_project(make_profile):
    profile = make_profile(annual_spending=2_000, inflation_rate=3)
    table = projection_table(profile, [4, 8, -2])
    assert list(table["ending_balance"]) == project(profile, [4, 8, -2])
    assert list(table["age"]) == [60, 61, 62]
    assert list(table["growth_rate"]) == [4, 8, -2]
