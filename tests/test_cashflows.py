import pytest

from core.config import Frequency
from core.schema import AmountChange, Expense, Income
from engine import amount_for_year, annual_expense, annual_income, apply_change_over_time, cash_flow_schedule


def test_yearly_and_monthly_amounts():
    assert amount_for_year(Income(id="pension", amount=20_000), 0) == 20_000
    assert amount_for_year(Expense(id="rent", amount=1_500, frequency=Frequency.MONTHLY), 4) == 18_000


def test_active_span_is_start_inclusive_end_exclusive():
    salary = Income(id="salary", amount=50_000, start_year=2, end_year=4)
    assert [amount_for_year(salary, y) for y in range(5)] == [0, 0, 50_000, 50_000, 0]


def test_one_off_pays_only_in_its_start_year():
    car = Expense(id="car", amount=30_000, frequency=Frequency.ONCE, start_year=3, growth_rate=10)
    assert [amount_for_year(car, y) for y in (2, 3, 4)] == [0, 30_000, 0]


def test_growth_compounds_from_the_start_year():
    raise_ = Income(id="salary", amount=100, start_year=1, growth_rate=10)
    assert amount_for_year(raise_, 1) == 100
    assert amount_for_year(raise_, 3) == pytest.approx(121)


def test_latest_change_wins_and_restarts_growth():
    changes = (AmountChange(year=5, new_amount=2_000), AmountChange(year=2, new_amount=1_500))
    assert apply_change_over_time(1_000, 1, changes) == 1_000
    assert apply_change_over_time(1_000, 3, changes) == 1_500
    assert apply_change_over_time(1_000, 6, changes) == 2_000

    stream = Income(id="consulting", amount=1_000, growth_rate=10, changes=changes)
    assert amount_for_year(stream, 3) == pytest.approx(1_650)
    assert amount_for_year(stream, 5) == 2_000


def test_income_is_net_of_associated_expenses_and_never_negative():
    rental = Income(id="flat", amount=2_000, frequency=Frequency.MONTHLY, associated_expenses=6_000)
    assert amount_for_year(rental, 0) == 18_000
    money_pit = rental.model_copy(update={"associated_expenses": 30_000})
    assert amount_for_year(money_pit, 0) == 0


def test_annual_totals():
    incomes = [Income(id="salary", amount=60_000), Income(id="gift", amount=5_000, taxable=False)]
    expenses = [Expense(id="rent", amount=1_000, frequency=Frequency.MONTHLY), Expense(id="trip", amount=3_000)]
    assert annual_income(incomes, 0) == 65_000
    assert annual_income(incomes, 0, taxable_only=True) == 60_000
    assert annual_expense(expenses, 0) == 15_000
    assert annual_income([], 0) == 0.0


def test_cash_flow_schedule(make_profile):
    profile = make_profile(
        age=40, max_projection_years=3,
        incomes=[Income(id="salary", amount=80_000, end_year=2)],
        expenses=[Expense(id="living", amount=50_000)],
    )
    frame = cash_flow_schedule(profile)
    assert list(frame["age"]) == [40, 41, 42]
    assert list(frame["net"]) == [30_000, 30_000, -50_000]
    assert len(cash_flow_schedule(profile, years=5)) == 5
