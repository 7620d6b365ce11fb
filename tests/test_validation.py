import logging
from datetime import date

from core.config import Frequency
from core.schema import Account, AccountType, CashFlowPriority, Expense, Goal, Income, TaxCharacteristic
from validation import check_priorities, validate_goals, validate_profile


def _priority(id, order, pct, mandatory=False):
    return CashFlowPriority(id=id, order=order, allocation_percentage=pct, mandatory=mandatory)


def test_clean_priority_ladder():
    result = check_priorities([_priority("a", 1, 50, mandatory=True), _priority("b", 2, 30)])
    assert result.is_valid
    assert result.warnings == []
    assert "All checks passed" in result.summary()


def test_over_allocation_is_a_warning_not_an_error(caplog):
    with caplog.at_level(logging.WARNING, logger="validation.validators"):
        result = check_priorities([_priority("a", 1, 80), _priority("b", 2, 30)])
    assert result.is_valid
    assert any("110%" in w for w in result.warnings)
    assert any("110%" in rec.getMessage() for rec in caplog.records)


def test_duplicate_ranks_and_late_mandatory():
    result = check_priorities([
        _priority("a", 1, 10),
        _priority("b", 1, 10),
        _priority("rent", 3, 10, mandatory=True),
    ])
    assert any("Duplicate priority ranks" in w for w in result.warnings)
    assert any("'rent'" in w for w in result.warnings)


def test_profile_checks(make_profile):
    profile = make_profile(
        annual_growth_rate=0.07,
        accounts=[
            Account(id="x", type=AccountType.TAXABLE, balance=-5, tax_characteristic=TaxCharacteristic.TAXABLE),
            Account(id="x", type=AccountType.LIABILITY, balance=100, tax_characteristic=TaxCharacteristic.NON_DEDUCTIBLE,
                    interest_rate=80),
        ],
    )
    result = validate_profile(profile)
    assert not result.is_valid
    assert any("Duplicate account ids" in e for e in result.errors)
    assert any("negative balance" in e for e in result.errors)
    assert any("positive balance" in w for w in result.warnings)
    assert any("interest rate 80" in w for w in result.warnings)
    assert "ERRORS (2)" in result.summary()


def test_profile_with_no_horizon(make_profile):
    result = validate_profile(make_profile(age=100, max_projection_years=None))
    assert result.is_valid
    assert any("no projection years" in w for w in result.warnings)


def test_goal_checks():
    goals = [
        Goal(id="g", target_amount=0, start_date=date(2024, 1, 1), target_date=date(2023, 1, 1)),
        Goal(id="g", target_amount=100, start_date=date(2024, 1, 1), target_date=date(2025, 1, 1)),
    ]
    result = validate_goals(goals)
    assert len(result.errors) == 3
    merged = result.merge(check_priorities([]))
    assert merged.errors == result.errors


def test_goal_warnings_are_logged(caplog):
    goal = Goal(id="g", target_amount=100, current_amount=-5,
                start_date=date(2024, 1, 1), target_date=date(2025, 1, 1))
    with caplog.at_level(logging.WARNING, logger="validation.validators"):
        result = validate_goals([goal])
    assert result.is_valid
    assert any("negative current amount" in rec.getMessage() for rec in caplog.records)


def test_income_and_expense_stream_checks(make_profile):
    profile = make_profile(
        incomes=[Income(id="flat", amount=1_000, frequency=Frequency.MONTHLY, associated_expenses=12_000)],
        expenses=[Expense(id="flat", amount=500, start_year=5, end_year=5)],
    )
    result = validate_profile(profile)
    assert any("Duplicate income/expense ids" in e for e in result.errors)
    assert any("end year 5 is not after its start year 5" in e for e in result.errors)
    assert any("fully consumed" in w for w in result.warnings)
