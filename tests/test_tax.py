import math

import pytest

from core.config import FilingStatus
from core.schema import Account, AccountType, TaxCharacteristic
from tax import (
    TaxBracket,
    TaxTable,
    brackets_from_rows,
    calculate_capital_gains_tax,
    calculate_ordinary_income_tax,
    calculate_tax,
    effective_rate,
    life_expectancy_factor,
    marginal_rate,
    required_distributions,
    required_minimum_distribution,
)

# cents: 10% to $9,999.99, 20% to $39,999.99, 30% above
BRACKETS = (
    TaxBracket(min=0, max=999_999, rate=0.10),
    TaxBracket(min=1_000_000, max=3_999_999, rate=0.20),
    TaxBracket(min=4_000_000, max=None, rate=0.30),
)


def test_progressive_tax_across_all_brackets():
    # 1,000,000 * .1 + 3,000,000 * .2 + 1,000,000 * .3
    assert calculate_tax(5_000_000, BRACKETS) == 1_000_000


def test_income_inside_first_bracket():
    assert calculate_tax(500_000, BRACKETS) == 50_000


def test_deduction_reduces_taxable_income():
    assert calculate_tax(1_500_000, BRACKETS, deduction=500_000) == 100_000


def test_income_below_deduction_owes_nothing():
    assert calculate_tax(300_000, BRACKETS, deduction=500_000) == 0


def test_bracket_order_does_not_matter():
    assert calculate_tax(5_000_000, tuple(reversed(BRACKETS))) == calculate_tax(5_000_000, BRACKETS)


def test_each_slice_rounds_half_away_from_zero():
    brackets = (TaxBracket(min=0, max=None, rate=0.125),)
    assert calculate_tax(3, brackets) == 0   # 0.375
    assert calculate_tax(4, brackets) == 1   # 0.5


def test_infinite_max_is_unbounded():
    bracket = TaxBracket(min=0, max=math.inf, rate=0.5)
    assert bracket.unbounded
    assert calculate_tax(1_000, (bracket,)) == 500


def test_bracket_width_is_inclusive():
    assert BRACKETS[0].width == 1_000_000
    assert BRACKETS[2].width == math.inf


def test_marginal_and_effective_rates():
    assert marginal_rate(2_000_000, BRACKETS) == 0.20
    assert marginal_rate(0, BRACKETS) == 0.0
    assert effective_rate(5_000_000, BRACKETS) == pytest.approx(0.20)
    assert effective_rate(0, BRACKETS) == 0.0


def test_tax_table_lookup():
    table = TaxTable.from_mapping({
        2025: {
            "single": {
                "brackets": [{"min": 0, "max": 999_999, "rate": 0.1}, {"min": 1_000_000, "max": None, "rate": 0.2}],
                "standard_deduction": 500_000,
            },
        },
    })
    assert table.years == (2025,)
    assert table.tax_for(1_500_000, 2025, FilingStatus.SINGLE) == 100_000
    assert table.tax_for(1_500_000, 2025, "single") == 100_000


def test_tax_table_unknown_year_raises():
    table = TaxTable.from_mapping({2025: {"single": {"brackets": [{"min": 0, "max": None, "rate": 0.1}]}}})
    with pytest.raises(ValueError, match="2024"):
        table.schedule(2024, FilingStatus.SINGLE)


def test_tax_table_unknown_filing_status_raises():
    table = TaxTable.from_mapping({2025: {"single": {"brackets": [{"min": 0, "max": None, "rate": 0.1}]}}})
    with pytest.raises(ValueError):
        table.schedule(2025, FilingStatus.MARRIED_JOINT)
    with pytest.raises(ValueError):
        table.schedule(2025, "widowed")


def test_brackets_from_rows():
    rows = [{"min": 0, "max": 99, "rate": 0.1}, {"min": 100, "rate": 0.2}]
    brackets = brackets_from_rows(rows)
    assert brackets[0] == TaxBracket(0, 99, 0.1)
    assert brackets[1].unbounded


def test_ordinary_income_tax_flat_rate():
    assert calculate_ordinary_income_tax(10_000, 22) == pytest.approx(2_200)
    assert calculate_ordinary_income_tax(-5, 22) == 0.0


def test_capital_gains_use_proportional_basis():
    result = calculate_capital_gains_tax(
        balance=100_000, withdrawal_amount=25_000, cost_basis=60_000, capital_gains_rate=15
    )
    assert result.cost_basis_reduction == pytest.approx(15_000)
    assert result.capital_gains_tax == pytest.approx(1_500)


def test_capital_loss_owes_nothing():
    result = calculate_capital_gains_tax(
        balance=50_000, withdrawal_amount=10_000, cost_basis=80_000, capital_gains_rate=15
    )
    assert result.capital_gains_tax == 0.0


def test_life_expectancy_factor_bounds():
    assert life_expectancy_factor(71) is None
    assert life_expectancy_factor(72) == 27.4
    assert life_expectancy_factor(130) == 1.9


def test_required_minimum_distribution():
    assert required_minimum_distribution(265_000, 73) == pytest.approx(10_000)
    assert required_minimum_distribution(265_000, 72) == 0.0
    assert required_minimum_distribution(265_000, 80, start_age=None) == 0.0
    assert required_minimum_distribution(0, 80) == 0.0


def test_required_distributions_only_from_tax_deferred_accounts():
    accounts = [
        Account(id="ira", type=AccountType.TAX_ADVANTAGED, balance=246_000,
                tax_characteristic=TaxCharacteristic.TAX_DEFERRED),
        Account(id="roth", type=AccountType.TAX_ADVANTAGED, balance=246_000,
                tax_characteristic=TaxCharacteristic.TAX_FREE),
        Account(id="brokerage", type=AccountType.TAXABLE, balance=246_000,
                tax_characteristic=TaxCharacteristic.TAXABLE),
    ]
    due = required_distributions(accounts, 75)
    assert list(due) == ["ira"]
    assert due["ira"] == pytest.approx(10_000)
    assert required_distributions(accounts, 70) == {}
