"""
Flat-rate tax helpers used by the account-level projection when no bracket
table is injected. Rates are percentages, like everywhere else in the engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.utils import pct


@dataclass(frozen=True)
class CapitalGainsTaxResult:
    capital_gains_tax: float
    cost_basis_reduction: float


def calculate_ordinary_income_tax(amount: float, ordinary_income_rate: float) -> float:
    if amount <= 0 or ordinary_income_rate <= 0:
        return 0.0
    return amount * pct(ordinary_income_rate)


def calculate_capital_gains_tax(
    *,
    balance: float,
    withdrawal_amount: float,
    cost_basis: float,
    capital_gains_rate: float,
) -> CapitalGainsTaxResult:
    """
    Tax on a withdrawal from a taxable account whose basis is spread evenly
    across the balance: withdrawing 25% of the balance uses 25% of the basis.
    """
    if withdrawal_amount <= 0 or capital_gains_rate <= 0 or balance <= 0:
        return CapitalGainsTaxResult(capital_gains_tax=0.0, cost_basis_reduction=0.0)

    proportion = withdrawal_amount / balance
    basis_used = min(cost_basis * proportion, cost_basis)
    gain = max(0.0, withdrawal_amount - basis_used)
    return CapitalGainsTaxResult(
        capital_gains_tax=gain * pct(capital_gains_rate),
        cost_basis_reduction=basis_used,
    )
