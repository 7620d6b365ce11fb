"""
Income and expense streams — how much each one pays in a given projection year.

A stream is active for start_year <= year < end_year. Within that span:
  - a one-off stream pays its amount in the start year only
  - a recurring stream pays amount * payments-per-year, where the amount is
    the latest scheduled change at or before the year (or the base amount),
    grown at growth_rate for every year since that amount took effect
  - income is reported net of its associated expenses, never below zero
"""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from core.config import FREQUENCY_MULTIPLIERS, Frequency
from core.schema import AmountChange, CashFlowStream, Expense, Income, Profile
from core.utils import pct


def apply_change_over_time(base_amount: float, year: int, changes: Sequence[AmountChange]) -> float:
    """Per-period amount in force at ``year``: the last change at or before it, else ``base_amount``."""
    amount = base_amount
    for change in sorted(changes, key=lambda c: c.year):
        if year >= change.year:
            amount = change.new_amount
    return amount


def _anchor_year(stream: CashFlowStream, year: int) -> int:
    applied = [c.year for c in stream.changes if c.year <= year]
    return max([stream.start_year] + applied)


def is_active(stream: CashFlowStream, year: int) -> bool:
    if year < stream.start_year:
        return False
    return stream.end_year is None or year < stream.end_year


def amount_for_year(stream: CashFlowStream, year: int) -> float:
    """Annual amount ``stream`` pays in projection year ``year``."""
    if not is_active(stream, year):
        return 0.0

    if stream.frequency == Frequency.ONCE:
        annual = stream.amount if year == stream.start_year else 0.0
    else:
        per_period = apply_change_over_time(stream.amount, year, stream.changes)
        per_period *= (1.0 + pct(stream.growth_rate)) ** (year - _anchor_year(stream, year))
        annual = per_period * FREQUENCY_MULTIPLIERS[stream.frequency]

    if isinstance(stream, Income):
        annual -= stream.associated_expenses
    return max(annual, 0.0)


def annual_income(incomes: Sequence[Income], year: int, *, taxable_only: bool = False) -> float:
    return float(sum(amount_for_year(i, year) for i in incomes if i.taxable or not taxable_only))


def annual_expense(expenses: Sequence[Expense], year: int) -> float:
    return float(sum(amount_for_year(e, year) for e in expenses))


def cash_flow_schedule(profile: Profile, years: Optional[int] = None) -> pd.DataFrame:
    """
    Income, expenses and their difference for each projection year, before
    any spending target, withdrawal or tax. Defaults to the profile's horizon.
    """
    n = profile.years_to_project if years is None else years
    rows = []
    for year in range(n):
        income = annual_income(profile.incomes, year)
        expenses = annual_expense(profile.expenses, year)
        rows.append({
            "year": year,
            "age": profile.age + year,
            "income": income,
            "taxable_income": annual_income(profile.incomes, year, taxable_only=True),
            "expenses": expenses,
            "net": income - expenses,
        })
    return pd.DataFrame(rows, columns=["year", "age", "income", "taxable_income", "expenses", "net"])
