"""
Single-path projector — advances one savings balance forward a year at a time.

Each year:
  1. growth rate = return_sequence[year] when a sequence covers that year,
     else the profile's fixed annual growth rate
  2. growth = balance * rate
  3. spending = base spending, scaled by cumulative inflation when
     spending adjustment is on (the first projected year is already inflated)
  4. balance = max(0, balance + growth - spending)
  5. record the ending balance; a balance at or below zero is terminal

The path stops at depletion, so trajectories are ragged: a run that ran out of
money in year 12 has 13 entries, not one per horizon year. Aggregation code
must not assume a rectangular matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

import pandas as pd

from core.schema import Profile
from core.utils import pct


@dataclass(frozen=True)
class YearStep:
    year: int
    age: int
    starting_balance: float
    growth_rate: float
    growth: float
    spending: float
    ending_balance: float


def year_growth_rate(profile: Profile, return_sequence: Optional[Sequence[float]], year: int) -> float:
    if return_sequence is not None and year < len(return_sequence):
        return float(return_sequence[year])
    return float(profile.annual_growth_rate)


def iter_years(profile: Profile, return_sequence: Optional[Sequence[float]] = None) -> Iterator[YearStep]:
    """Yield one YearStep per projected year, stopping after the first depleted year."""
    inflation = profile.settings.inflation
    balance = float(profile.current_savings)
    spending = float(profile.annual_spending)
    cumulative_inflation = 1.0

    for year in range(profile.years_to_project):
        rate = year_growth_rate(profile, return_sequence, year)
        growth = balance * pct(rate)

        if inflation.rate > 0 and inflation.adjust_spending:
            cumulative_inflation *= 1.0 + pct(inflation.rate)
            spending = profile.annual_spending * cumulative_inflation

        ending = max(0.0, balance + growth - spending)
        yield YearStep(
            year=year,
            age=profile.age + year,
            starting_balance=balance,
            growth_rate=rate,
            growth=growth,
            spending=spending,
            ending_balance=ending,
        )
        if ending <= 0:
            return
        balance = ending


def project(profile: Profile, return_sequence: Optional[Sequence[float]] = None) -> List[float]:
    """Yearly ending balances; a fresh list every call."""
    return [step.ending_balance for step in iter_years(profile, return_sequence)]


def projection_table(profile: Profile, return_sequence: Optional[Sequence[float]] = None) -> pd.DataFrame:
    """The same path as ``project`` with every intermediate figure, one row per year."""
    columns = ["year", "age", "starting_balance", "growth_rate", "growth", "spending", "ending_balance"]
    rows = [step.__dict__ for step in iter_years(profile, return_sequence)]
    return pd.DataFrame(rows, columns=columns)
