"""
Required minimum distributions from tax-deferred accounts.

Each year from the start age onward, every tax-deferred account must pay out
at least balance / factor, where the factor comes from the IRS Uniform
Lifetime Table. Tax-free (Roth-style) and taxable accounts are exempt.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from core.config import RMD_START_AGE
from core.schema import Account, TaxCharacteristic

# Uniform Lifetime Table (distribution periods, 2022 onward)
UNIFORM_LIFETIME_TABLE: Dict[int, float] = {
    72: 27.4, 73: 26.5, 74: 25.5, 75: 24.6, 76: 23.7, 77: 22.9, 78: 22.0, 79: 21.1,
    80: 20.2, 81: 19.4, 82: 18.5, 83: 17.7, 84: 16.8, 85: 16.0, 86: 15.2, 87: 14.4,
    88: 13.7, 89: 12.9, 90: 12.2, 91: 11.5, 92: 10.8, 93: 10.1, 94: 9.5, 95: 8.9,
    96: 8.4, 97: 7.8, 98: 7.3, 99: 6.8, 100: 6.4, 101: 6.0, 102: 5.6, 103: 5.2,
    104: 4.9, 105: 4.6, 106: 4.3, 107: 4.0, 108: 3.7, 109: 3.5, 110: 3.4, 111: 3.3,
    112: 3.1, 113: 3.0, 114: 2.9, 115: 2.8, 116: 2.7, 117: 2.5, 118: 2.3, 119: 2.1,
    120: 1.9,
}


def life_expectancy_factor(age: int) -> Optional[float]:
    """Distribution period for ``age``; ``None`` below the table, ages past 120 use 120."""
    if age < min(UNIFORM_LIFETIME_TABLE):
        return None
    return UNIFORM_LIFETIME_TABLE[min(age, max(UNIFORM_LIFETIME_TABLE))]


def required_minimum_distribution(
    balance: float,
    age: int,
    start_age: Optional[int] = RMD_START_AGE,
) -> float:
    if start_age is None or age < start_age or balance <= 0:
        return 0.0
    factor = life_expectancy_factor(age)
    if factor is None:
        return 0.0
    return balance / factor


def is_subject_to_rmd(account: Account) -> bool:
    return account.is_investable and account.tax_characteristic == TaxCharacteristic.TAX_DEFERRED


def required_distributions(
    accounts: Sequence[Account],
    age: int,
    start_age: Optional[int] = RMD_START_AGE,
) -> Dict[str, float]:
    """Per-account distribution due this year, keyed by account id. Accounts owing nothing are left out."""
    due = {}
    for a in accounts:
        if is_subject_to_rmd(a):
            amount = required_minimum_distribution(a.balance, age, start_age)
            if amount > 0:
                due[a.id] = amount
    return due
