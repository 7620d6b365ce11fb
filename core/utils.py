from __future__ import annotations

from datetime import date
from typing import Union

import numpy as np

Number = Union[int, float]


def pct(rate: float) -> float:
    """Percent to fraction: 7 -> 0.07."""
    return rate / 100.0


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round_minor_unit(amount: float) -> int:
    """Round a money amount already expressed in minor units (cents) to an integer."""
    return int(excel_round(amount, 0))


def to_cents(amount: Number) -> int:
    return round_minor_unit(float(amount) * 100.0)


def from_cents(cents: Number) -> float:
    return float(cents) / 100.0


def round_to(value: float, decimals: int = 2) -> float:
    return float(excel_round(value, decimals))


def complete_months_between(start: date, end: date) -> int:
    """Excel DATEDIF(start, end, "m"): complete months between two dates, negative if end < start."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months
