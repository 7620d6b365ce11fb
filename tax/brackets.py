"""
Progressive bracket tax evaluation.

Bracket tables are data, not logic: they are injected through ``TaxTable``,
keyed by (tax year, filing status). All money here is integer minor units
(cents) and bracket rates are fractions (0.22, not 22).

Bracket bounds are inclusive integers, so a bracket spanning [min, max] holds
``max - min + 1`` cents. The top bracket has ``max=None`` (or infinity) and
absorbs whatever taxable income is left.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from core.config import FilingStatus
from core.utils import round_minor_unit


@dataclass(frozen=True)
class TaxBracket:
    min: int
    max: Optional[float]
    rate: float

    @property
    def unbounded(self) -> bool:
        return self.max is None or math.isinf(self.max)

    @property
    def width(self) -> float:
        if self.unbounded:
            return math.inf
        return self.max - self.min + 1


@dataclass(frozen=True)
class TaxSchedule:
    brackets: Tuple[TaxBracket, ...]
    standard_deduction: int = 0

    def tax(self, income: int) -> int:
        return calculate_tax(income, self.brackets, self.standard_deduction)


def calculate_tax(income: float, brackets: Sequence[TaxBracket], deduction: float = 0) -> int:
    """
    Tax owed on ``income`` after subtracting ``deduction``.

    Walks the brackets in ascending order, taxing the slice of income that
    falls in each one and rounding each slice's tax to the cent. Stops as soon
    as taxable income is used up.
    """
    taxable = max(0.0, float(income) - float(deduction))
    remaining = taxable
    total = 0
    for bracket in sorted(brackets, key=lambda b: b.min):
        if remaining <= 0:
            break
        in_bracket = min(remaining, bracket.width)
        total += round_minor_unit(in_bracket * bracket.rate)
        remaining -= in_bracket
    return total


def marginal_rate(income: float, brackets: Sequence[TaxBracket], deduction: float = 0) -> float:
    """Rate applied to the last cent of taxable income (0 when nothing is taxable)."""
    taxable = max(0.0, float(income) - float(deduction))
    if taxable <= 0:
        return 0.0
    consumed = 0.0
    rate = 0.0
    for bracket in sorted(brackets, key=lambda b: b.min):
        rate = bracket.rate
        consumed += bracket.width
        if consumed >= taxable:
            break
    return rate


def effective_rate(income: float, brackets: Sequence[TaxBracket], deduction: float = 0) -> float:
    if income <= 0:
        return 0.0
    return calculate_tax(income, brackets, deduction) / float(income)


ScheduleKey = Tuple[int, FilingStatus]


class TaxTable:
    """
    Lookup of bracket schedules by (year, filing status).

    Usage:
        table = TaxTable.from_mapping({
            2025: {"single": {"brackets": [...], "standard_deduction": 1575000}},
        })
        table.tax_for(9_000_000, 2025, FilingStatus.SINGLE)

    Unknown keys raise ValueError; the table never guesses a fallback year.
    """

    def __init__(self, schedules: Mapping[ScheduleKey, TaxSchedule]):
        self._schedules: Dict[ScheduleKey, TaxSchedule] = {
            (int(year), FilingStatus(status)): sched for (year, status), sched in schedules.items()
        }

    @classmethod
    def from_mapping(cls, data: Mapping[int, Mapping[str, Mapping]]) -> "TaxTable":
        """
        Build from nested plain data:
        ``{year: {filing_status: {"brackets": [{min, max, rate}, ...], "standard_deduction": int}}}``.
        """
        schedules = {}
        for year, by_status in data.items():
            for status, spec in by_status.items():
                brackets = tuple(_bracket_from(b) for b in spec["brackets"])
                schedules[(int(year), FilingStatus(status))] = TaxSchedule(
                    brackets=brackets,
                    standard_deduction=int(spec.get("standard_deduction", 0)),
                )
        return cls(schedules)

    @property
    def years(self) -> Tuple[int, ...]:
        return tuple(sorted({y for y, _ in self._schedules}))

    def schedule(self, year: int, filing_status: Union[FilingStatus, str]) -> TaxSchedule:
        key = (int(year), FilingStatus(filing_status))
        try:
            return self._schedules[key]
        except KeyError:
            raise ValueError(
                f"No tax schedule for year {key[0]} and filing status '{key[1].value}'. "
                f"Available years: {list(self.years)}"
            ) from None

    def tax_for(self, income: int, year: int, filing_status: Union[FilingStatus, str]) -> int:
        return self.schedule(year, filing_status).tax(income)


def _bracket_from(raw: Union[TaxBracket, Mapping]) -> TaxBracket:
    if isinstance(raw, TaxBracket):
        return raw
    return TaxBracket(min=int(raw["min"]), max=raw.get("max"), rate=float(raw["rate"]))


def brackets_from_rows(rows: Iterable[Mapping]) -> Tuple[TaxBracket, ...]:
    return tuple(_bracket_from(r) for r in rows)
