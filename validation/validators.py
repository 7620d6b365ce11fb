"""
Plausibility checks for household inputs before they enter the engine.

Model construction already rejects malformed values (negative spending,
unknown enum values). These checks catch inputs that are well-formed but
suspicious:
- Duplicate account / goal ids
- Balances whose sign contradicts the account type
- Rates outside plausible bounds
- Goal dates and income/expense spans that don't make sense
- Priority ladders that over-commit or rank mandatory items late
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

from core.config import FREQUENCY_MULTIPLIERS, HORIZON_AGE
from core.schema import AccountType, CashFlowPriority, Goal, Profile

logger = logging.getLogger(__name__)

# Annual percentage rates outside this band are almost always a units mistake (0.07 vs 7).
PLAUSIBLE_RATE_RANGE = (-50.0, 50.0)


@dataclass
class ValidationResult:
    """Collects validation errors (blocking) and warnings (informational)."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(errors=self.errors + other.errors, warnings=self.warnings + other.warnings)

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def _duplicates(ids: Sequence[str]) -> List[str]:
    return sorted(k for k, n in Counter(ids).items() if n > 1)


def validate_profile(profile: Profile) -> ValidationResult:
    result = ValidationResult()
    lo, hi = PLAUSIBLE_RATE_RANGE

    # --- Horizon ---
    if profile.years_to_project == 0:
        result.warnings.append(
            f"Age {profile.age} leaves no projection years (horizon is age {HORIZON_AGE})."
        )

    # --- Rates ---
    if not lo <= profile.annual_growth_rate <= hi:
        result.warnings.append(f"Annual growth rate {profile.annual_growth_rate}% looks implausible.")
    inflation = profile.settings.inflation.rate
    if not lo <= inflation <= hi:
        result.warnings.append(f"Inflation rate {inflation}% looks implausible.")

    if profile.current_savings < 0:
        result.warnings.append("Current savings are negative; the projection will report immediate depletion.")

    # --- Accounts ---
    dup = _duplicates([a.id for a in profile.accounts])
    if dup:
        result.errors.append(f"Duplicate account ids: {dup}")

    for a in profile.accounts:
        if a.type == AccountType.LIABILITY and a.balance > 0:
            result.warnings.append(f"Liability '{a.id}' has a positive balance; liabilities are expected to be negative.")
        if a.is_investable and a.balance < 0:
            result.errors.append(f"Investable account '{a.id}' has a negative balance.")
        if a.cost_basis is not None and a.cost_basis > max(a.balance, 0.0):
            result.warnings.append(f"Account '{a.id}' cost basis exceeds its balance (an unrealized loss).")
        for label, rate in (("interest", a.interest_rate), ("appreciation", a.appreciation_rate)):
            if rate is not None and not lo <= rate <= hi:
                result.warnings.append(f"Account '{a.id}' {label} rate {rate}% looks implausible.")

    # --- Income and expense streams ---
    dup = _duplicates([s.id for s in (*profile.incomes, *profile.expenses)])
    if dup:
        result.errors.append(f"Duplicate income/expense ids: {dup}")

    for s in (*profile.incomes, *profile.expenses):
        if s.end_year is not None and s.end_year <= s.start_year:
            result.errors.append(f"Stream '{s.id}' end year {s.end_year} is not after its start year {s.start_year}.")
        if not lo <= s.growth_rate <= hi:
            result.warnings.append(f"Stream '{s.id}' growth rate {s.growth_rate}% looks implausible.")

    for i in profile.incomes:
        gross = i.amount * FREQUENCY_MULTIPLIERS[i.frequency]
        if i.associated_expenses and i.associated_expenses >= gross:
            result.warnings.append(f"Income '{i.id}' is fully consumed by its associated expenses.")

    for w in result.warnings:
        logger.warning("profile: %s", w)
    return result


def validate_goals(goals: Sequence[Goal]) -> ValidationResult:
    result = ValidationResult()

    dup = _duplicates([g.id for g in goals])
    if dup:
        result.errors.append(f"Duplicate goal ids: {dup}")

    for g in goals:
        if g.target_amount <= 0:
            result.errors.append(f"Goal '{g.id}' has a non-positive target amount.")
        if g.target_date <= g.start_date:
            result.errors.append(f"Goal '{g.id}' target date is not after its start date.")
        if g.current_amount < 0:
            result.warnings.append(f"Goal '{g.id}' has a negative current amount.")

    for w in result.warnings:
        logger.warning("goals: %s", w)
    return result


def check_priorities(priorities: Sequence[CashFlowPriority]) -> ValidationResult:
    """
    Advisory review of a priority ladder. Every finding is a warning: the
    allocator accepts all of these configurations.
    """
    result = ValidationResult()

    total = sum(p.allocation_percentage for p in priorities)
    if total > 100:
        result.warnings.append(
            f"Total allocation is {total:g}% (above 100%); lower-ranked priorities may receive nothing."
        )

    dup_orders = sorted(k for k, n in Counter(p.order for p in priorities).items() if n > 1)
    if dup_orders:
        result.warnings.append(f"Duplicate priority ranks: {dup_orders}")

    ranked = sorted(priorities, key=lambda p: p.order)
    for i, p in enumerate(ranked):
        if p.mandatory and any(not q.mandatory for q in ranked[:i]):
            result.warnings.append(f"Mandatory priority '{p.id}' is ranked behind an optional priority.")

    for w in result.warnings:
        logger.warning("priorities: %s", w)
    return result
