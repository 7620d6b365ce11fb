"""
Household domain types.

Profiles, accounts, goals and cash-flow priorities arrive from outside the
engine and are treated as immutable values: every transformation builds a new
instance (``model_copy(update=...)``) instead of mutating one in place.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import Frequency, ProjectionSettings


class AccountType(str, Enum):
    TAXABLE = "taxable"
    TAX_ADVANTAGED = "tax-advantaged"
    REAL_ASSET = "real-asset"
    LIABILITY = "liability"


class TaxCharacteristic(str, Enum):
    TAXABLE = "taxable"
    TAX_DEFERRED = "tax-deferred"
    TAX_FREE = "tax-free"
    TAX_DEDUCTIBLE = "tax-deductible"
    NON_DEDUCTIBLE = "non-deductible"


# Accounts that grow with the market and can fund withdrawals.
INVESTABLE_TYPES: Tuple[AccountType, ...] = (AccountType.TAXABLE, AccountType.TAX_ADVANTAGED)


class Account(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    type: AccountType
    # signed: liabilities carry negative balances
    balance: float
    tax_characteristic: TaxCharacteristic
    interest_rate: Optional[float] = None
    minimum_payment: Optional[float] = Field(default=None, ge=0)  # monthly
    appreciation_rate: Optional[float] = None
    annual_contribution: float = Field(default=0.0, ge=0)
    cost_basis: Optional[float] = Field(default=None, ge=0)

    @property
    def is_investable(self) -> bool:
        return self.type in INVESTABLE_TYPES


class AmountChange(BaseModel):
    """From projection year ``year`` onward the stream pays ``new_amount`` per period."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=0)
    new_amount: float = Field(..., ge=0)


class CashFlowStream(BaseModel):
    """
    A recurring (or one-off) amount of money over a span of projection years.

    ``amount`` is per ``frequency`` period. Years are offsets from the
    projection start; ``end_year`` is exclusive and ``None`` means open-ended.
    ``growth_rate`` (percent) compounds yearly from the start year, or from
    the most recent ``changes`` entry once one applies.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    amount: float = Field(..., ge=0)
    frequency: Frequency = Frequency.YEARLY
    start_year: int = Field(default=0, ge=0)
    end_year: Optional[int] = Field(default=None, ge=0)
    growth_rate: float = 0.0
    changes: Tuple[AmountChange, ...] = ()
    category: Optional[str] = None


class Income(CashFlowStream):
    # business and rental income are reported net of these (annual) costs
    associated_expenses: float = Field(default=0.0, ge=0)
    taxable: bool = True


class Expense(CashFlowStream):
    pass


class Profile(BaseModel):
    """
    A household snapshot: the single input every projection starts from.

    ``annual_growth_rate`` and rates inside ``projection_settings`` are
    percentages; money is in one currency unit chosen by the caller.
    """

    model_config = ConfigDict(frozen=True)

    age: int = Field(..., ge=0)
    current_savings: float
    annual_growth_rate: float
    annual_spending: float = Field(..., ge=0)
    accounts: Tuple[Account, ...] = ()
    incomes: Tuple[Income, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    projection_settings: Optional[ProjectionSettings] = None

    @property
    def settings(self) -> ProjectionSettings:
        return self.projection_settings if self.projection_settings is not None else ProjectionSettings()

    @property
    def years_to_project(self) -> int:
        return self.settings.years_to_project(self.age)


class GoalStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    ON_TRACK = "on-track"
    BEHIND_SCHEDULE = "behind-schedule"
    AT_RISK = "at-risk"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class GoalPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Goal(BaseModel):
    """A savings target. ``status`` is derived from progress, never authoritative."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    type: str = "custom"
    target_amount: float
    current_amount: float = 0.0
    target_date: date
    start_date: date
    priority: GoalPriority = GoalPriority.MEDIUM
    mandatory: bool = False
    status: GoalStatus = GoalStatus.NOT_STARTED
    monthly_contribution: Optional[float] = None
    description: Optional[str] = None


class CashFlowPriority(BaseModel):
    """
    One rung of the funding ladder. Priorities are evaluated in ascending
    ``order``; ``allocation_percentage`` is a share of the year's total cash
    flow and the sum across priorities may exceed 100.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    order: int
    goal_ids: Tuple[str, ...] = ()
    allocation_percentage: float = Field(..., ge=0)
    mandatory: bool = False
    description: Optional[str] = None
