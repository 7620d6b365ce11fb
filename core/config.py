"""
Analysis configuration.

Validated, immutable settings models. Everything a caller hands to the engine
passes through one of these first, so a bad input fails here rather than
halfway through a simulation.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Projections run until this age unless the settings cap them sooner.
HORIZON_AGE = 100

DEFAULT_PERCENTILES: Tuple[float, ...] = (10, 25, 50, 75, 90)
DEFAULT_BASE_SEED = 42
DEFAULT_MEAN_RETURN = 7.0
DEFAULT_VOLATILITY = 15.0

# (max_size, ttl seconds)
MONTE_CARLO_CACHE_LIMITS = (5, 120.0)
PROJECTION_CACHE_LIMITS = (10, 60.0)

# Required minimum distributions begin at this age (SECURE 2.0).
RMD_START_AGE = 73


class DistributionType(str, Enum):
    RANDOM = "random"
    HISTORICAL = "historical"
    BOOTSTRAP = "bootstrap"


class WithdrawalStrategyName(str, Enum):
    PROPORTIONAL = "proportional"
    SEQUENTIAL = "sequential"
    TAX_EFFICIENT = "tax-efficient"


class Frequency(str, Enum):
    ONCE = "once"
    YEARLY = "yearly"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"
    DAILY = "daily"


# Payments per year for each frequency; a one-off amount is paid once, in its start year.
FREQUENCY_MULTIPLIERS = {
    Frequency.ONCE: 1,
    Frequency.YEARLY: 1,
    Frequency.QUARTERLY: 4,
    Frequency.MONTHLY: 12,
    Frequency.BIWEEKLY: 26,
    Frequency.WEEKLY: 52,
    Frequency.DAILY: 365,
}


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class ReturnSequenceConfig(BaseModel):
    """
    How to build one yearly return sequence.

    Returns are percentages (7 means 7%). A seed makes the sequence
    reproducible; without one the draw comes from OS entropy.
    """

    model_config = ConfigDict(frozen=True)

    distribution: DistributionType = DistributionType.RANDOM
    mean_return: float = DEFAULT_MEAN_RETURN
    volatility: float = Field(default=DEFAULT_VOLATILITY, ge=0)
    years: int = Field(..., ge=0)
    seed: Optional[int] = None
    historical_returns: Tuple[float, ...] = ()

    @model_validator(mode="after")
    def _history_required(self) -> "ReturnSequenceConfig":
        if self.distribution != DistributionType.RANDOM and not self.historical_returns:
            raise ValueError(
                f"distribution '{self.distribution.value}' requires non-empty historical_returns"
            )
        return self


class MonteCarloConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    num_simulations: int = Field(default=1000, ge=0)
    return_sequence_config: ReturnSequenceConfig
    # deterministic: run i is seeded with base_seed + i
    deterministic: bool = True
    percentiles: Tuple[float, ...] = DEFAULT_PERCENTILES

    @field_validator("percentiles")
    @classmethod
    def _percentiles_in_range(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        bad = [p for p in v if p < 0 or p > 100]
        if bad:
            raise ValueError(f"Percentiles must lie in [0, 100], got {bad}")
        return v


class InflationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate: float = 2.5
    adjust_spending: bool = True
    adjust_growth: bool = False


class TaxSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    ordinary_income_rate: float = Field(default=22.0, ge=0, le=100)
    capital_gains_rate: float = Field(default=15.0, ge=0, le=100)
    apply_taxes: bool = False
    filing_status: FilingStatus = FilingStatus.SINGLE
    tax_year: int = 2025


class ProjectionSettings(BaseModel):
    """Per-profile projection knobs. ``max_projection_years=None`` means "to the horizon age"."""

    model_config = ConfigDict(frozen=True)

    inflation: InflationSettings = InflationSettings()
    tax: TaxSettings = TaxSettings()
    withdrawal_strategy: WithdrawalStrategyName = WithdrawalStrategyName.PROPORTIONAL
    retirement_age: int = Field(default=65, ge=0)
    max_projection_years: Optional[int] = Field(default=None, ge=0)
    # None turns forced distributions off
    rmd_start_age: Optional[int] = Field(default=RMD_START_AGE, ge=0)

    def years_to_project(self, age: int) -> int:
        horizon = HORIZON_AGE - age
        if self.max_projection_years is not None:
            horizon = min(self.max_projection_years, horizon)
        return max(horizon, 0)
