"""
Core package — domain types, configuration models, and shared utilities.
No business logic lives here.
"""

from .config import (
    DEFAULT_PERCENTILES,
    DistributionType,
    FilingStatus,
    Frequency,
    InflationSettings,
    MonteCarloConfig,
    ProjectionSettings,
    ReturnSequenceConfig,
    TaxSettings,
    WithdrawalStrategyName,
)
from .schema import (
    Account,
    AccountType,
    AmountChange,
    CashFlowPriority,
    CashFlowStream,
    Expense,
    Goal,
    GoalPriority,
    GoalStatus,
    Income,
    Profile,
    TaxCharacteristic,
)
from .utils import excel_round, from_cents, pct, to_cents

__all__ = [
    "DEFAULT_PERCENTILES",
    "DistributionType",
    "FilingStatus",
    "Frequency",
    "InflationSettings",
    "MonteCarloConfig",
    "ProjectionSettings",
    "ReturnSequenceConfig",
    "TaxSettings",
    "WithdrawalStrategyName",
    "Account",
    "AccountType",
    "AmountChange",
    "CashFlowPriority",
    "CashFlowStream",
    "Expense",
    "Goal",
    "GoalPriority",
    "GoalStatus",
    "Income",
    "Profile",
    "TaxCharacteristic",
    "excel_round",
    "from_cents",
    "pct",
    "to_cents",
]
