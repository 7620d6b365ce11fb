"""
Withdrawal strategies — decide which accounts fund a year's spending.
"""

from __future__ import annotations

from typing import Union

from core.config import WithdrawalStrategyName

from .base import AccountWithdrawal, WithdrawalStrategy
from .ordered import SequentialWithdrawal, TaxEfficientWithdrawal
from .proportional import ProportionalWithdrawal

_STRATEGIES = {
    WithdrawalStrategyName.PROPORTIONAL: ProportionalWithdrawal,
    WithdrawalStrategyName.SEQUENTIAL: SequentialWithdrawal,
    WithdrawalStrategyName.TAX_EFFICIENT: TaxEfficientWithdrawal,
}


def get_strategy(name: Union[WithdrawalStrategyName, str]) -> WithdrawalStrategy:
    try:
        key = WithdrawalStrategyName(name)
    except ValueError:
        raise ValueError(
            f"Unknown withdrawal strategy '{name}'. "
            f"Choose one of: {[s.value for s in WithdrawalStrategyName]}"
        ) from None
    return _STRATEGIES[key]()


__all__ = [
    "AccountWithdrawal",
    "WithdrawalStrategy",
    "ProportionalWithdrawal",
    "SequentialWithdrawal",
    "TaxEfficientWithdrawal",
    "get_strategy",
]
