"""
Base classes for withdrawal strategies — just the interface, no implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from core.schema import Account


@dataclass(frozen=True)
class AccountWithdrawal:
    account_id: str
    amount: float


class WithdrawalStrategy:
    """Interface for deciding which accounts fund a withdrawal."""

    name: str = ""

    def plan(self, accounts: Sequence[Account], amount: float) -> List[AccountWithdrawal]:
        """
        Split ``amount`` across ``accounts``.

        Implementations only draw from investable accounts with a positive
        balance and never take more than an account holds, so the planned
        total may fall short of ``amount`` when the portfolio runs dry.
        """
        raise NotImplementedError


def fundable(accounts: Sequence[Account]) -> List[Account]:
    return [a for a in accounts if a.is_investable and a.balance > 0]
