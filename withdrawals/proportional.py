"""
ProportionalWithdrawal — every fundable account contributes in proportion to
its balance, so the portfolio mix is unchanged by the withdrawal.
"""

from __future__ import annotations

from typing import List, Sequence

from core.schema import Account

from .base import AccountWithdrawal, WithdrawalStrategy, fundable


class ProportionalWithdrawal(WithdrawalStrategy):
    name = "proportional"

    def plan(self, accounts: Sequence[Account], amount: float) -> List[AccountWithdrawal]:
        pool = fundable(accounts)
        total = sum(a.balance for a in pool)
        if amount <= 0 or total <= 0:
            return []

        if amount >= total:
            return [AccountWithdrawal(account_id=a.id, amount=a.balance) for a in pool]

        return [
            AccountWithdrawal(account_id=a.id, amount=amount * a.balance / total)
            for a in pool
        ]
