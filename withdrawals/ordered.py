"""
Ordered withdrawal strategies — drain accounts one at a time.

SequentialWithdrawal:   accounts in the order the profile lists them.
TaxEfficientWithdrawal: taxable first, then tax-deferred, then tax-free, so
                        tax-free growth compounds for as long as possible.
                        Ties keep the profile's order.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from core.schema import Account, TaxCharacteristic

from .base import AccountWithdrawal, WithdrawalStrategy, fundable

TAX_EFFICIENT_RANK: Dict[TaxCharacteristic, int] = {
    TaxCharacteristic.TAXABLE: 0,
    TaxCharacteristic.NON_DEDUCTIBLE: 0,
    TaxCharacteristic.TAX_DEDUCTIBLE: 0,
    TaxCharacteristic.TAX_DEFERRED: 1,
    TaxCharacteristic.TAX_FREE: 2,
}


def _drain(ordered: Sequence[Account], amount: float) -> List[AccountWithdrawal]:
    out = []
    remaining = amount
    for account in ordered:
        if remaining <= 0:
            break
        take = min(account.balance, remaining)
        if take > 0:
            out.append(AccountWithdrawal(account_id=account.id, amount=take))
            remaining -= take
    return out


class SequentialWithdrawal(WithdrawalStrategy):
    name = "sequential"

    def plan(self, accounts: Sequence[Account], amount: float) -> List[AccountWithdrawal]:
        return _drain(fundable(accounts), amount)


class TaxEfficientWithdrawal(WithdrawalStrategy):
    name = "tax-efficient"

    def plan(self, accounts: Sequence[Account], amount: float) -> List[AccountWithdrawal]:
        pool = sorted(fundable(accounts), key=lambda a: TAX_EFFICIENT_RANK[a.tax_characteristic])
        return _drain(pool, amount)
