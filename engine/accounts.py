"""
Account-level projection — the detailed counterpart of the single-path
projector.

Where ``projector.project`` follows one pooled balance, this walks every
account separately:
  1. investable accounts grow at the year's rate (a real rate when growth is
     inflation-adjusted), real assets appreciate, liabilities accrue interest
     and are paid down by twelve minimum payments
  2. before retirement, each investable account receives its annual
     contribution
  3. from the RMD start age, tax-deferred accounts pay out their required
     minimum distribution
  4. the year's need (the spending target once retired, plus listed
     expenses) is met by income and distributions first; any shortfall is
     withdrawn through the configured withdrawal strategy
  5. with taxes on, ordinary income (taxable income streams, distributions
     and deferred withdrawals) and capital gains are taxed; the bill is paid
     from surplus cash first and the rest from the portfolio (that payment is
     not taxed again)

``net_cash_flow`` is income + distributions - need - tax: positive values are
free cash the goal allocator can hand out, negative values were covered by
the portfolio. Surplus cash is not reinvested. Debt service is assumed to
come out of the household budget, not the portfolio. The projection stops
after the first year in which a withdrawal was needed and the investable
accounts ran dry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core.schema import Account, AccountType, Profile, TaxCharacteristic
from core.utils import from_cents, pct, to_cents
from tax.brackets import TaxTable
from tax.rates import calculate_capital_gains_tax, calculate_ordinary_income_tax
from tax.rmd import required_distributions
from withdrawals import AccountWithdrawal, get_strategy

from .cashflows import annual_expense, annual_income
from .projector import year_growth_rate

logger = logging.getLogger(__name__)


# ---------- Account helpers ----------

def calculate_total_accounts_value(accounts: Sequence[Account]) -> float:
    return float(sum(a.balance for a in accounts))


def filter_accounts_by_type(accounts: Sequence[Account], account_type: AccountType) -> List[Account]:
    return [a for a in accounts if a.type == account_type]


def add_contribution(account: Account, amount: float) -> Account:
    """New account with ``amount`` added; taxable accounts with a tracked basis raise it too."""
    update = {"balance": account.balance + amount}
    if account.cost_basis is not None:
        update["cost_basis"] = account.cost_basis + amount
    return account.model_copy(update=update)


def calculate_tax_deduction(liability: Account) -> float:
    """Annual interest on a deductible liability (assumed fully deductible)."""
    if liability.tax_characteristic != TaxCharacteristic.TAX_DEDUCTIBLE or not liability.interest_rate:
        return 0.0
    return abs(liability.balance * pct(liability.interest_rate))


def appreciate_asset(asset: Account, years: int) -> Account:
    if not asset.appreciation_rate:
        return asset
    factor = (1.0 + pct(asset.appreciation_rate)) ** years
    return asset.model_copy(update={"balance": asset.balance * factor})


def amortize_liability(liability: Account, years: int) -> Account:
    """
    Pay a liability down month by month for ``years`` years with its minimum
    payment. Payments that do not cover the month's interest leave the
    balance where it was. Balance stays negative (or zero once paid off).
    """
    if not liability.minimum_payment:
        return liability

    remaining = abs(liability.balance)
    monthly_rate = pct(liability.interest_rate or 0.0) / 12.0
    for _ in range(years * 12):
        interest = remaining * monthly_rate
        principal = liability.minimum_payment - interest
        if principal > 0:
            remaining -= principal
        if remaining <= 0:
            remaining = 0.0
            break
    return liability.model_copy(update={"balance": -remaining})


# ---------- One year of account movement ----------

def _grow(account: Account, investable_rate: float) -> Account:
    if account.type in (AccountType.TAXABLE, AccountType.TAX_ADVANTAGED):
        return account.model_copy(update={"balance": account.balance * (1.0 + pct(investable_rate))})
    if account.type == AccountType.REAL_ASSET:
        return appreciate_asset(account, 1)
    if account.type == AccountType.LIABILITY:
        if account.minimum_payment:
            return amortize_liability(account, 1)
        if account.interest_rate:
            return account.model_copy(update={"balance": account.balance * (1.0 + pct(account.interest_rate))})
        return account
    raise ValueError(f"Unhandled account type: {account.type!r}")


def _apply_withdrawals(
    accounts: List[Account], plan: Sequence[AccountWithdrawal]
) -> Tuple[List[Account], float]:
    by_id = {w.account_id: w.amount for w in plan}
    out = []
    for a in accounts:
        amount = by_id.get(a.id, 0.0)
        if amount:
            update = {"balance": a.balance - amount}
            if a.cost_basis is not None and a.balance > 0:
                basis_used = min(a.cost_basis * amount / a.balance, a.cost_basis)
                update["cost_basis"] = a.cost_basis - basis_used
            a = a.model_copy(update=update)
        out.append(a)
    return out, float(sum(by_id.values()))


@dataclass(frozen=True)
class _TaxBreakdown:
    ordinary_income: float
    ordinary_income_tax: float
    capital_gains_tax: float

    @property
    def total(self) -> float:
        return self.ordinary_income_tax + self.capital_gains_tax


def _withdrawal_tax(
    accounts: Sequence[Account],
    plan: Sequence[AccountWithdrawal],
    profile: Profile,
    tax_table: Optional[TaxTable],
    other_income: float = 0.0,
) -> _TaxBreakdown:
    tax = profile.settings.tax
    by_id: Dict[str, Account] = {a.id: a for a in accounts}
    # taxable income from outside the portfolio shares the ordinary brackets
    ordinary_income = other_income
    cg_tax = 0.0

    for w in plan:
        account = by_id[w.account_id]
        tc = account.tax_characteristic
        if tc in (TaxCharacteristic.TAXABLE, TaxCharacteristic.NON_DEDUCTIBLE):
            if account.cost_basis is not None:
                cg_tax += calculate_capital_gains_tax(
                    balance=account.balance,
                    withdrawal_amount=w.amount,
                    cost_basis=account.cost_basis,
                    capital_gains_rate=tax.capital_gains_rate,
                ).capital_gains_tax
            else:
                # unknown basis: treat half as gains, half as ordinary income
                cg_tax += w.amount * 0.5 * pct(tax.capital_gains_rate)
                ordinary_income += w.amount * 0.5
        elif tc in (TaxCharacteristic.TAX_DEFERRED, TaxCharacteristic.TAX_DEDUCTIBLE):
            ordinary_income += w.amount
        elif tc == TaxCharacteristic.TAX_FREE:
            pass
        else:
            raise ValueError(f"Unhandled tax characteristic: {tc!r}")

    if tax_table is not None:
        ordinary_tax = from_cents(
            tax_table.tax_for(to_cents(ordinary_income), tax.tax_year, tax.filing_status)
        )
    else:
        ordinary_tax = calculate_ordinary_income_tax(ordinary_income, tax.ordinary_income_rate)

    return _TaxBreakdown(
        ordinary_income=ordinary_income,
        ordinary_income_tax=ordinary_tax,
        capital_gains_tax=cg_tax,
    )


# ---------- Projection ----------

@dataclass
class AccountProjection:
    """
    yearly:   one row per projected year (nominal and inflation-adjusted totals, taxes)
    balances: ending balance of every account, indexed by year
    """

    yearly: pd.DataFrame
    balances: pd.DataFrame

    @property
    def depletion_year(self) -> Optional[int]:
        if self.yearly.empty:
            return None
        hit = self.yearly[self.yearly["depleted"]]
        return int(hit["year"].iloc[0]) if not hit.empty else None

    @property
    def net_cash_flows(self) -> List[float]:
        """Yearly ``net_cash_flow`` as a plain list, ready for ``goals.allocate_over_years``."""
        return [float(v) for v in self.yearly["net_cash_flow"]]


YEARLY_COLUMNS = [
    "year", "age", "retired",
    "starting_balance", "growth", "contributions",
    "income", "expenses", "rmd", "spending",
    "ordinary_income_tax", "capital_gains_tax", "total_tax", "tax_paid",
    "net_cash_flow",
    "ending_balance", "investable_balance",
    "real_starting_balance", "real_spending", "real_ending_balance",
    "depleted",
]


def project_accounts(
    profile: Profile,
    return_sequence: Optional[Sequence[float]] = None,
    *,
    tax_table: Optional[TaxTable] = None,
) -> AccountProjection:
    """
    Project every account in ``profile.accounts`` year by year.

    Parameters
    ----------
    profile : Profile
        Accounts, income and expense streams, plus projection settings
        (inflation, taxes, withdrawal strategy, retirement and RMD ages,
        horizon).
    return_sequence : sequence of float, optional
        Per-year investable returns in percent; years beyond it fall back to
        ``profile.annual_growth_rate``.
    tax_table : TaxTable, optional
        Bracket schedules for ordinary income. Without one the flat
        ``ordinary_income_rate`` is used.
    """
    settings = profile.settings
    inflation = settings.inflation
    strategy = get_strategy(settings.withdrawal_strategy)

    accounts: List[Account] = list(profile.accounts)
    spending_target = float(profile.annual_spending)
    cumulative_inflation = 1.0

    rows = []
    balance_rows = []
    for year in range(profile.years_to_project):
        age = profile.age + year
        retired = age >= settings.retirement_age
        starting = calculate_total_accounts_value(accounts)

        if inflation.rate > 0:
            cumulative_inflation *= 1.0 + pct(inflation.rate)
            if inflation.adjust_spending:
                spending_target = profile.annual_spending * cumulative_inflation

        rate = year_growth_rate(profile, return_sequence, year)
        if inflation.adjust_growth and inflation.rate > 0:
            rate = ((1.0 + pct(rate)) / (1.0 + pct(inflation.rate)) - 1.0) * 100.0

        accounts = [_grow(a, rate) for a in accounts]
        growth = calculate_total_accounts_value(accounts) - starting

        contributions = 0.0
        if not retired:
            funded = []
            for a in accounts:
                if a.is_investable and a.annual_contribution > 0:
                    contributions += a.annual_contribution
                    a = add_contribution(a, a.annual_contribution)
                funded.append(a)
            accounts = funded

        income = annual_income(profile.incomes, year)
        expenses = annual_expense(profile.expenses, year)
        need = (spending_target if retired else 0.0) + expenses

        # forced distributions come out first and count toward the year's need
        rmd_plan = [
            AccountWithdrawal(account_id=account_id, amount=amount)
            for account_id, amount in required_distributions(accounts, age, settings.rmd_start_age).items()
        ]
        accounts, rmd = _apply_withdrawals(accounts, rmd_plan)

        shortfall = max(need - income - rmd, 0.0)
        spend_plan = strategy.plan(accounts, shortfall) if shortfall > 0 else []

        taxes = _TaxBreakdown(0.0, 0.0, 0.0)
        taxable_income = annual_income(profile.incomes, year, taxable_only=True)
        if settings.tax.apply_taxes and (rmd_plan or spend_plan or taxable_income > 0):
            taxes = _withdrawal_tax(
                accounts, rmd_plan + list(spend_plan), profile, tax_table, other_income=taxable_income
            )
        accounts, withdrawn = _apply_withdrawals(accounts, spend_plan)

        # tax is paid from any surplus cash first, the rest from the portfolio
        surplus = max(income + rmd - need, 0.0)
        tax_from_portfolio = max(taxes.total - surplus, 0.0)
        tax_paid = 0.0
        if tax_from_portfolio > 0:
            accounts, tax_paid = _apply_withdrawals(accounts, strategy.plan(accounts, tax_from_portfolio))

        ending = calculate_total_accounts_value(accounts)
        investable = float(sum(a.balance for a in accounts if a.is_investable))
        depleted = (shortfall > 0 or tax_from_portfolio > 0) and investable <= 0
        rows.append({
            "year": year,
            "age": age,
            "retired": retired,
            "starting_balance": starting,
            "growth": growth,
            "contributions": contributions,
            "income": income,
            "expenses": expenses,
            "rmd": rmd,
            "spending": withdrawn,
            "ordinary_income_tax": taxes.ordinary_income_tax,
            "capital_gains_tax": taxes.capital_gains_tax,
            "total_tax": taxes.total,
            "tax_paid": tax_paid,
            "net_cash_flow": income + rmd - need - taxes.total,
            "ending_balance": ending,
            "investable_balance": investable,
            "real_starting_balance": starting / cumulative_inflation,
            "real_spending": withdrawn / cumulative_inflation,
            "real_ending_balance": ending / cumulative_inflation,
            "depleted": depleted,
        })
        balance_rows.append({"year": year, **{a.id: a.balance for a in accounts}})

        if depleted:
            logger.debug("Investable accounts depleted at year %d (age %d)", year, age)
            break

    yearly = pd.DataFrame(rows, columns=YEARLY_COLUMNS)
    account_ids = [a.id for a in profile.accounts]
    balances = pd.DataFrame(balance_rows, columns=["year"] + account_ids).set_index("year")
    return AccountProjection(yearly=yearly, balances=balances)
