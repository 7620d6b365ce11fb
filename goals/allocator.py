"""
Priority-based cash-flow allocation.

Each year's free cash flow is walked down a ladder of priorities:

    for priority in sorted(priorities, key=order):
        wanted = cash_flow_available * pct / 100      # share of the ORIGINAL total
        amount = min(wanted, remaining)
        split amount evenly over priority.goal_ids
        remaining -= amount

The mandatory flag is informational only; ranking is by ``order`` alone.
Percentages summing past 100 are legal here and simply mean later rungs get
whatever is left (see validation.check_priorities for the advisory warning).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from dateutil.relativedelta import relativedelta

from core.schema import CashFlowPriority, Goal
from engine.accounts import AccountProjection
from .progress import calculate_goal_progress, update_goal_progress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriorityAllocation:
    priority_id: str
    priority_name: str
    amount_allocated: float
    percentage_allocated: float


@dataclass(frozen=True)
class GoalFunding:
    goal_id: str
    goal_name: str
    amount_funded: float
    progress: float


@dataclass(frozen=True)
class PrioritySimulationResult:
    year: int
    cash_flow_available: float
    allocations: List[PriorityAllocation] = field(default_factory=list)
    goals_funded: List[GoalFunding] = field(default_factory=list)

    @property
    def total_allocated(self) -> float:
        return sum(a.amount_allocated for a in self.allocations)

    @property
    def unallocated(self) -> float:
        return max(self.cash_flow_available - self.total_allocated, 0.0)


def simulate_priority_allocation(
    year: int,
    cash_flow_available: float,
    priorities: Sequence[CashFlowPriority],
    goals: Mapping[str, Goal],
) -> PrioritySimulationResult:
    """
    Distribute one year's cash flow across ranked priorities.

    Parameters
    ----------
    year : int
        Label carried through to the result.
    cash_flow_available : float
        Money available this year. Non-positive means nothing is allocated.
    priorities : sequence of CashFlowPriority
        Evaluated in ascending ``order``.
    goals : mapping of goal id -> Goal
        Goal ids a priority names but this mapping lacks are skipped.

    Returns
    -------
    PrioritySimulationResult
    """
    allocations = []
    funded = []
    remaining = cash_flow_available

    for priority in sorted(priorities, key=lambda p: p.order):
        if remaining <= 0:
            break

        wanted = cash_flow_available * priority.allocation_percentage / 100.0
        amount = min(wanted, remaining)
        if amount <= 0:
            continue

        allocations.append(PriorityAllocation(
            priority_id=priority.id,
            priority_name=priority.name,
            amount_allocated=amount,
            percentage_allocated=amount / cash_flow_available * 100.0,
        ))

        per_goal = amount / len(priority.goal_ids) if priority.goal_ids else 0.0
        for goal_id in priority.goal_ids:
            goal = goals.get(goal_id)
            if goal is None:
                continue
            funded.append(GoalFunding(
                goal_id=goal.id,
                goal_name=goal.name,
                amount_funded=per_goal,
                progress=calculate_goal_progress(goal.current_amount + per_goal, goal.target_amount),
            ))

        remaining -= amount

    logger.debug(
        "year %d: allocated %.2f of %.2f across %d priorities",
        year, cash_flow_available - max(remaining, 0.0), cash_flow_available, len(allocations),
    )
    return PrioritySimulationResult(
        year=year,
        cash_flow_available=cash_flow_available,
        allocations=allocations,
        goals_funded=funded,
    )


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def create_cash_flow_priority(
    *,
    name: str,
    order: int,
    goal_ids: Sequence[str],
    allocation_percentage: float,
    mandatory: bool = False,
    description: Optional[str] = None,
    priority_id: Optional[str] = None,
) -> CashFlowPriority:
    return CashFlowPriority(
        id=priority_id or _new_id("priority"),
        name=name,
        order=order,
        goal_ids=tuple(goal_ids),
        allocation_percentage=allocation_percentage,
        mandatory=mandatory,
        description=description,
    )


def reorder_priorities(
    priorities: Sequence[CashFlowPriority],
    new_order_ids: Sequence[str],
) -> List[CashFlowPriority]:
    """
    Re-rank priorities to follow ``new_order_ids``, numbering from 1.
    Ids not present in ``priorities`` are ignored, and priorities not named are dropped.
    """
    by_id = {p.id: p for p in priorities}
    kept = [pid for pid in new_order_ids if pid in by_id]
    return [by_id[pid].model_copy(update={"order": rank}) for rank, pid in enumerate(kept, start=1)]


@dataclass
class AllocationSchedule:
    """Year-by-year allocation results plus the goals as they stand after the last year."""
    results: List[PrioritySimulationResult]
    goals: Dict[str, Goal]

    def allocations_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "year": r.year,
                    "cash_flow_available": r.cash_flow_available,
                    "priority_id": a.priority_id,
                    "priority_name": a.priority_name,
                    "amount_allocated": a.amount_allocated,
                    "percentage_allocated": a.percentage_allocated,
                }
                for r in self.results
                for a in r.allocations
            ],
            columns=["year", "cash_flow_available", "priority_id", "priority_name",
                     "amount_allocated", "percentage_allocated"],
        )

    def goals_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "year": r.year,
                    "goal_id": g.goal_id,
                    "goal_name": g.goal_name,
                    "amount_funded": g.amount_funded,
                    "progress": g.progress,
                }
                for r in self.results
                for g in r.goals_funded
            ],
            columns=["year", "goal_id", "goal_name", "amount_funded", "progress"],
        )


def allocate_over_years(
    cash_flows: Union[Sequence[float], AccountProjection],
    priorities: Sequence[CashFlowPriority],
    goals: Union[Mapping[str, Goal], Sequence[Goal]],
    start_date: date,
) -> AllocationSchedule:
    """
    Run the yearly allocation over a cash-flow series, carrying each goal's
    funded balance forward. Year ``i`` is evaluated at ``start_date`` plus
    ``i + 1`` years, so goal status reflects the end of that year.

    ``cash_flows`` is either one figure per year or an account projection,
    whose ``net_cash_flow`` column is used. Years with no surplus allocate
    nothing.
    """
    if isinstance(cash_flows, AccountProjection):
        cash_flows = cash_flows.net_cash_flows
    current: Dict[str, Goal] = dict(goals) if isinstance(goals, Mapping) else {g.id: g for g in goals}
    results = []

    for year, cash_flow in enumerate(cash_flows):
        result = simulate_priority_allocation(year, float(cash_flow), priorities, current)
        results.append(result)

        totals: Dict[str, float] = {}
        for funding in result.goals_funded:
            totals[funding.goal_id] = totals.get(funding.goal_id, 0.0) + funding.amount_funded

        as_of = start_date + relativedelta(years=year + 1)
        for goal_id, amount in totals.items():
            goal = current[goal_id]
            current[goal_id] = update_goal_progress(goal, goal.current_amount + amount, as_of)

    return AllocationSchedule(results=results, goals=current)
