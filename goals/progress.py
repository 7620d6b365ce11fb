"""
Goal progress and status.

Progress is a plain percentage of the target, capped at 100. Status compares
that progress with the progress a straight-line savings path would have
reached by the evaluation date:

    expected = elapsed / (target_date - start_date) * 100

    progress >= 100                      -> completed
    progress == 0 and elapsed < 30 days  -> not-started
    progress <  0.5 * expected           -> at-risk
    progress <  0.8 * expected           -> behind-schedule
    otherwise                            -> on-track

Goals are immutable; updating one returns a new Goal with the status
re-derived.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

import pandas as pd

from core.schema import Goal, GoalPriority, GoalStatus
from core.utils import complete_months_between, round_to

NOT_STARTED_GRACE_DAYS = 30


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def calculate_goal_progress(current_amount: float, target_amount: float) -> float:
    """Percent of target reached, rounded to 2 decimals and capped at 100. A non-positive target gives 0."""
    if target_amount <= 0:
        return 0.0
    return min(round_to(current_amount / target_amount * 100.0, 2), 100.0)


def determine_goal_status(
    progress: float,
    start_date: date,
    target_date: date,
    current_date: date,
) -> GoalStatus:
    if progress >= 100:
        return GoalStatus.COMPLETED

    total_days = (target_date - start_date).days
    elapsed_days = (current_date - start_date).days

    if progress == 0 and elapsed_days < NOT_STARTED_GRACE_DAYS:
        return GoalStatus.NOT_STARTED

    # zero-length goal window: everything was due on day one
    if total_days <= 0:
        expected = 100.0 if elapsed_days >= 0 else 0.0
    else:
        expected = elapsed_days / total_days * 100.0

    if progress < expected * 0.5:
        return GoalStatus.AT_RISK
    if progress < expected * 0.8:
        return GoalStatus.BEHIND_SCHEDULE
    return GoalStatus.ON_TRACK


def create_goal(
    *,
    name: str,
    target_amount: float,
    target_date: date,
    start_date: date,
    type: str = "custom",
    priority: GoalPriority = GoalPriority.MEDIUM,
    mandatory: bool = False,
    current_amount: float = 0.0,
    monthly_contribution: Optional[float] = None,
    description: Optional[str] = None,
    goal_id: Optional[str] = None,
) -> Goal:
    """New goal with a generated id; status starts as in-progress when money is already saved."""
    return Goal(
        id=goal_id or _new_id("goal"),
        name=name,
        type=type,
        target_amount=target_amount,
        current_amount=current_amount,
        target_date=target_date,
        start_date=start_date,
        priority=priority,
        mandatory=mandatory,
        status=GoalStatus.IN_PROGRESS if current_amount > 0 else GoalStatus.NOT_STARTED,
        monthly_contribution=monthly_contribution,
        description=description,
    )


def update_goal_progress(goal: Goal, new_current_amount: float, current_date: Optional[date] = None) -> Goal:
    """Replace the saved amount and re-derive status as of ``current_date`` (default: today)."""
    progress = calculate_goal_progress(new_current_amount, goal.target_amount)
    status = determine_goal_status(
        progress,
        goal.start_date,
        goal.target_date,
        current_date or date.today(),
    )
    return goal.model_copy(update={"current_amount": new_current_amount, "status": status})


@dataclass(frozen=True)
class GoalHeatmapRow:
    goal_id: str
    goal_name: str
    progress: float
    status: GoalStatus
    months_remaining: int
    on_track: bool


def generate_goal_heatmap_data(goals: Sequence[Goal], current_date: date) -> List[GoalHeatmapRow]:
    rows = []
    for goal in goals:
        progress = calculate_goal_progress(goal.current_amount, goal.target_amount)
        status = determine_goal_status(progress, goal.start_date, goal.target_date, current_date)
        rows.append(GoalHeatmapRow(
            goal_id=goal.id,
            goal_name=goal.name,
            progress=progress,
            status=status,
            months_remaining=max(0, complete_months_between(current_date, goal.target_date)),
            on_track=status in (GoalStatus.ON_TRACK, GoalStatus.COMPLETED),
        ))
    return rows


def heatmap_to_dataframe(rows: Sequence[GoalHeatmapRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "goal_id": r.goal_id,
                "goal_name": r.goal_name,
                "progress": r.progress,
                "status": r.status.value,
                "months_remaining": r.months_remaining,
                "on_track": r.on_track,
            }
            for r in rows
        ],
        columns=["goal_id", "goal_name", "progress", "status", "months_remaining", "on_track"],
    )
