"""
Goals — progress tracking and priority-based cash-flow allocation.
"""

from .allocator import (
    AllocationSchedule,
    GoalFunding,
    PriorityAllocation,
    PrioritySimulationResult,
    allocate_over_years,
    create_cash_flow_priority,
    reorder_priorities,
    simulate_priority_allocation,
)
from .progress import (
    GoalHeatmapRow,
    calculate_goal_progress,
    create_goal,
    determine_goal_status,
    generate_goal_heatmap_data,
    heatmap_to_dataframe,
    update_goal_progress,
)

__all__ = [
    "AllocationSchedule",
    "GoalFunding",
    "PriorityAllocation",
    "PrioritySimulationResult",
    "allocate_over_years",
    "create_cash_flow_priority",
    "reorder_priorities",
    "simulate_priority_allocation",
    "GoalHeatmapRow",
    "calculate_goal_progress",
    "create_goal",
    "determine_goal_status",
    "generate_goal_heatmap_data",
    "heatmap_to_dataframe",
    "update_goal_progress",
]
