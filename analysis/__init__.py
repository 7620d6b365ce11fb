"""
Analysis outputs — success rates, percentile bands, risk metrics, and plan decision support.
"""

from .aggregator import (
    ChanceOfSuccess,
    PercentileBandRow,
    bands_to_dataframe,
    calculate_chance_of_success,
    calculate_percentiles,
    generate_percentile_band_data,
    summarize_outcomes,
)
from .decisions import PlanReport, generate_plan_report
from .metrics import (
    SequenceRiskReport,
    SuccessInterval,
    analyze_sequence_risk,
    compute_run_metrics,
    depletion_probability_by_age,
    success_confidence_interval,
)

__all__ = [
    "ChanceOfSuccess",
    "PercentileBandRow",
    "bands_to_dataframe",
    "calculate_chance_of_success",
    "calculate_percentiles",
    "generate_percentile_band_data",
    "summarize_outcomes",
    "PlanReport",
    "generate_plan_report",
    "SequenceRiskReport",
    "SuccessInterval",
    "analyze_sequence_risk",
    "compute_run_metrics",
    "depletion_probability_by_age",
    "success_confidence_interval",
]
