"""
Plan decision support — probability statements and warning flags.

Translates a Monte Carlo analysis into answers a household can act on:
  Q1: "Will the money last?"           -> success rate with a confidence band
  Q2: "How bad is a bad outcome?"      -> 10th percentile final balance
  Q3: "When would it run out?"         -> median depletion age of failed runs
  Q4: "Is early bad luck the danger?"  -> early vs late failure split
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np
import pandas as pd

from .aggregator import nearest_rank
from .metrics import analyze_sequence_risk, depletion_probability_by_age, success_confidence_interval

if TYPE_CHECKING:
    from engine.runner import MonteCarloAnalysis


@dataclass
class PlanReport:
    """Structured plan decision output."""
    plan_name: str
    target_success_rate: float

    # Core metrics
    success_rate: float
    success_lower_bound: float
    success_upper_bound: float

    # Outcome spread (final balances; depleted runs count as zero)
    p10_final_balance: float
    median_final_balance: float
    p90_final_balance: float

    # Depletion
    median_depletion_age: Optional[int]
    prob_depleted_by_85: float
    prob_depleted_by_90: float

    # Sequence risk
    early_failure_rate: float

    # Flags
    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Plan", "Value": self.plan_name, "Unit": ""},
            {"Metric": "Success Rate", "Value": f"{self.success_rate:.1f}%", "Unit": ""},
            {"Metric": "95% Interval",
             "Value": f"{self.success_lower_bound:.1%} - {self.success_upper_bound:.1%}", "Unit": ""},
            {"Metric": "Target Success Rate", "Value": f"{self.target_success_rate:.0f}%", "Unit": ""},
            {"Metric": "10th Pctl Final Balance", "Value": f"{self.p10_final_balance:,.0f}", "Unit": "currency"},
            {"Metric": "Median Final Balance", "Value": f"{self.median_final_balance:,.0f}", "Unit": "currency"},
            {"Metric": "90th Pctl Final Balance", "Value": f"{self.p90_final_balance:,.0f}", "Unit": "currency"},
            {"Metric": "Median Depletion Age",
             "Value": str(self.median_depletion_age) if self.median_depletion_age is not None else "N/A",
             "Unit": "years"},
            {"Metric": "P(Depleted by 85)", "Value": f"{self.prob_depleted_by_85:.1%}", "Unit": ""},
            {"Metric": "P(Depleted by 90)", "Value": f"{self.prob_depleted_by_90:.1%}", "Unit": ""},
            {"Metric": "Early Failure Rate", "Value": f"{self.early_failure_rate:.1%}", "Unit": ""},
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags), "Unit": ""})
        return pd.DataFrame(rows)


def generate_plan_report(
    analysis: "MonteCarloAnalysis",
    *,
    start_age: int,
    plan_name: str = "Plan",
    target_success_rate: float = 80.0,
    early_window: int = 10,
) -> PlanReport:
    """
    Build a PlanReport from a finished Monte Carlo analysis.

    Parameters
    ----------
    analysis : MonteCarloAnalysis
        Output of engine.runner.run_monte_carlo_analysis().
    start_age : int
        Age at year 0 of the projection.
    target_success_rate : float
        Success rate (percent) below which the plan is flagged.
    early_window : int
        Failures within this many years count as "early".
    """
    sims = analysis.simulations
    if not sims:
        raise ValueError("No simulations to generate a report from.")

    chance = analysis.chance_of_success
    interval = success_confidence_interval(chance)

    finals = np.sort(np.array(
        [s.yearly_balances[-1] if s.yearly_balances else 0.0 for s in sims], dtype=float
    ))
    depletion_ages = sorted(start_age + s.depletion_year for s in sims if s.depletion_year is not None)
    median_depletion_age = depletion_ages[len(depletion_ages) // 2] if depletion_ages else None

    by_age = depletion_probability_by_age(sims, start_age, [85, 90])
    risk = analyze_sequence_risk(sims, analysis.return_sequences, window=early_window)

    flags = []
    if chance.success_rate < target_success_rate:
        flags.append(
            f"LOW_SUCCESS: {chance.success_rate:.0f}% success is below the {target_success_rate:.0f}% target"
        )
    if risk.early_failure_rate > 0.10:
        flags.append(f"EARLY_DEPLETION: {risk.early_failure_rate:.0%} of runs deplete within {early_window} years")
    if interval.margin_of_error > 0.05:
        flags.append("LOW_CONFIDENCE: too few simulations for a tight success estimate")
    if by_age[85] > 0.25:
        flags.append(f"LONGEVITY_RISK: {by_age[85]:.0%} chance of depletion by age 85")

    return PlanReport(
        plan_name=plan_name,
        target_success_rate=target_success_rate,
        success_rate=chance.success_rate,
        success_lower_bound=interval.lower_bound,
        success_upper_bound=interval.upper_bound,
        p10_final_balance=nearest_rank(finals, 10),
        median_final_balance=nearest_rank(finals, 50),
        p90_final_balance=nearest_rank(finals, 90),
        median_depletion_age=median_depletion_age,
        prob_depleted_by_85=by_age[85],
        prob_depleted_by_90=by_age[90],
        early_failure_rate=risk.early_failure_rate,
        flags=flags,
    )
