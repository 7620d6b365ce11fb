"""
Per-run and cross-run risk metrics.

Computes, for each simulated run, its peak, trough and worst drawdown, and
across runs: how confident we can be in the headline success rate, and whether
failures are driven by bad returns early on (sequence-of-returns risk).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm

from .aggregator import ChanceOfSuccess


@dataclass(frozen=True)
class SuccessInterval:
    """Success probability (0-1) with a normal-approximation confidence interval."""

    probability: float
    lower_bound: float
    upper_bound: float
    confidence_level: float
    margin_of_error: float


@dataclass(frozen=True)
class SequenceRiskReport:
    total_failures: int
    early_failures: int
    late_failures: int
    early_failure_rate: float
    late_failure_rate: float
    window_years: int
    mean_early_return_failed: Optional[float]
    mean_early_return_successful: Optional[float]


def success_confidence_interval(chance: ChanceOfSuccess, level: float = 0.95) -> SuccessInterval:
    """
    Wald interval around the success proportion: p +/- z * sqrt(p(1-p)/n),
    clipped to [0, 1]. With no runs the interval collapses to zero.
    """
    if not 0 < level < 1:
        raise ValueError(f"Confidence level must be in (0, 1), got {level}")
    n = chance.total_simulations
    p = chance.success_rate / 100.0
    if n == 0:
        return SuccessInterval(0.0, 0.0, 0.0, level, 0.0)

    z = float(norm.ppf(0.5 + level / 2.0))
    margin = z * math.sqrt(p * (1.0 - p) / n)
    return SuccessInterval(
        probability=p,
        lower_bound=max(0.0, p - margin),
        upper_bound=min(1.0, p + margin),
        confidence_level=level,
        margin_of_error=margin,
    )


def analyze_sequence_risk(
    simulations: Sequence,
    return_sequences: Sequence[Sequence[float]],
    window: int = 10,
) -> SequenceRiskReport:
    """
    Split failures into early (depleted within the first ``window`` years) and
    late, and compare average returns over that window for failed versus
    successful runs. A much lower early mean for failed runs is the signature
    of sequence-of-returns risk.
    """
    total = len(simulations)
    failed = [i for i, s in enumerate(simulations) if not s.successful]
    early = sum(1 for i in failed if simulations[i].depletion_year is not None
                and simulations[i].depletion_year < window)
    late = len(failed) - early

    def _mean_early(indices) -> Optional[float]:
        vals = [
            float(np.mean(return_sequences[i][:window]))
            for i in indices
            if i < len(return_sequences) and len(return_sequences[i][:window]) > 0
        ]
        return float(np.mean(vals)) if vals else None

    succeeded = [i for i, s in enumerate(simulations) if s.successful]
    return SequenceRiskReport(
        total_failures=len(failed),
        early_failures=early,
        late_failures=late,
        early_failure_rate=early / total if total else 0.0,
        late_failure_rate=late / total if total else 0.0,
        window_years=window,
        mean_early_return_failed=_mean_early(failed),
        mean_early_return_successful=_mean_early(succeeded),
    )


def depletion_probability_by_age(
    simulations: Sequence,
    start_age: int,
    ages: Sequence[int],
) -> Dict[int, float]:
    """Share of runs (0-1) already depleted by each age in ``ages``."""
    total = len(simulations)
    out = {}
    for age in ages:
        cutoff = age - start_age
        hit = sum(1 for s in simulations if s.depletion_year is not None and s.depletion_year <= cutoff)
        out[age] = hit / total if total else 0.0
    return out


def compute_run_metrics(simulations: Sequence) -> pd.DataFrame:
    """
    One row per run: length, outcome, final/peak/trough balance and the worst
    peak-to-trough drawdown (as a fraction of the peak).
    """
    rows = []
    for s in simulations:
        balances = np.asarray(s.yearly_balances, dtype=float)
        if balances.size:
            running_peak = np.maximum.accumulate(balances)
            with np.errstate(divide="ignore", invalid="ignore"):
                drawdowns = np.where(running_peak > 0, (running_peak - balances) / running_peak, 0.0)
            max_dd = float(drawdowns.max())
            peak, trough, final = float(balances.max()), float(balances.min()), float(balances[-1])
        else:
            max_dd = peak = trough = final = 0.0
        rows.append({
            "run_id": s.id,
            "years": int(balances.size),
            "successful": bool(s.successful),
            "depletion_year": s.depletion_year,
            "final_balance": final,
            "peak_balance": peak,
            "trough_balance": trough,
            "max_drawdown": max_dd,
        })
    return pd.DataFrame(rows)
