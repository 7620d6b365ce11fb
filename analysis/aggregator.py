"""
Aggregate N simulated trajectories into plan-level statistics.

Instead of: "you will have $1.2M at 80" (one path, no context)
The household gets: "84% of runs never run out; at 80 the median balance is
$1.2M, the unlucky 10th percentile is $310k"

Trajectories are ragged (a run stops at the year its balance hits zero), so
every statistic here is computed per year over the runs that still have data
in that year. Early-terminated runs drop out of later denominators instead of
being counted as failures again.

Percentiles use the nearest-rank method: sort the year's balances and pick
index floor(p/100 * count), clamped to the valid range. No interpolation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class ChanceOfSuccess:
    success_rate: float
    successful_simulations: int
    total_simulations: int
    yearly_success_rates: Tuple[float, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "success_rate": self.success_rate,
            "successful_simulations": self.successful_simulations,
            "total_simulations": self.total_simulations,
            "yearly_success_rates": list(self.yearly_success_rates),
        }


@dataclass(frozen=True)
class PercentileBandRow:
    year: int
    age: int
    values: Mapping[float, float]

    def __getitem__(self, percentile: float) -> float:
        return self.values[percentile]


def _max_years(simulations: Sequence) -> int:
    return max((len(s.yearly_balances) for s in simulations), default=0)


def _balances_at(simulations: Sequence, year: int) -> np.ndarray:
    return np.array(
        [s.yearly_balances[year] for s in simulations if year < len(s.yearly_balances)],
        dtype=float,
    )


def nearest_rank(sorted_values: np.ndarray, p: float) -> float:
    """Value at percentile ``p`` (0-100) of an ascending array."""
    n = len(sorted_values)
    idx = int(math.floor((p / 100.0) * n))
    idx = max(0, min(idx, n - 1))
    return float(sorted_values[idx])


def calculate_chance_of_success(simulations: Sequence) -> ChanceOfSuccess:
    """
    Overall and year-by-year success rates, in percent.

    Year Y's rate is the share of runs with data at Y whose balance there is
    above zero. An empty input yields an all-zero result.
    """
    total = len(simulations)
    if total == 0:
        return ChanceOfSuccess(
            success_rate=0.0,
            successful_simulations=0,
            total_simulations=0,
            yearly_success_rates=(),
        )

    successful = sum(1 for s in simulations if s.successful)

    yearly = []
    for year in range(_max_years(simulations)):
        alive = _balances_at(simulations, year)
        yearly.append(float(np.mean(alive > 0) * 100.0) if alive.size else 0.0)

    return ChanceOfSuccess(
        success_rate=successful / total * 100.0,
        successful_simulations=successful,
        total_simulations=total,
        yearly_success_rates=tuple(yearly),
    )


def calculate_percentiles(
    simulations: Sequence,
    percentiles: Sequence[float],
) -> Dict[float, List[float]]:
    """
    Per-year nearest-rank percentiles across runs.

    Returns
    -------
    Dict mapping each requested percentile to a list with one value per year
    (length = the longest run). Empty input gives ``{}``.
    """
    if len(simulations) == 0:
        return {}

    result: Dict[float, List[float]] = {p: [] for p in percentiles}
    for year in range(_max_years(simulations)):
        values = np.sort(_balances_at(simulations, year))
        for p in percentiles:
            result[p].append(nearest_rank(values, p))
    return result


def generate_percentile_band_data(
    simulations: Sequence,
    percentiles: Sequence[float],
    start_age: int,
) -> List[PercentileBandRow]:
    """Percentile bands as chart-ready rows: year, age = start_age + year, one value per percentile."""
    by_pct = calculate_percentiles(simulations, percentiles)
    n_years = len(next(iter(by_pct.values()))) if by_pct else 0

    rows = []
    for year in range(n_years):
        values = {p: (by_pct[p][year] if year < len(by_pct[p]) else 0.0) for p in percentiles}
        rows.append(PercentileBandRow(year=year, age=start_age + year, values=MappingProxyType(values)))
    return rows


def percentile_label(p: float) -> str:
    return f"p{p:g}"


def bands_to_dataframe(rows: Sequence[PercentileBandRow]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=["year", "age"])
    return pd.DataFrame(
        [
            {"year": r.year, "age": r.age, **{percentile_label(p): v for p, v in r.values.items()}}
            for r in rows
        ]
    )


def summarize_outcomes(
    simulations: Sequence,
    *,
    percentiles: Tuple[float, ...] = (5, 10, 25, 50, 75, 90, 95),
) -> pd.DataFrame:
    """
    Distribution summary of end-of-run outcomes, one row per metric.

    A depleted run's final balance is zero; its depletion year only enters
    the depletion-year row.
    """
    finals = np.array(
        [s.yearly_balances[-1] if len(s.yearly_balances) else 0.0 for s in simulations],
        dtype=float,
    )
    depletion = np.array(
        [s.depletion_year for s in simulations if s.depletion_year is not None],
        dtype=float,
    )
    lengths = np.array([len(s.yearly_balances) for s in simulations], dtype=float)

    rows = []
    for label, values in [
        ("Final Balance", finals),
        ("Years Projected", lengths),
        ("Depletion Year", depletion),
    ]:
        if values.size == 0:
            continue
        ordered = np.sort(values)
        row = {
            "Metric": label,
            "Count": int(values.size),
            "Mean": float(np.mean(values)),
            "Std Dev": float(np.std(values)),
            "Min": float(ordered[0]),
        }
        for p in percentiles:
            row[f"P{p:02.0f}"] = nearest_rank(ordered, p)
        row["Max"] = float(ordered[-1])
        rows.append(row)
    return pd.DataFrame(rows)
