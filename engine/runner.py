"""
Monte Carlo runner — orchestrates N return sequences through the single-path
projector.

Two modes of operation:
  1. Monte Carlo: sample one return sequence per run, project each, aggregate
  2. Backtest:    replay named historical periods through the same projector

Runs share nothing mutable: each one is a pure function of (profile, return
sequence) and returns its own balance list, so they may be fanned out to a
process pool. Results always come back in run order, and aggregation only
sorts and counts, so completion order never changes the answer.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from analysis.aggregator import (
    ChanceOfSuccess,
    PercentileBandRow,
    bands_to_dataframe,
    calculate_chance_of_success,
    generate_percentile_band_data,
)
from core.config import MonteCarloConfig
from core.schema import Profile
from distributions.historical import sequence_statistics
from distributions.sampler import ReturnSequence, ReturnSequenceSampler

from .projector import project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """One run: yearly ending balances, and where (if anywhere) they hit zero."""

    id: str
    yearly_balances: Tuple[float, ...]
    successful: bool
    depletion_year: Optional[int] = None

    @property
    def final_balance(self) -> float:
        return self.yearly_balances[-1] if self.yearly_balances else 0.0


@dataclass(frozen=True)
class MonteCarloAnalysis:
    """Every field is a tuple or a frozen value, so a cached analysis can be handed to many callers."""

    simulations: Tuple[SimulationResult, ...]
    chance_of_success: ChanceOfSuccess
    percentile_bands: Tuple[PercentileBandRow, ...]
    return_sequences: Tuple[Tuple[float, ...], ...] = ()

    def bands_dataframe(self) -> pd.DataFrame:
        return bands_to_dataframe(self.percentile_bands)

    def runs_dataframe(self) -> pd.DataFrame:
        """One row per run."""
        return pd.DataFrame(
            [
                {
                    "run_id": s.id,
                    "years": len(s.yearly_balances),
                    "successful": s.successful,
                    "depletion_year": s.depletion_year,
                    "final_balance": s.final_balance,
                }
                for s in self.simulations
            ],
            columns=["run_id", "years", "successful", "depletion_year", "final_balance"],
        )


@dataclass(frozen=True)
class HistoricalBacktestResult:
    period: str
    start_year: int
    end_year: int
    result: SimulationResult
    average_annual_return: float
    volatility: float


def build_result(run_id: str, yearly_balances: Sequence[float]) -> SimulationResult:
    """A run succeeds iff every recorded balance is strictly positive."""
    balances = tuple(float(b) for b in yearly_balances)
    depletion = next((i for i, b in enumerate(balances) if b <= 0), None)
    return SimulationResult(
        id=run_id,
        yearly_balances=balances,
        successful=depletion is None,
        depletion_year=depletion,
    )


def _project_run(args) -> List[float]:
    profile, sequence = args
    return project(profile, sequence)


def run_monte_carlo_simulation(
    profile: Profile,
    return_sequences: Sequence[ReturnSequence],
    num_simulations: Optional[int] = None,
    *,
    max_workers: Optional[int] = None,
) -> List[SimulationResult]:
    """
    Project one run per return sequence.

    Parameters
    ----------
    profile : Profile
        Shared, read-only input for every run.
    return_sequences : sequence of ReturnSequence
        Run i uses ``return_sequences[i]``; runs without a sequence use the
        profile's fixed growth rate.
    num_simulations : int, optional
        Defaults to ``len(return_sequences)``.
    max_workers : int, optional
        When > 1, runs are distributed over a process pool of this size.
    """
    n = len(return_sequences) if num_simulations is None else num_simulations
    work = [
        (profile, return_sequences[i] if i < len(return_sequences) else [])
        for i in range(n)
    ]

    if max_workers is not None and max_workers > 1 and n > 1:
        chunksize = max(1, n // (max_workers * 4))
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            paths = list(pool.map(_project_run, work, chunksize=chunksize))
    else:
        paths = [_project_run(w) for w in work]

    return [build_result(f"sim-{i}", path) for i, path in enumerate(paths)]


def run_monte_carlo_analysis(
    profile: Profile,
    config: MonteCarloConfig,
    *,
    max_workers: Optional[int] = None,
) -> MonteCarloAnalysis:
    """
    Full pipeline: sample sequences -> project runs -> success rate and
    percentile bands.
    """
    sampled = ReturnSequenceSampler(config).sample()
    simulations = run_monte_carlo_simulation(
        profile,
        sampled.sequences,
        config.num_simulations,
        max_workers=max_workers,
    )
    chance = calculate_chance_of_success(simulations)
    bands = generate_percentile_band_data(simulations, config.percentiles, profile.age)

    logger.debug(
        "Monte Carlo: %d runs, success rate %.1f%%, %d band rows",
        chance.total_simulations, chance.success_rate, len(bands),
    )
    return MonteCarloAnalysis(
        simulations=tuple(simulations),
        chance_of_success=chance,
        percentile_bands=tuple(bands),
        return_sequences=tuple(tuple(s) for s in sampled.sequences),
    )


def run_historical_backtest(
    profile: Profile,
    historical_returns: Mapping[str, Sequence[float]],
) -> List[HistoricalBacktestResult]:
    """Replay each named period's returns through the projector."""
    results = []
    for period, returns in historical_returns.items():
        returns = list(returns)
        stats = sequence_statistics(returns)
        results.append(
            HistoricalBacktestResult(
                period=period,
                start_year=0,
                end_year=len(returns) - 1,
                result=build_result(f"backtest-{period}", project(profile, returns)),
                average_annual_return=stats.mean,
                volatility=stats.volatility,
            )
        )
    return results


def backtest_summary(results: Sequence[HistoricalBacktestResult]) -> pd.DataFrame:
    rows: List[Dict] = []
    for r in results:
        rows.append({
            "period": r.period,
            "years": r.end_year - r.start_year + 1,
            "average_annual_return": r.average_annual_return,
            "volatility": r.volatility,
            "successful": r.result.successful,
            "depletion_year": r.result.depletion_year,
            "final_balance": r.result.final_balance,
        })
    return pd.DataFrame(rows)
