"""
Return Sequence Sampler — generates N yearly return sequences, one per Monte
Carlo run.

Input:  ReturnSequenceConfig (distribution, mean, volatility, years, seed)
Output: N sequences of exactly ``years`` percentage returns

Each sequence represents one plausible market history:
  Run 0: [ 12.1, -4.3,  9.8, ...]   (decent start)
  Run 1: [-18.0,  3.2, 21.5, ...]   (crash in year one)
  Run 2: [  6.9,  7.4, -1.1, ...]   (muddling through)

Method (random distribution):
  1. Draw two uniforms u1, u2 from the run's uniform source
  2. Box-Muller: z0 = sqrt(-2 ln(1-u1)) cos(2 pi u2), z1 = ... sin(2 pi u2)
  3. Scale by volatility, shift by mean: two candidate yearly returns
  4. Repeat until ``years`` values are collected, then truncate (an odd year
     count discards the spare deviate)

Seeding across runs:
  deterministic     — run i uses seed (base_seed + i); identical configs
                      reproduce identical sequences.
  non-deterministic — each run gets an independent child stream spawned from
                      a freshly-entropied numpy SeedSequence.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from core.config import DEFAULT_BASE_SEED, DistributionType, MonteCarloConfig, ReturnSequenceConfig

from .historical import bootstrap_returns, replay_historical
from .random_source import NumpyUniformSource, UniformSource, make_uniform_source

logger = logging.getLogger(__name__)

ReturnSequence = List[float]


def generate_random_returns(
    config: ReturnSequenceConfig,
    source: Optional[UniformSource] = None,
) -> ReturnSequence:
    """
    Normally distributed yearly returns via Box-Muller.

    Parameters
    ----------
    config : ReturnSequenceConfig
        ``mean_return`` and ``volatility`` in percent, ``years`` requested.
    source : UniformSource, optional
        Overrides the source derived from ``config.seed``.

    Returns
    -------
    List of exactly ``config.years`` returns (empty when ``years <= 0``).
    """
    years = config.years
    if years <= 0:
        return []
    rng = source if source is not None else make_uniform_source(config.seed)

    returns: ReturnSequence = []
    while len(returns) < years:
        u1 = rng.random()
        u2 = rng.random()
        radius = math.sqrt(-2.0 * math.log(1.0 - u1))
        angle = 2.0 * math.pi * u2
        returns.append(config.mean_return + config.volatility * radius * math.cos(angle))
        returns.append(config.mean_return + config.volatility * radius * math.sin(angle))
    return returns[:years]


def generate_return_sequence(
    config: ReturnSequenceConfig,
    source: Optional[UniformSource] = None,
    *,
    offset: int = 0,
) -> ReturnSequence:
    """Dispatch on ``config.distribution``. ``offset`` only matters for historical replay."""
    if config.distribution == DistributionType.RANDOM:
        return generate_random_returns(config, source)
    if config.distribution == DistributionType.HISTORICAL:
        return replay_historical(config, offset)
    if config.distribution == DistributionType.BOOTSTRAP:
        rng = source if source is not None else make_uniform_source(config.seed)
        return bootstrap_returns(config, rng)
    raise ValueError(f"Unsupported distribution type: {config.distribution!r}")


@dataclass
class SampledSequences:
    """Output of sampling: one return sequence per run, plus the seed each run used."""

    sequences: List[ReturnSequence]
    seeds: List[Optional[int]]

    @property
    def n_runs(self) -> int:
        return len(self.sequences)

    def to_dataframe(self) -> pd.DataFrame:
        """Long format: one row per (run, year)."""
        rows = []
        for run_id, seq in enumerate(self.sequences):
            for year, r in enumerate(seq):
                rows.append({"run_id": run_id, "year": year, "return_pct": r})
        return pd.DataFrame(rows, columns=["run_id", "year", "return_pct"])

    def summary(self) -> pd.DataFrame:
        """Per-run mean/volatility, then percentiles of those across runs."""
        if not self.sequences:
            return pd.DataFrame()
        means = np.array([np.mean(s) if len(s) else 0.0 for s in self.sequences])
        vols = np.array([np.std(s) if len(s) else 0.0 for s in self.sequences])
        pcts = [5, 25, 50, 75, 95]
        rows = []
        for name, arr in [("Mean Return", means), ("Volatility", vols)]:
            row = {"Variable": name, "Mean": float(np.mean(arr)), "Std": float(np.std(arr))}
            for p in pcts:
                row[f"P{p:02d}"] = float(np.percentile(arr, p))
            rows.append(row)
        return pd.DataFrame(rows)


class ReturnSequenceSampler:
    """
    Generates one return sequence per Monte Carlo run.

    Usage:
        sampler = ReturnSequenceSampler(mc_config)
        sampled = sampler.sample()
        # sampled.sequences[i] -> run i's yearly returns
    """

    def __init__(self, config: MonteCarloConfig):
        self.config = config

    def run_seeds(self) -> List[Optional[int]]:
        rsc = self.config.return_sequence_config
        if not self.config.deterministic:
            return [None] * self.config.num_simulations
        base = rsc.seed if rsc.seed is not None else DEFAULT_BASE_SEED
        return [base + i for i in range(self.config.num_simulations)]

    def _sources(self, seeds: Sequence[Optional[int]]) -> List[UniformSource]:
        if self.config.deterministic:
            return [make_uniform_source(s) for s in seeds]
        children = np.random.SeedSequence().spawn(len(seeds))
        return [NumpyUniformSource(np.random.default_rng(child)) for child in children]

    def sample(self) -> SampledSequences:
        rsc = self.config.return_sequence_config
        seeds = self.run_seeds()
        sources = self._sources(seeds)
        sequences = [
            generate_return_sequence(rsc, src, offset=i) for i, src in enumerate(sources)
        ]
        logger.debug(
            "Sampled %d %s sequences of %d years (deterministic=%s)",
            len(sequences), rsc.distribution.value, rsc.years, self.config.deterministic,
        )
        return SampledSequences(sequences=sequences, seeds=list(seeds))


def generate_return_sequences(config: MonteCarloConfig) -> List[ReturnSequence]:
    return ReturnSequenceSampler(config).sample().sequences
