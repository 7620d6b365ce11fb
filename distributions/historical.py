"""
Return sequences built from an observed history instead of a parametric
distribution.

  historical — replay the record in order, starting at an offset. Monte Carlo
               runs use rolling start years, wrapping around the end of the
               record so every sequence has the requested length.
  bootstrap  — draw each year independently, with replacement, from the
               record. Keeps the empirical shape (fat tails, skew) but throws
               away serial correlation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from core.config import ReturnSequenceConfig

from .random_source import UniformSource


@dataclass(frozen=True)
class SequenceStatistics:
    mean: float
    volatility: float  # population standard deviation
    minimum: float
    maximum: float
    years: int


def replay_historical(config: ReturnSequenceConfig, offset: int = 0) -> List[float]:
    history = config.historical_returns
    if config.years <= 0 or not history:
        return []
    n = len(history)
    start = offset % n
    return [float(history[(start + k) % n]) for k in range(config.years)]


def bootstrap_returns(config: ReturnSequenceConfig, source: UniformSource) -> List[float]:
    history = config.historical_returns
    if config.years <= 0 or not history:
        return []
    n = len(history)
    out = []
    for _ in range(config.years):
        # floor(u * n) can only reach n if u == 1.0, which a [0, 1) source never returns
        idx = min(int(math.floor(source.random() * n)), n - 1)
        out.append(float(history[idx]))
    return out


def sequence_statistics(returns: Sequence[float]) -> SequenceStatistics:
    """Mean and population volatility of a return sequence. Empty input gives zeros."""
    if len(returns) == 0:
        return SequenceStatistics(mean=0.0, volatility=0.0, minimum=0.0, maximum=0.0, years=0)
    arr = np.asarray(returns, dtype=float)
    return SequenceStatistics(
        mean=float(arr.mean()),
        volatility=float(arr.std()),
        minimum=float(arr.min()),
        maximum=float(arr.max()),
        years=int(arr.size),
    )
