"""
Memoized entry points for the two expensive calls a planning UI repeats:
the Monte Carlo analysis and the single-path projection.

Each cache is an owned object, so independent callers (or tests) never share
state through a module global.
"""

from __future__ import annotations

import time
from typing import List, Optional, Sequence, Tuple

from core.config import MONTE_CARLO_CACHE_LIMITS, PROJECTION_CACHE_LIMITS, MonteCarloConfig
from core.schema import Profile
from engine.projector import project
from engine.runner import MonteCarloAnalysis, run_monte_carlo_analysis
from .cache import Clock, MemoizedFunction, default_key


class MonteCarloCache:
    """Up to 5 analyses, each valid for two minutes, keyed by (profile, config)."""

    def __init__(
        self,
        max_size: int = MONTE_CARLO_CACHE_LIMITS[0],
        ttl: Optional[float] = MONTE_CARLO_CACHE_LIMITS[1],
        clock: Clock = time.monotonic,
    ):
        self._fn = MemoizedFunction(
            run_monte_carlo_analysis,
            max_size=max_size,
            ttl=ttl,
            key_generator=lambda profile, config, **_: default_key(profile=profile, config=config),
            clock=clock,
        )

    def get(self, profile: Profile, config: MonteCarloConfig, *, max_workers: Optional[int] = None) -> MonteCarloAnalysis:
        # max_workers only changes how the runs are scheduled, not the result
        return self._fn(profile, config, max_workers=max_workers)

    def clear(self) -> None:
        self._fn.clear()

    @property
    def size(self) -> int:
        return self._fn.size


def _frozen_projection(profile: Profile, return_sequence: Optional[List[float]] = None) -> Tuple[float, ...]:
    return tuple(project(profile, return_sequence))


class ProjectionCache:
    """Up to 10 single-path projections, each valid for one minute."""

    def __init__(
        self,
        max_size: int = PROJECTION_CACHE_LIMITS[0],
        ttl: Optional[float] = PROJECTION_CACHE_LIMITS[1],
        clock: Clock = time.monotonic,
    ):
        self._fn = MemoizedFunction(_frozen_projection, max_size=max_size, ttl=ttl, clock=clock)

    def get(self, profile: Profile, return_sequence: Optional[Sequence[float]] = None) -> Tuple[float, ...]:
        """Yearly balances as a tuple; callers wanting a list get a copy with ``list(...)``."""
        if return_sequence is None:
            return self._fn(profile)
        return self._fn(profile, list(return_sequence))

    def clear(self) -> None:
        self._fn.clear()

    @property
    def size(self) -> int:
        return self._fn.size
