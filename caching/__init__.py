"""
Caching — bounded LRU/TTL cache, memoization, and cached analysis entry points.
"""

from .analysis import MonteCarloCache, ProjectionCache
from .cache import (
    Cache,
    CacheEntryInfo,
    MemoizedFunction,
    create_cache,
    create_memoized_function,
    default_key,
)

__all__ = [
    "MonteCarloCache",
    "ProjectionCache",
    "Cache",
    "CacheEntryInfo",
    "MemoizedFunction",
    "create_cache",
    "create_memoized_function",
    "default_key",
]
