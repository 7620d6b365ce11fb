"""
Bounded in-memory cache with LRU eviction and time-based expiry.

Every entry records two counters: its insertion order (fixed at first set)
and its access order (bumped on every get or overwrite). When the cache is
full, a new key first purges every expired entry and then, if still full,
removes the entry with the smallest access order.

    get(expired key)        -> deleted, reported as a miss
    set(existing key)       -> value + timestamp + access order refreshed,
                               insertion order kept, no eviction
    clear()                 -> entries AND both counters reset

A single re-entrant lock guards each operation, so a get/set/evict sequence
is atomic with respect to other threads.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

import numpy as np
from pydantic import BaseModel

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]

_MISSING = object()


@dataclass
class _Entry:
    value: Any
    timestamp: float
    access_order: int
    insertion_order: int


@dataclass(frozen=True)
class CacheEntryInfo:
    key: Any
    access_order: int
    insertion_order: int


class Cache(Generic[K, V]):
    """
    Parameters
    ----------
    max_size : int, optional
        Entry limit. None means unbounded.
    ttl : float, optional
        Seconds an entry stays valid after its last set. None means forever.
    clock : callable
        Monotonic time source in seconds; injectable for tests.
    """

    def __init__(self, max_size: Optional[int] = None, ttl: Optional[float] = None, clock: Clock = time.monotonic):
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if ttl is not None and ttl < 0:
            raise ValueError(f"ttl must be non-negative, got {ttl}")
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._data: Dict[K, _Entry] = {}
        self._access_counter = 0
        self._insertion_counter = 0
        self._lock = threading.RLock()

    def _is_expired(self, entry: _Entry) -> bool:
        return self.ttl is not None and self._clock() - entry.timestamp >= self.ttl

    def _evict_if_needed(self) -> None:
        if self.max_size is None or len(self._data) < self.max_size:
            return

        expired = [k for k, e in self._data.items() if self._is_expired(e)]
        for k in expired:
            del self._data[k]

        if len(self._data) >= self.max_size and self._data:
            lru = min(self._data, key=lambda k: self._data[k].access_order)
            del self._data[lru]
            logger.debug("cache evicted %r (purged %d expired)", lru, len(expired))

    def get(self, key: K, default: Any = None) -> Any:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return default
            if self._is_expired(entry):
                del self._data[key]
                return default
            self._access_counter += 1
            entry.access_order = self._access_counter
            return entry.value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            now = self._clock()
            self._access_counter += 1
            entry = self._data.get(key)
            if entry is not None:
                entry.value = value
                entry.timestamp = now
                entry.access_order = self._access_counter
                return

            self._evict_if_needed()
            self._insertion_counter += 1
            self._data[key] = _Entry(
                value=value,
                timestamp=now,
                access_order=self._access_counter,
                insertion_order=self._insertion_counter,
            )

    def has(self, key: K) -> bool:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return False
            if self._is_expired(entry):
                del self._data[key]
                return False
            return True

    __contains__ = has

    def delete(self, key: K) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._access_counter = 0
            self._insertion_counter = 0

    @property
    def size(self) -> int:
        """Stored entries. An expired entry still counts until a read, write or ``has`` touches it."""
        with self._lock:
            return len(self._data)

    def __len__(self) -> int:
        return self.size

    def keys(self) -> List[K]:
        with self._lock:
            return list(self._data)

    def values(self) -> List[V]:
        with self._lock:
            return [e.value for e in self._data.values()]

    def entries(self) -> List[CacheEntryInfo]:
        with self._lock:
            return [CacheEntryInfo(k, e.access_order, e.insertion_order) for k, e in self._data.items()]


def create_cache(max_size: Optional[int] = None, ttl: Optional[float] = None, clock: Clock = time.monotonic) -> Cache:
    return Cache(max_size=max_size, ttl=ttl, clock=clock)


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _jsonable(dataclasses.asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


def default_key(*args: Any, **kwargs: Any) -> str:
    """SHA-256 of the canonical JSON form of all arguments."""
    payload = json.dumps([_jsonable(args), _jsonable(kwargs)], sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class MemoizedFunction:
    """
    Callable wrapper that caches ``fn``'s results by argument key.

    A stored ``None`` is a hit like any other value.
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        *,
        max_size: Optional[int] = None,
        ttl: Optional[float] = None,
        key_generator: Optional[Callable[..., Hashable]] = None,
        clock: Clock = time.monotonic,
    ):
        self.fn = fn
        self.key_generator = key_generator or default_key
        self.cache: Cache = Cache(max_size=max_size, ttl=ttl, clock=clock)
        self.__name__ = getattr(fn, "__name__", "memoized")
        self.__doc__ = getattr(fn, "__doc__", None)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        key = self.key_generator(*args, **kwargs)
        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("%s: cache hit", self.__name__)
            return cached

        logger.debug("%s: cache miss", self.__name__)
        result = self.fn(*args, **kwargs)
        self.cache.set(key, result)
        return result

    def clear(self) -> None:
        self.cache.clear()

    @property
    def size(self) -> int:
        return self.cache.size


def create_memoized_function(
    fn: Callable[..., Any],
    *,
    max_size: Optional[int] = None,
    ttl: Optional[float] = None,
    key_generator: Optional[Callable[..., Hashable]] = None,
    clock: Clock = time.monotonic,
) -> MemoizedFunction:
    return MemoizedFunction(fn, max_size=max_size, ttl=ttl, key_generator=key_generator, clock=clock)
