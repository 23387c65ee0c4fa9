"""Bounded, time-aware cache with least-used eviction."""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Callable, Hashable, Optional

from .config import CacheConfig, TTLLike
from .memoize import memoize as _memoize
from .models import CacheEntry, CacheStats, EntrySnapshot
from .store import EntryStore

logger = logging.getLogger("tallycache.manager")

EvictionKey = Callable[[CacheEntry], Any]


def least_used(entry: CacheEntry) -> tuple[int, float]:
    """Default eviction score: fewest accesses first, then oldest access."""
    return entry.access_count, entry.last_accessed_at


class CacheManager:
    """In-memory cache bounded by ``max_size`` with optional TTL expiry.

    Eviction picks the entry with the lowest ``access_count``; ties go to
    the oldest ``last_accessed_at`` and then to the earliest write. Expired
    entries are removed lazily on ``get``/``has`` and by a full linear sweep
    before every ``set`` and ``size`` call. The sweep is O(n), which is fine
    for bounded in-process caches; larger capacities would want a heap keyed
    on expiry time.

    A single lock guards every public operation.

    Args:
        max_size: Maximum number of live entries (positive int, required).
        ttl: Lifetime in seconds or a timedelta, measured from insertion.
            None or 0 means entries never expire.
        sliding_ttl: Measure the lifetime from the last ``get``/``set`` instead.
        copy_values: Deep-copy values on ``set`` and on the way out. Values
            deepcopy cannot handle (locks, generators, files) are kept by reference.
        eviction_key: Replacement scoring function; the smallest score is evicted.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        max_size: int,
        ttl: TTLLike = None,
        *,
        sliding_ttl: bool = False,
        copy_values: bool = True,
        eviction_key: Optional[EvictionKey] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = CacheConfig(
            max_size=max_size,
            ttl=ttl,
            sliding_ttl=sliding_ttl,
            copy_values=copy_values,
        )
        self._eviction_key = eviction_key or least_used
        self._clock = clock
        self._store = EntryStore()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

        logger.debug(
            "Cache created (max_size=%d, ttl=%s, sliding=%s)",
            self._config.max_size, self._config.ttl, self._config.sliding_ttl,
        )

    @classmethod
    def from_config(cls, config: CacheConfig, **kwargs: Any) -> "CacheManager":
        """Build a cache from a validated :class:`CacheConfig`."""
        return cls(
            config.max_size,
            config.ttl,
            sliding_ttl=config.sliding_ttl,
            copy_values=config.copy_values,
            **kwargs,
        )

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def max_size(self) -> int:
        return self._config.max_size

    @property
    def ttl(self) -> Optional[float]:
        return self._config.ttl

    @property
    def sliding_ttl(self) -> bool:
        return self._config.sliding_ttl

    # -- public contract ---------------------------------------------------

    def set(self, key: Hashable, value: Any) -> "CacheManager":
        stored = self._copy(value)
        with self._lock:
            now = self._clock()
            self._sweep(now)

            if self._store.remove(key) is None and len(self._store) >= self._config.max_size:
                self._evict_one()

            entry = CacheEntry(key=key, value=stored, inserted_at=now)
            entry.touch(now)
            self._store.put(key, entry)
        return self

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value, or ``default`` when absent or expired."""
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                self._misses += 1
                return default
            entry.touch(now)
            self._hits += 1
            value = entry.value
        return self._copy(value)

    def has(self, key: Hashable) -> bool:
        """Presence check; expired entries are removed but nothing is bumped."""
        with self._lock:
            return self._live_entry(key, self._clock()) is not None

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._store.remove(key) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        with self._lock:
            self._sweep(self._clock())
            return len(self._store)

    def purge_expired(self) -> int:
        """Remove every expired entry now and return how many were dropped."""
        with self._lock:
            return self._sweep(self._clock())

    def keys(self) -> list[Hashable]:
        with self._lock:
            now = self._clock()
            return [k for k, e in self._store.iterate() if not self._is_expired(e, now)]

    def values(self) -> list[Any]:
        with self._lock:
            now = self._clock()
            live = [e.value for _, e in self._store.iterate() if not self._is_expired(e, now)]
        return [self._copy(v) for v in live]

    def stats(self) -> CacheStats:
        """Snapshot of live entries, most-used first. Does not mutate the cache."""
        with self._lock:
            now = self._clock()
            snapshots = [
                EntrySnapshot.from_entry(entry, now)
                for _, entry in self._store.iterate()
                if not self._is_expired(entry, now)
            ]
            snapshots.sort(key=lambda s: s.access_count, reverse=True)
            return CacheStats(
                size=len(snapshots),
                max_size=self._config.max_size,
                ttl=self._config.ttl,
                entries=snapshots,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
            )

    def memoize(
        self,
        func: Optional[Callable[..., Any]] = None,
        *,
        key: Optional[Callable[..., Hashable]] = None,
    ) -> Any:
        """Decorator that caches ``func`` results in this cache. See :func:`memoize`."""
        return _memoize(self, func, key=key)

    def __contains__(self, key: Hashable) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(max_size={self._config.max_size}, "
            f"ttl={self._config.ttl}, stored={len(self._store)})"
        )

    # -- internals (lock held) ---------------------------------------------

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        ttl = self._config.ttl
        if ttl is None:
            return False
        basis = entry.last_accessed_at if self._config.sliding_ttl else entry.inserted_at
        return now - basis >= ttl

    def _live_entry(self, key: Hashable, now: float) -> Optional[CacheEntry]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, now):
            self._store.remove(key)
            self._expirations += 1
            return None
        return entry

    def _sweep(self, now: float) -> int:
        if self._config.ttl is None:
            return 0
        removed = 0
        for key, entry in self._store.iterate():
            if self._is_expired(entry, now):
                self._store.remove(key)
                removed += 1
        if removed:
            self._expirations += removed
            logger.debug("Swept %d expired entries", removed)
        return removed

    def _evict_one(self) -> None:
        victim: Optional[CacheEntry] = None
        victim_score: Any = None
        for _, entry in self._store.iterate():
            score = self._eviction_key(entry)
            if victim is None or score < victim_score:
                victim, victim_score = entry, score
        if victim is None:
            return
        self._store.remove(victim.key)
        self._evictions += 1
        logger.debug(
            "Evicted %r (access_count=%d, last_accessed_at=%.3f)",
            victim.key, victim.access_count, victim.last_accessed_at,
        )

    def _copy(self, value: Any) -> Any:
        if not self._config.copy_values:
            return value
        try:
            return copy.deepcopy(value)
        except (TypeError, copy.Error) as exc:
            logger.debug("Storing %s by reference, not copyable: %s", type(value).__name__, exc)
            return value
