"""In-memory TTL cache for backend responses."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from govquery.core.types import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300.0
DEFAULT_MAX_ENTRIES = 1000


@dataclass(slots=True)
class CacheEntry:
    """A stored value with the time it was stored and its TTL in seconds."""

    value: Any
    stored_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        return now - self.stored_at <= self.ttl


class TTLCache:
    """Passive, on-demand-expiring key/value store.

    Liveness is re-checked on every ``get``/``has``; an expired entry is
    removed the first time it is read. There is no background sweep, so
    entries for keys that are never read again stay until ``sweep()``,
    ``clear()``, or capacity eviction removes them.

    All operations take an internal lock, so one instance can be shared
    across threads.

    Parameters:
        default_ttl: TTL in seconds for ``set`` calls without one. Default 300.
        max_entries: Capacity bound. When a new key would exceed it, expired
            entries are purged and then the oldest-stored entry is evicted.
            None disables the bound.
        clock: Monotonic time source, injectable for tests.
    """

    __slots__ = ("_clock", "_default_ttl", "_entries", "_lock", "_max_entries", "_stats")

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        max_entries: int | None = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key``, or ``default`` on a miss.

        A stored ``None`` is a hit; pass a sentinel ``default`` to tell it
        apart from a miss. An expired entry is removed as a side effect.
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._stats.misses += 1
                logger.debug(f"Cache miss: {key}")
                return default
            self._stats.hits += 1
            logger.debug(f"Cache hit: {key}")
            return entry.value

    def has(self, key: str) -> bool:
        """Same liveness check as ``get`` without returning the value."""
        with self._lock:
            return self._live_entry(key) is not None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``, overwriting any existing entry.

        Parameters:
            key: The cache key.
            value: The value to cache.
            ttl: Time-to-live in seconds. None means the default TTL.
        """
        effective_ttl = self._default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            if key not in self._entries and self._max_entries is not None:
                if len(self._entries) >= self._max_entries:
                    self._purge_expired(now)
                while len(self._entries) >= self._max_entries and self._entries:
                    self._evict_oldest()
            self._entries[key] = CacheEntry(value=value, stored_at=now, ttl=effective_ttl)

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns whether an entry was stored."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Eagerly remove every expired entry. Returns how many were removed."""
        with self._lock:
            return self._purge_expired(self._clock())

    def stats(self) -> CacheStats:
        """Snapshot of the hit/miss/eviction counters."""
        with self._lock:
            return self._stats.model_copy(update={"entries": len(self._entries)})

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[key]
            self._stats.expirations += 1
            return None
        return entry

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if not e.is_live(now)]
        for key in expired:
            del self._entries[key]
        self._stats.expirations += len(expired)
        return len(expired)

    def _evict_oldest(self) -> None:
        oldest_key = min(self._entries, key=lambda k: self._entries[k].stored_at)
        del self._entries[oldest_key]
        self._stats.evictions += 1
        logger.debug(f"Cache evicted oldest entry: {oldest_key}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"TTLCache(default_ttl={self._default_ttl}, "
            f"max_entries={self._max_entries}, entries={len(self._entries)})"
        )


# Process-wide cache shared by clients that are not given their own.
default_cache = TTLCache()
