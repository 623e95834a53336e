"""In-process TTL cache shared by everything that talks to the weather provider."""

from __future__ import annotations

import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Set

from .config import DEFAULT_CACHE_TTL_SECONDS


class _Miss:
    def __repr__(self) -> str:
        return "MISS"


# Returned by get/peek for absent or expired keys, so a stored None is still a hit.
MISS: Any = _Miss()


@dataclass(frozen=True)
class CacheStats:
    """Counters accumulated since construction or the last ``clear()``."""

    hits: int
    misses: int
    keys: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    stored_at: float
    ttl_seconds: float

    def expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl_seconds


class TTLCache:
    """Key/value store whose entries disappear ``ttl_seconds`` after being set.

    Expired entries are evicted lazily when touched, and swept whenever
    ``keys()`` or ``stats()`` is read, so neither ever reports a stale key.
    ``get`` returns ``MISS`` for absent or expired keys unless a default is given.
    ``clear()`` drops every entry and resets the hit/miss counters.
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be positive")

        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = MISS) -> Any:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def peek(self, key: str, default: Any = MISS) -> Any:
        """Like ``get`` but leaves the hit/miss counters alone."""
        with self._lock:
            entry = self._live_entry(key)
            return default if entry is None else entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")

        with self._lock:
            self._entries[key] = _CacheEntry(value=value, stored_at=self._clock(), ttl_seconds=ttl)

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.pop(key, None)
            return entry is not None and not entry.expired(self._clock())

    def keys(self) -> Set[str]:
        with self._lock:
            self._purge_expired()
            return set(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            self._purge_expired()
            return CacheStats(hits=self._hits, misses=self._misses, keys=len(self._entries))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def _live_entry(self, key: str) -> Optional[_CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, entry in self._entries.items() if entry.expired(now)]:
            del self._entries[key]


def cache_status(cache: TTLCache) -> Dict[str, Any]:
    """Snapshot of live keys and counters for administrative endpoints."""

    return {
        "keys": sorted(cache.keys()),
        "stats": cache.stats().as_dict(),
    }


def cache_clear(cache: TTLCache) -> None:
    cache.clear()
