"""Fetch, score and rank the tracked cities, caching each ranked batch."""

from __future__ import annotations

import datetime as dt
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytz

from ..cache import MISS, TTLCache
from ..config import Location
from ..models import CityObservation
from .comfort_index import comfort_label, compute_comfort_index

logger = logging.getLogger(__name__)

BATCH_CACHE_KEY = "weather_data_all"

Fetcher = Callable[[Location], CityObservation]


class AggregateFetchError(Exception):
    """Raised when not a single tracked location could be fetched."""


@dataclass(frozen=True)
class ScoredEntry:
    """A city observation with its comfort index, not yet ranked."""

    location_name: str
    temperature_c: float
    humidity: float
    wind_speed_ms: float
    visibility_m: float
    description: str
    icon_id: str
    comfort_index: int


@dataclass(frozen=True)
class RankedEntry(ScoredEntry):
    """A scored entry placed within its batch; rank 1 is the most comfortable."""

    rank: int

    @property
    def label(self) -> str:
        return comfort_label(self.comfort_index)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.location_name,
            "temp": self.temperature_c,
            "humidity": self.humidity,
            "wind_speed": self.wind_speed_ms,
            "visibility": self.visibility_m,
            "description": self.description,
            "icon": self.icon_id,
            "comfort_index": self.comfort_index,
            "label": self.label,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class RankedBatch:
    """All ranked entries from one aggregation pass."""

    entries: Tuple[RankedEntry, ...]
    timestamp_ms: int
    cache_hit: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "data": [entry.as_dict() for entry in self.entries],
            "timestamp": self.timestamp_ms,
            "cache_hit": self.cache_hit,
        }


def score_observations(observations: Iterable[CityObservation]) -> List[ScoredEntry]:
    scored: List[ScoredEntry] = []
    for obs in observations:
        m = obs.measurement
        scored.append(
            ScoredEntry(
                location_name=obs.location_name,
                temperature_c=m.temperature_c,
                humidity=m.humidity,
                wind_speed_ms=m.wind_speed_ms,
                visibility_m=m.visibility_m,
                description=obs.description,
                icon_id=obs.icon_id,
                comfort_index=compute_comfort_index(m),
            )
        )
    return scored


def rank_entries(entries: Sequence[ScoredEntry]) -> Tuple[RankedEntry, ...]:
    """Order by comfort index, highest first, and number the result from 1.

    ``sorted`` is stable, so equal indices keep their fetch order.
    """

    ordered = sorted(entries, key=lambda entry: entry.comfort_index, reverse=True)
    return tuple(
        RankedEntry(**{f.name: getattr(entry, f.name) for f in fields(ScoredEntry)}, rank=position)
        for position, entry in enumerate(ordered, start=1)
    )


class WeatherAggregator:
    """Builds ranked weather batches for a fixed list of locations."""

    def __init__(
        self,
        locations: Sequence[Location],
        fetcher: Fetcher,
        cache: TTLCache,
        *,
        cache_key: str = BATCH_CACHE_KEY,
        ttl_seconds: Optional[float] = None,
        max_workers: int = 8,
        wall_clock: Callable[[], float] = time.time,
    ):
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")

        self.locations = tuple(locations)
        self.fetcher = fetcher
        self.cache = cache
        self.cache_key = cache_key
        self.ttl_seconds = ttl_seconds
        self.max_workers = max_workers
        self._wall_clock = wall_clock
        self._build_lock = threading.Lock()

    def get_ranked_weather(self) -> RankedBatch:
        """Return the cached batch if still live, otherwise fetch and rank afresh."""

        cached = self._cached_batch(self.cache.get)
        if cached is not None:
            return cached

        # Racing callers on a cold cache wait here and pick up the first build.
        with self._build_lock:
            # This request already counted its miss above.
            cached = self._cached_batch(self.cache.peek)
            if cached is not None:
                return cached

            batch = self._build_batch()
            self.cache.set(self.cache_key, batch, self.ttl_seconds)
            return batch

    def _cached_batch(self, lookup: Callable[[str], Any]) -> Optional[RankedBatch]:
        cached = lookup(self.cache_key)
        if cached is MISS:
            return None
        logger.debug("Serving ranked weather from cache key %s", self.cache_key)
        return replace(cached, cache_hit=True)

    def _build_batch(self) -> RankedBatch:
        observations = self._fetch_all()
        ranked = rank_entries(score_observations(observations))
        logger.info(
            "Ranked %d of %d locations", len(ranked), len(self.locations)
        )
        return RankedBatch(
            entries=ranked,
            timestamp_ms=int(self._wall_clock() * 1000),
            cache_hit=False,
        )

    def _fetch_all(self) -> List[CityObservation]:
        if not self.locations:
            return []

        workers = min(self.max_workers, len(self.locations))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="weather-fetch") as pool:
            futures = [(location, pool.submit(self.fetcher, location)) for location in self.locations]

            observations: List[CityObservation] = []
            failures: List[str] = []
            for location, future in futures:
                try:
                    observations.append(future.result())
                except Exception as exc:
                    logger.warning("Dropping %s from batch: %s", location.name, exc)
                    failures.append(location.name)

        if not observations:
            raise AggregateFetchError(
                f"Failed to fetch weather for all {len(self.locations)} locations: {', '.join(failures)}"
            )
        return observations


def format_ranking_report(batch: RankedBatch, timezone: str = "UTC") -> str:
    """Format a ranked batch as a readable plain-text table."""

    tz = pytz.timezone(timezone)
    retrieved = dt.datetime.fromtimestamp(batch.timestamp_ms / 1000, tz)

    lines = [
        "=== City Comfort Ranking ===",
        f"Retrieved: {retrieved.strftime('%Y-%m-%d %H:%M %Z')}"
        f" ({'cached' if batch.cache_hit else 'fresh'})",
        "",
        f"{'#':>3}  {'City':<18} {'CI':>3}  {'Label':<10} {'Temp':>7} {'Hum':>5} {'Wind':>8} {'Vis':>7}",
    ]
    for entry in batch.entries:
        lines.append(
            f"{entry.rank:>3}  {entry.location_name:<18} {entry.comfort_index:>3}  {entry.label:<10}"
            f" {entry.temperature_c:>5.1f}°C {entry.humidity:>4.0f}%"
            f" {entry.wind_speed_ms:>4.1f}m/s {entry.visibility_m:>6.0f}m"
        )

    if not batch.entries:
        lines.append("(no cities)")

    return "\n".join(lines)
