"""Configuration helpers for the city comfort project."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

OPENWEATHER_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_CACHE_TTL_SECONDS = 300


@dataclass(frozen=True)
class OpenWeatherConfig:
    """Configuration bundle for the OpenWeather current weather API."""

    base_url: str
    api_key: str
    units: str = "metric"
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class Location:
    """A tracked city, identified by its OpenWeather city id."""

    city_id: str
    name: str


DEFAULT_LOCATIONS: Tuple[Location, ...] = (
    Location(city_id="1248991", name="Colombo"),
    Location(city_id="1850147", name="Tokyo"),
    Location(city_id="2643743", name="London"),
    Location(city_id="2988507", name="Paris"),
    Location(city_id="5128581", name="New York"),
    Location(city_id="2147714", name="Sydney"),
    Location(city_id="1796236", name="Shanghai"),
    Location(city_id="3067696", name="Prague"),
)


@dataclass(frozen=True)
class ComfortSettings:
    """Everything the aggregator and its callers need at runtime."""

    openweather: OpenWeatherConfig
    locations: Tuple[Location, ...] = field(default=DEFAULT_LOCATIONS)
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    timezone: str = "UTC"


def load_locations(path: Path) -> Tuple[Location, ...]:
    """Read a city list in the ``{"List": [{"CityCode", "CityName"}]}`` shape."""

    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    entries = payload.get("List") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise ValueError(f"City list {path} must contain a 'List' array")

    locations = []
    for entry in entries:
        try:
            locations.append(
                Location(city_id=str(entry["CityCode"]), name=str(entry["CityName"]))
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed city entry in {path}: {entry}") from exc
    return tuple(locations)


def load_settings_from_env(environ: Optional[dict] = None) -> ComfortSettings:
    """Build settings from environment variables.

    ``OPENWEATHER_API_KEY`` is required; everything else falls back to
    defaults.
    """

    env = os.environ if environ is None else environ

    api_key = env.get("OPENWEATHER_API_KEY")
    if not api_key:
        raise ValueError("OPENWEATHER_API_KEY environment variable is required")

    openweather = OpenWeatherConfig(
        base_url=env.get("OPENWEATHER_BASE_URL", OPENWEATHER_CURRENT_URL),
        api_key=api_key,
    )

    cities_file = env.get("COMFORT_CITIES_FILE")
    locations = load_locations(Path(cities_file)) if cities_file else DEFAULT_LOCATIONS

    raw_ttl = env.get("COMFORT_CACHE_TTL_SECONDS")
    try:
        ttl = int(raw_ttl) if raw_ttl else DEFAULT_CACHE_TTL_SECONDS
    except ValueError as exc:
        raise ValueError(f"COMFORT_CACHE_TTL_SECONDS must be an integer, got {raw_ttl!r}") from exc
    if ttl <= 0:
        raise ValueError("COMFORT_CACHE_TTL_SECONDS must be positive")

    return ComfortSettings(
        openweather=openweather,
        locations=locations,
        cache_ttl_seconds=ttl,
        timezone=env.get("COMFORT_TIMEZONE", "UTC"),
    )
