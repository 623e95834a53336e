"""Light wrapper for fetching current conditions from OpenWeather."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import requests

from ..config import Location, OpenWeatherConfig
from ..models import CityObservation, WeatherMeasurement

logger = logging.getLogger(__name__)

# OpenWeather caps visibility at 10 km and drops the field in some payloads.
_DEFAULT_VISIBILITY_M = 10000.0


class WeatherFetchError(Exception):
    """Raised when current conditions for a location cannot be obtained."""


def fetch_city_weather(
    cfg: OpenWeatherConfig,
    location: Location,
    *,
    session: Optional[requests.Session] = None,
) -> CityObservation:
    """Fetch current conditions for ``location`` and normalize them."""

    if not cfg.api_key:
        raise ValueError("OpenWeatherConfig.api_key must be provided")

    params = {
        "id": location.city_id,
        "units": cfg.units,
        "appid": cfg.api_key,
    }

    client = session or requests.Session()
    try:
        response = client.get(cfg.base_url, params=params, timeout=cfg.timeout_seconds)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as exc:
        raise WeatherFetchError(f"Request for {location.name} failed: {exc}") from exc
    except ValueError as exc:
        raise WeatherFetchError(f"Response for {location.name} is not JSON") from exc

    observation = normalize_current_weather(payload, fallback_name=location.name)
    logger.debug(
        "Fetched %s: %.1f°C, %s%% humidity",
        observation.location_name,
        observation.measurement.temperature_c,
        observation.measurement.humidity,
    )
    return observation


def normalize_current_weather(
    payload: Mapping[str, object],
    *,
    fallback_name: Optional[str] = None,
) -> CityObservation:
    """Convert an OpenWeather current-weather payload into an observation."""

    try:
        main = payload["main"]
        wind = payload.get("wind") or {}
        measurement = WeatherMeasurement(
            temperature_c=float(main["temp"]),  # type: ignore[index]
            humidity=float(main["humidity"]),  # type: ignore[index]
            wind_speed_ms=float(wind.get("speed", 0.0) or 0.0),  # type: ignore[union-attr]
            visibility_m=_coerce_visibility(payload.get("visibility")),
        )

        conditions = payload.get("weather") or []
        first = conditions[0] if conditions else {}  # type: ignore[index]
        description = str(first.get("description") or "N/A")  # type: ignore[union-attr]
        icon_id = str(first.get("icon") or "01d")  # type: ignore[union-attr]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise WeatherFetchError(f"Malformed weather payload: {payload}") from exc

    name = payload.get("name") or fallback_name
    if not name:
        raise WeatherFetchError("Weather payload carries no city name")

    return CityObservation(
        location_name=str(name),
        measurement=measurement,
        description=description,
        icon_id=icon_id,
    )


def _coerce_visibility(value: object) -> float:
    if value is None:
        return _DEFAULT_VISIBILITY_M
    return float(value)  # type: ignore[arg-type]
