"""Plain weather records shared by the scoring engine and the data sources."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherMeasurement:
    """The four raw readings the comfort index is derived from."""

    temperature_c: float
    humidity: float
    wind_speed_ms: float
    visibility_m: float


@dataclass(frozen=True)
class CityObservation:
    """Normalized snapshot of current conditions for one city."""

    location_name: str
    measurement: WeatherMeasurement
    description: str = "N/A"
    icon_id: str = "01d"
