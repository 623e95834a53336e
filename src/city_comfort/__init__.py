"""City comfort ranking toolkit.

The OpenWeather client lives in ``city_comfort.data_sources.openweather`` and
is imported on demand, so scoring and caching load without ``requests``.
"""

from .cache import MISS, TTLCache, cache_clear, cache_status
from .config import ComfortSettings, Location, OpenWeatherConfig, load_settings_from_env
from .models import CityObservation, WeatherMeasurement
from .pipelines.comfort_index import comfort_breakdown, compute_comfort_index
from .pipelines.ranking import (
    AggregateFetchError,
    RankedBatch,
    RankedEntry,
    WeatherAggregator,
    format_ranking_report,
)

__all__ = [
    "MISS",
    "TTLCache",
    "cache_clear",
    "cache_status",
    "ComfortSettings",
    "Location",
    "OpenWeatherConfig",
    "load_settings_from_env",
    "CityObservation",
    "WeatherMeasurement",
    "comfort_breakdown",
    "compute_comfort_index",
    "AggregateFetchError",
    "RankedBatch",
    "RankedEntry",
    "WeatherAggregator",
    "format_ranking_report",
]
