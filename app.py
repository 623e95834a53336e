"""FastAPI web application serving city comfort rankings."""

import functools
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
import uvicorn

# Import our city comfort modules
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from city_comfort.cache import TTLCache, cache_clear, cache_status
from city_comfort.config import load_settings_from_env
from city_comfort.data_sources.openweather import fetch_city_weather
from city_comfort.pipelines.ranking import AggregateFetchError, WeatherAggregator

logger = logging.getLogger(__name__)

app = FastAPI(
    title="City Comfort Weather",
    description="Cities ranked by a weather comfort index, cached for five minutes",
    version="1.0.0"
)

# One cache for the whole process; every request shares it.
weather_cache = TTLCache()
_aggregator: Optional[WeatherAggregator] = None
_aggregator_lock = threading.Lock()


def get_aggregator() -> WeatherAggregator:
    global _aggregator
    if _aggregator is not None:
        return _aggregator

    # Requests run on a thread pool; only one may create the shared aggregator.
    with _aggregator_lock:
        if _aggregator is None:
            try:
                settings = load_settings_from_env()
            except ValueError as e:
                raise HTTPException(status_code=500, detail=str(e))

            _aggregator = WeatherAggregator(
                settings.locations,
                functools.partial(fetch_city_weather, settings.openweather),
                weather_cache,
                ttl_seconds=settings.cache_ttl_seconds,
            )
        return _aggregator


@app.get("/api/weather")
def ranked_weather() -> Dict[str, Any]:
    """Ranked comfort data for every tracked city."""
    aggregator = get_aggregator()
    try:
        batch = aggregator.get_ranked_weather()
    except AggregateFetchError as e:
        logger.error("Weather aggregation failed: %s", e)
        raise HTTPException(status_code=502, detail="Failed to fetch weather data")

    return batch.as_dict()


@app.get("/api/cache")
async def get_cache_status() -> Dict[str, Any]:
    """Live cache keys and hit/miss counters."""
    return {"status": "Cache Status", **cache_status(weather_cache)}


@app.delete("/api/cache")
async def delete_cache() -> Dict[str, str]:
    cache_clear(weather_cache)
    return {"message": "Cache cleared"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
