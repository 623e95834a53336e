from __future__ import annotations

import json
from pathlib import Path

import pytest

from city_comfort.config import (
    DEFAULT_LOCATIONS,
    OPENWEATHER_CURRENT_URL,
    Location,
    load_locations,
    load_settings_from_env,
)


def test_settings_defaults() -> None:
    settings = load_settings_from_env({"OPENWEATHER_API_KEY": "secret"})

    assert settings.openweather.api_key == "secret"
    assert settings.openweather.base_url == OPENWEATHER_CURRENT_URL
    assert settings.locations == DEFAULT_LOCATIONS
    assert settings.cache_ttl_seconds == 300
    assert settings.timezone == "UTC"


def test_settings_require_api_key() -> None:
    with pytest.raises(ValueError, match="OPENWEATHER_API_KEY"):
        load_settings_from_env({})


def test_settings_reject_bad_ttl() -> None:
    with pytest.raises(ValueError):
        load_settings_from_env({"OPENWEATHER_API_KEY": "k", "COMFORT_CACHE_TTL_SECONDS": "soon"})
    with pytest.raises(ValueError):
        load_settings_from_env({"OPENWEATHER_API_KEY": "k", "COMFORT_CACHE_TTL_SECONDS": "0"})


def test_settings_read_city_file(tmp_path: Path) -> None:
    cities = tmp_path / "cities.json"
    cities.write_text(
        json.dumps({"List": [{"CityCode": 1850147, "CityName": "Tokyo"}, {"CityCode": "2643743", "CityName": "London"}]}),
        encoding="utf-8",
    )

    settings = load_settings_from_env(
        {
            "OPENWEATHER_API_KEY": "k",
            "COMFORT_CITIES_FILE": str(cities),
            "COMFORT_CACHE_TTL_SECONDS": "60",
            "COMFORT_TIMEZONE": "Asia/Tokyo",
        }
    )

    assert settings.locations == (Location("1850147", "Tokyo"), Location("2643743", "London"))
    assert settings.cache_ttl_seconds == 60
    assert settings.timezone == "Asia/Tokyo"


def test_load_locations_rejects_wrong_shape(tmp_path: Path) -> None:
    bad = tmp_path / "cities.json"
    bad.write_text(json.dumps([{"CityCode": 1}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_locations(bad)

    bad.write_text(json.dumps({"List": [{"CityCode": 1}]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_locations(bad)
