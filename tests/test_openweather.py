from __future__ import annotations

import pytest
import requests

from city_comfort.config import Location, OpenWeatherConfig
from city_comfort.data_sources import openweather


SAMPLE_PAYLOAD = {
    "name": "Colombo",
    "main": {"temp": 29.4, "humidity": 79},
    "wind": {"speed": 4.12},
    "visibility": 9000,
    "weather": [{"main": "Clouds", "description": "broken clouds", "icon": "04d"}],
}


class _DummyResponse:
    def __init__(self, payload: object, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self) -> object:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _DummySession:
    def __init__(self, response: _DummyResponse) -> None:
        self._response = response
        self.request_args: dict[str, object] | None = None

    def get(self, url: str, params: dict[str, str], timeout: float) -> _DummyResponse:
        self.request_args = {"url": url, "params": params, "timeout": timeout}
        return self._response


@pytest.fixture
def cfg() -> OpenWeatherConfig:
    return OpenWeatherConfig(
        base_url="https://example.com/weather",
        api_key="secret",
        timeout_seconds=5.0,
    )


def test_fetch_city_weather_builds_request_and_normalizes(cfg: OpenWeatherConfig) -> None:
    session = _DummySession(_DummyResponse(SAMPLE_PAYLOAD))

    observation = openweather.fetch_city_weather(cfg, Location("1248991", "Colombo"), session=session)

    assert session.request_args == {
        "url": "https://example.com/weather",
        "params": {"id": "1248991", "units": "metric", "appid": "secret"},
        "timeout": 5.0,
    }
    assert observation.location_name == "Colombo"
    assert observation.description == "broken clouds"
    assert observation.icon_id == "04d"
    assert observation.measurement.temperature_c == pytest.approx(29.4)
    assert observation.measurement.humidity == pytest.approx(79.0)
    assert observation.measurement.wind_speed_ms == pytest.approx(4.12)
    assert observation.measurement.visibility_m == pytest.approx(9000.0)


def test_http_error_becomes_fetch_error(cfg: OpenWeatherConfig) -> None:
    session = _DummySession(_DummyResponse({"cod": 401}, status_code=401))

    with pytest.raises(openweather.WeatherFetchError):
        openweather.fetch_city_weather(cfg, Location("1", "Nowhere"), session=session)


def test_non_json_body_becomes_fetch_error(cfg: OpenWeatherConfig) -> None:
    session = _DummySession(_DummyResponse(ValueError("no json")))

    with pytest.raises(openweather.WeatherFetchError):
        openweather.fetch_city_weather(cfg, Location("1", "Nowhere"), session=session)


def test_missing_api_key_rejected() -> None:
    cfg = OpenWeatherConfig(base_url="https://example.com/weather", api_key="")

    with pytest.raises(ValueError):
        openweather.fetch_city_weather(cfg, Location("1", "Nowhere"), session=_DummySession(_DummyResponse({})))


def test_normalize_defaults_optional_fields() -> None:
    observation = openweather.normalize_current_weather(
        {"main": {"temp": 18, "humidity": 45}},
        fallback_name="Prague",
    )

    assert observation.location_name == "Prague"
    assert observation.description == "N/A"
    assert observation.icon_id == "01d"
    assert observation.measurement.wind_speed_ms == 0.0
    assert observation.measurement.visibility_m == 10000.0


def test_normalize_rejects_malformed_payload() -> None:
    with pytest.raises(openweather.WeatherFetchError):
        openweather.normalize_current_weather({"name": "Tokyo", "main": {"temp": "warm", "humidity": 40}})

    with pytest.raises(openweather.WeatherFetchError):
        openweather.normalize_current_weather({"name": "Tokyo"})


@pytest.mark.parametrize("conditions", [{"x": 1}, ["clear"], [None]])
def test_normalize_rejects_malformed_conditions(conditions: object) -> None:
    payload = {"name": "Tokyo", "main": {"temp": 20, "humidity": 50}, "weather": conditions}

    with pytest.raises(openweather.WeatherFetchError):
        openweather.normalize_current_weather(payload)
