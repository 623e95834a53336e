"""Comfort index scoring from current temperature, humidity, wind and visibility.

The index is a weighted blend of four sub-scores, each in [0, 100]:

    CI = 0.40 * temperature + 0.25 * humidity + 0.20 * wind + 0.15 * visibility

Temperature carries the most weight because people are most sensitive to it.
Optimal bands are 18-24°C, 40-60% humidity, 0-2 m/s wind and 10 km or more of
visibility. The blended value is rounded half-up (98.5 -> 99).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from ..models import WeatherMeasurement

TEMPERATURE_WEIGHT = 0.4
HUMIDITY_WEIGHT = 0.25
WIND_WEIGHT = 0.2
VISIBILITY_WEIGHT = 0.15


@dataclass(frozen=True)
class ComfortIndexBreakdown:
    """Carries the final index alongside the individual sub-scores."""

    score: int
    components: Mapping[str, float]

    @property
    def label(self) -> str:
        return comfort_label(self.score)


def compute_comfort_index(measurement: WeatherMeasurement) -> int:
    """Map a measurement to an integer comfort index in [0, 100]."""

    return comfort_breakdown(measurement).score


def comfort_breakdown(measurement: WeatherMeasurement) -> ComfortIndexBreakdown:
    components = {
        "temperature": temperature_score(measurement.temperature_c),
        "humidity": humidity_score(measurement.humidity),
        "wind": wind_score(measurement.wind_speed_ms),
        "visibility": visibility_score(measurement.visibility_m),
    }

    weighted = (
        components["temperature"] * TEMPERATURE_WEIGHT
        + components["humidity"] * HUMIDITY_WEIGHT
        + components["wind"] * WIND_WEIGHT
        + components["visibility"] * VISIBILITY_WEIGHT
    )
    score = min(100, max(0, _round_half_up(weighted)))
    return ComfortIndexBreakdown(score=score, components=components)


def comfort_label(comfort_index: int) -> str:
    if comfort_index >= 80:
        return "Excellent"
    if comfort_index >= 60:
        return "Good"
    if comfort_index >= 40:
        return "Fair"
    if comfort_index >= 20:
        return "Poor"
    return "Very Poor"


def temperature_score(temp: float) -> float:
    if 18 <= temp <= 24:
        return 100.0
    if 16 <= temp < 18:
        return 90 - (18 - temp) * 5
    if 24 < temp <= 26:
        return 90 + (temp - 24) * 5
    if 10 <= temp < 16:
        return 70 + (temp - 10) * 3.33
    if 26 < temp <= 32:
        return 70 - (temp - 26) * 6.67
    if 5 <= temp < 10:
        return 40 + (temp - 5) * 6
    if temp > 32:
        return max(0.0, 10 - (temp - 32) * 2)
    if 0 <= temp < 5:
        return 20 + temp * 4
    return max(0.0, 20 - abs(temp) * 2)


def humidity_score(humidity: float) -> float:
    if 40 <= humidity <= 60:
        return 100.0
    if 30 <= humidity < 40:
        return 80 + (humidity - 30) * 2
    if 60 < humidity <= 70:
        return 95 - (humidity - 60) * 1.5
    if 20 <= humidity < 30:
        return 50 + (humidity - 20) * 3
    if 70 < humidity <= 80:
        return 50 + (80 - humidity) * 5
    return max(0.0, 30 - abs(humidity - 50) * 0.5)


def wind_score(wind_speed: float) -> float:
    if wind_speed <= 2:
        return 100.0
    if wind_speed <= 5:
        return 100 - (wind_speed - 2) * 3.33
    if wind_speed <= 10:
        return 80 - (wind_speed - 5) * 8
    return max(0.0, 40 - (wind_speed - 10) * 2)


def visibility_score(visibility: float) -> float:
    if visibility >= 10000:
        return 100.0
    if visibility >= 5000:
        return 80 + (visibility - 5000) / 5000 * 20
    if visibility >= 1000:
        return 40 + (visibility - 1000) / 4000 * 40
    return max(0.0, visibility / 1000 * 40)


def _round_half_up(value: float) -> int:
    # The weighted sum is never negative, so floor(x + 0.5) rounds half-up.
    return int(math.floor(value + 0.5))
