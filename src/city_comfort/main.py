"""Main CLI application for city comfort rankings."""

from __future__ import annotations

import argparse
import functools
import logging
import sys

from .cache import TTLCache
from .config import ComfortSettings, load_settings_from_env
from .data_sources.openweather import WeatherFetchError, fetch_city_weather
from .pipelines.comfort_index import comfort_breakdown
from .pipelines.ranking import AggregateFetchError, WeatherAggregator, format_ranking_report


def create_settings() -> ComfortSettings:
    """Create settings from environment variables, exiting when they are incomplete."""

    try:
        return load_settings_from_env()
    except ValueError as e:
        print(f"❌ {e}")
        print("Usage: export OPENWEATHER_API_KEY='your-api-key'")
        sys.exit(1)


def build_aggregator(settings: ComfortSettings, cache: TTLCache) -> WeatherAggregator:
    fetcher = functools.partial(fetch_city_weather, settings.openweather)
    return WeatherAggregator(
        settings.locations,
        fetcher,
        cache,
        ttl_seconds=settings.cache_ttl_seconds,
    )


def cmd_rank(args: argparse.Namespace) -> None:
    """Fetch every tracked city and print the comfort ranking."""

    settings = create_settings()
    cache = TTLCache(default_ttl_seconds=settings.cache_ttl_seconds)
    aggregator = build_aggregator(settings, cache)

    try:
        batch = aggregator.get_ranked_weather()
    except AggregateFetchError as e:
        print(f"❌ Ranking failed: {e}")
        sys.exit(1)

    print(format_ranking_report(batch, timezone=settings.timezone))


def cmd_test_api(args: argparse.Namespace) -> None:
    """Test the OpenWeather connection with the first tracked city."""

    settings = create_settings()
    if not settings.locations:
        print("⚠️ No cities configured.")
        return

    location = settings.locations[0]
    print(f"🔍 Testing OpenWeather API with {location.name}...")

    try:
        observation = fetch_city_weather(settings.openweather, location)
    except WeatherFetchError as e:
        print(f"❌ API connection failed: {e}")
        sys.exit(1)

    breakdown = comfort_breakdown(observation.measurement)
    m = observation.measurement
    print(f"✅ API connection OK: {observation.location_name} - {observation.description}")
    print(
        f"📊 {m.temperature_c:.1f}°C, {m.humidity:.0f}% humidity, "
        f"{m.wind_speed_ms:.1f} m/s wind, {m.visibility_m:.0f} m visibility"
    )
    print(f"🌟 Comfort index: {breakdown.score}/100 ({breakdown.label})")


def main() -> None:
    """Main CLI entry point."""

    parser = argparse.ArgumentParser(
        description="City weather comfort ranking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  city-comfort rank   # rank all tracked cities
  city-comfort test   # check the API connection

environment:
  OPENWEATHER_API_KEY        OpenWeather API key (required)
  COMFORT_CITIES_FILE        JSON city list ({"List": [{"CityCode", "CityName"}]})
  COMFORT_CACHE_TTL_SECONDS  cache lifetime in seconds (default: 300)
  COMFORT_TIMEZONE           timezone for report timestamps (default: UTC)
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="commands")
    subparsers.add_parser("rank", help="rank tracked cities by comfort index")
    subparsers.add_parser("test", help="test the API connection")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    command_handlers = {
        "rank": cmd_rank,
        "test": cmd_test_api,
    }

    handler = command_handlers.get(args.command)
    if handler:
        handler(args)
    else:
        print(f"❌ Unknown command: {args.command}")
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
