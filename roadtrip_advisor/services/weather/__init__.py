"""Weather enrichment backed by the OpenWeatherMap API.

Public API:
    - WeatherClient: async HTTP client for current conditions
    - WeatherService: cached lookup with fallback and seasonal estimate
    - WeatherReport: full report returned by the weather endpoint
    - create_weather_client: factory building the client from settings
"""
from roadtrip_advisor.services.weather.client import (
    WeatherClient,
    create_weather_client,
    parse_current_weather,
)
from roadtrip_advisor.services.weather.schemas import WeatherReport
from roadtrip_advisor.services.weather.service import WeatherService, season_for_month

__all__ = [
    "WeatherClient",
    "WeatherReport",
    "WeatherService",
    "create_weather_client",
    "parse_current_weather",
    "season_for_month",
]
