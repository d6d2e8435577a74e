"""Thin async client for the OpenWeatherMap current-conditions endpoint."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from roadtrip_advisor.core.config import ApiSettings
from roadtrip_advisor.core.errors import EnrichmentError
from roadtrip_advisor.services.weather.schemas import WeatherReport

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"


class WeatherClient:
    """Async wrapper around ``/data/2.5/weather`` (metric units, French descriptions)."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = OPENWEATHER_BASE_URL,
        timeout_s: float = 5.0,
        lang: str = "fr",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.lang = lang
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"accept": "application/json"},
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTPX client."""

        await self._client.aclose()

    async def _aget(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def current(self, location: str) -> WeatherReport:
        """Fetch current conditions for ``location``.

        Raises:
            EnrichmentError: missing API key, transport failure, HTTP error or unexpected payload.
        """

        if not self.api_key:
            raise EnrichmentError("Weather API key is not configured")

        params = {"q": location, "appid": self.api_key, "units": "metric", "lang": self.lang}
        try:
            data = await self._aget("/weather", params)
        except (httpx.HTTPError, ValueError) as exc:
            raise EnrichmentError(f"Weather lookup failed for {location!r}: {exc}") from exc

        try:
            return parse_current_weather(data, fallback_city=location)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise EnrichmentError(f"Unexpected weather payload for {location!r}") from exc


def parse_current_weather(data: Dict[str, Any], *, fallback_city: str) -> WeatherReport:
    """Map an OpenWeatherMap payload onto ``WeatherReport``."""

    main = data["main"]
    wind = data.get("wind") or {}
    rain = data.get("rain") or {}
    wind_speed = wind.get("speed")
    observed = data.get("dt")

    return WeatherReport(
        city=data.get("name") or fallback_city,
        observed_at=(
            datetime.fromtimestamp(observed, tz=timezone.utc).isoformat()
            if observed is not None
            else datetime.now(timezone.utc).isoformat()
        ),
        temperature=float(main["temp"]),
        condition=data["weather"][0]["description"],
        humidity=main.get("humidity"),
        # m/s -> km/h
        wind_speed_kmh=round(float(wind_speed) * 3.6, 1) if wind_speed is not None else None,
        precipitation_mm=float(rain.get("1h", 0) or 0),
        source="live",
    )


def create_weather_client(settings: ApiSettings, **kwargs: Any) -> WeatherClient:
    return WeatherClient(settings.weather_api_key, timeout_s=settings.weather_timeout_s, **kwargs)
