"""Weather lookups with a short-lived cache, a long-lived fallback and a seasonal estimate."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from roadtrip_advisor.core.cache import TTLStore
from roadtrip_advisor.core.errors import EnrichmentError
from roadtrip_advisor.core.schemas import WeatherSnapshot
from roadtrip_advisor.services.weather.client import WeatherClient
from roadtrip_advisor.services.weather.schemas import WeatherReport

logger = logging.getLogger(__name__)

FRESH_TTL_S = 600.0
FALLBACK_TTL_S = 86400.0 * 7

FALLBACK_NOTE = (
    "Ces données peuvent ne pas être à jour en raison d'une erreur de connexion à l'API météo."
)
SYNTHETIC_NOTE = (
    "Ces données sont des estimations basées sur la saison actuelle et ne sont pas des données "
    "météo réelles."
)

# month -> (temperature °C, condition, humidity %, wind km/h); rough European seasonal norms
_SEASONAL_ESTIMATES = {
    "winter": (0.0, "ciel nuageux", 80.0, 15.0),
    "spring": (15.0, "partiellement nuageux", 75.0, 12.0),
    "summer": (27.0, "ensoleillé", 70.0, 8.0),
    "autumn": (12.0, "pluie légère", 85.0, 14.0),
}


def season_for_month(month: int) -> str:
    if month in (12, 1, 2):
        return "winter"
    if month in (3, 4, 5):
        return "spring"
    if month in (6, 7, 8, 9):
        return "summer"
    return "autumn"


def _cache_key(city: str) -> str:
    return f"weather_{city.strip().lower()}"


class WeatherService:
    """Current-conditions lookup that degrades instead of failing.

    The fresh store answers repeated lookups for ten minutes; every live
    observation is also written to the fallback store, which is consulted for up
    to seven days when the provider is unreachable.
    """

    def __init__(
        self,
        client: WeatherClient,
        *,
        fresh_cache: Optional[TTLStore[WeatherReport]] = None,
        fallback_cache: Optional[TTLStore[WeatherReport]] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.client = client
        self.fresh_cache = fresh_cache if fresh_cache is not None else TTLStore(ttl=FRESH_TTL_S)
        self.fallback_cache = (
            fallback_cache if fallback_cache is not None else TTLStore(ttl=FALLBACK_TTL_S)
        )
        self._now = now

    async def _fetch_live(self, city: str) -> WeatherReport:
        key = _cache_key(city)
        report = await self.client.current(city)
        self.fresh_cache.set(key, report)
        self.fallback_cache.set(key, report)
        logger.info("Weather refreshed for %s", city)
        return report

    def _from_fallback(self, city: str) -> Optional[WeatherReport]:
        cached = self.fallback_cache.get(_cache_key(city))
        if cached is None:
            return None
        return cached.model_copy(update={"source": "fallback_cache", "note": FALLBACK_NOTE})

    def seasonal_estimate(self, city: str) -> WeatherReport:
        now = self._now()
        temperature, condition, humidity, wind = _SEASONAL_ESTIMATES[season_for_month(now.month)]
        return WeatherReport(
            city=city,
            observed_at=now.isoformat(),
            temperature=temperature,
            condition=condition,
            humidity=humidity,
            wind_speed_kmh=wind,
            source="synthetic",
            note=SYNTHETIC_NOTE,
        )

    async def report(self, city: str, *, force_fresh: bool = False) -> WeatherReport:
        """Return the best available report for ``city``.

        Order: fresh cache (unless ``force_fresh``), live provider, fallback
        cache, synthetic seasonal estimate.

        Raises:
            ValueError: if ``city`` is blank.
        """

        if not isinstance(city, str) or not city.strip():
            raise ValueError("Veuillez fournir un nom de ville valide.")

        if not force_fresh:
            cached = self.fresh_cache.get(_cache_key(city))
            if cached is not None:
                logger.debug("Weather cache hit for %s", city)
                return cached.model_copy()

        try:
            return (await self._fetch_live(city)).model_copy()
        except EnrichmentError as exc:
            logger.error("Weather provider failed for %s: %s", city, exc)

        fallback = self._from_fallback(city)
        if fallback is not None:
            return fallback
        logger.warning("No cached weather for %s, serving seasonal estimate", city)
        return self.seasonal_estimate(city)

    async def fetch_current(self, location: str) -> Optional[WeatherSnapshot]:
        """Snapshot used to enrich advisor prompts; never raises.

        Only observed data (live or fallback cache) is returned; the seasonal
        estimate is not presented to the model as an observation.
        """

        try:
            report = await self.report(location)
        except Exception as exc:
            logger.error("Weather enrichment failed for %s: %s", location, exc, exc_info=True)
            return None
        if report.source == "synthetic":
            return None
        return report.to_snapshot(place=location)

    async def aclose(self) -> None:
        await self.client.aclose()
