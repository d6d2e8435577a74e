from typing import Any, Dict, Optional

from langchain_core.runnables import Runnable

from roadtrip_advisor.core.advisor import AdvisorOrchestrator
from roadtrip_advisor.core.cache import TTLStore
from roadtrip_advisor.core.config import ApiSettings
from roadtrip_advisor.core.schemas import AdvisorRequest, AdvisorResult
from roadtrip_advisor.services import (
    DataServiceClient,
    ResponseGenerator,
    WeatherService,
    create_chat_model,
    create_data_service_client,
    create_weather_client,
)
from roadtrip_advisor.services.weather.schemas import WeatherReport

REQUIRED_SETTINGS = [
    "openai_api_key",
]


def _ensure_configuration(settings: ApiSettings) -> None:
    missing = [field for field in REQUIRED_SETTINGS if not getattr(settings, field)]
    if missing:
        joined = ", ".join(missing)
        raise RuntimeError(
            f"Missing required environment variables for the roadtrip advisor: {joined}"
        )


class AdvisorBundle:
    """Container for the advisor pipeline and its external clients.

    Attributes:
        settings: API configuration with external service credentials
        generator: Model gateway used by the orchestrator
        weather: Weather lookups shared by the advisor and the weather endpoint
        data_service: Conversation history client
        advisor: The orchestrator serving ``/ai/ask`` and ``/roadtrip``
    """

    def __init__(
        self,
        settings: ApiSettings,
        *,
        llm: Optional[Runnable] = None,
        weather: Optional[WeatherService] = None,
        data_service: Optional[DataServiceClient] = None,
    ) -> None:
        if llm is None:
            _ensure_configuration(settings)
            llm = create_chat_model(settings)

        self.settings = settings
        self.generator = ResponseGenerator(llm)
        self.weather = weather or WeatherService(
            create_weather_client(settings),
            fresh_cache=TTLStore(ttl=settings.weather_cache_ttl_s),
            fallback_cache=TTLStore(ttl=settings.weather_fallback_ttl_s),
        )
        self.data_service = data_service or create_data_service_client(settings)
        self.advisor = AdvisorOrchestrator(
            generator=self.generator,
            cache=TTLStore(ttl=settings.advisor_cache_ttl_s),
            weather=self.weather,
        )

    def __repr__(self) -> str:
        return (
            f"AdvisorBundle(model='{self.generator.model_name}', "
            f"cached_results={len(self.advisor.cache)}, "
            f"data_service='{self.data_service.base_url}')"
        )

    async def close(self) -> None:
        await self.weather.aclose()
        await self.data_service.aclose()

    async def advise(self, request: AdvisorRequest) -> AdvisorResult:
        return await self.advisor.advise(request)

    async def plan_route(self, **kwargs: Any) -> AdvisorResult:
        return await self.advisor.plan_route(**kwargs)

    async def weather_report(self, city: str, *, force_fresh: bool = False) -> WeatherReport:
        return await self.weather.report(city, force_fresh=force_fresh)

    def info(self) -> Dict[str, Any]:
        return {
            "llm_model": self.generator.model_name,
            "max_trip_days": self.advisor.max_duration_days,
            "cached_results": len(self.advisor.cache),
            "advisor_cache_ttl_s": self.advisor.cache.ttl,
        }
