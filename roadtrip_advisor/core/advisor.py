"""Roadtrip advisor pipeline: validate, enrich, generate, normalise and cache."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol, Sequence

from roadtrip_advisor.core.cache import TTLStore, derive_cache_key
from roadtrip_advisor.core.duration import extract_duration_days
from roadtrip_advisor.core.errors import GenerationError
from roadtrip_advisor.core.post_processing import extract_json_from_output, normalise_generation
from roadtrip_advisor.core.prompts import (
    DEFAULT_ROUTE_DAYS,
    Prompt,
    PromptBuilder,
    build_route_query,
)
from roadtrip_advisor.core.schemas import (
    MAX_TRIP_DAYS,
    AdvisorRequest,
    AdvisorResult,
    GeneratedResult,
    TechnicalFailure,
    ValidationFailure,
    WeatherSnapshot,
)
from roadtrip_advisor.core.topic import KeywordTopicValidator, TopicValidator

logger = logging.getLogger(__name__)

ADVISOR_CACHE_TTL_S = 3600.0

INVALID_TOPIC_MESSAGE = (
    "Je suis spécialisé dans les conseils de roadtrip et de voyage. "
    "Pourriez-vous reformuler votre question en lien avec un voyage, une destination ou un itinéraire ?"
)
DURATION_EXCEEDED_MESSAGE = (
    "La durée maximale d'un roadtrip est de {max_days} jours. Vous avez demandé {requested} jours. "
    "Pouvez-vous réduire la durée de votre voyage ?"
)
NO_RESPONSE_MESSAGE = "Aucune réponse générée."
GENERATION_FAILED_MESSAGE = "Erreur lors de la génération des recommandations."
SHARED_GENERATION_CANCELLED = "Shared generation was cancelled"


class Generator(Protocol):
    async def generate(self, prompt: Prompt) -> Optional[str]:
        ...


class WeatherEnricher(Protocol):
    async def fetch_current(self, location: str) -> Optional[WeatherSnapshot]:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _cancel_requested() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class AdvisorOrchestrator:
    """Runs one advisor request end to end and always answers with an ``AdvisorResult``.

    Validation failures are returned before any cache access or model call.
    Successful generations are cached whole under a key derived from the
    original request; concurrent misses on the same key share a single
    generation instead of each calling the model.

    Attributes:
        generator: Model gateway returning raw JSON text
        cache: Store for finalised results
        weather: Optional weather enricher used when a request asks for it
        topic_validator: Relevance gate applied to every query
        prompt_builder: Builds the system instruction and user message
        max_duration_days: Longest trip accepted (also stated in the prompt)
    """

    def __init__(
        self,
        *,
        generator: Generator,
        cache: Optional[TTLStore[GeneratedResult]] = None,
        weather: Optional[WeatherEnricher] = None,
        topic_validator: Optional[TopicValidator] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        max_duration_days: int = MAX_TRIP_DAYS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.generator = generator
        self.cache = cache if cache is not None else TTLStore(ttl=ADVISOR_CACHE_TTL_S)
        self.weather = weather
        self.topic_validator = topic_validator or KeywordTopicValidator()
        self.prompt_builder = prompt_builder or PromptBuilder(max_days=max_duration_days)
        self.max_duration_days = max_duration_days
        self._clock = clock
        self._inflight: Dict[str, asyncio.Future] = {}

    def validate(self, request: AdvisorRequest) -> tuple[Optional[ValidationFailure], Optional[int]]:
        """Apply the topic gate and the duration ceiling.

        Returns the failure (if any) and the effective duration in days.
        """

        if not self.topic_validator.is_in_scope(request.query):
            logger.info("Rejected out-of-scope query")
            return ValidationFailure(kind="invalid_topic", message=INVALID_TOPIC_MESSAGE), None

        duration = request.duration or extract_duration_days(request.query)
        if duration is not None and duration > self.max_duration_days:
            logger.info("Rejected trip of %s days (max %s)", duration, self.max_duration_days)
            return (
                ValidationFailure(
                    kind="duration_exceeded",
                    message=DURATION_EXCEEDED_MESSAGE.format(
                        max_days=self.max_duration_days, requested=duration
                    ),
                    max_duration=self.max_duration_days,
                    requested_duration=duration,
                ),
                duration,
            )
        return None, duration

    async def advise(self, request: AdvisorRequest) -> AdvisorResult:
        """Answer ``request``; never raises."""

        try:
            failure, duration = self.validate(request)
            if failure is not None:
                return failure

            key = derive_cache_key(request)
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Advisor cache hit")
                return cached.model_copy(deep=True)

            pending = self._inflight.get(key)
            if pending is not None:
                logger.info("Joining in-flight generation for identical request")
                try:
                    result = await asyncio.shield(pending)
                except asyncio.CancelledError:
                    if not pending.cancelled() or _cancel_requested():
                        raise
                    logger.warning("Shared generation was cancelled by its originating caller")
                    return TechnicalFailure(
                        message=GENERATION_FAILED_MESSAGE, error=SHARED_GENERATION_CANCELLED
                    )
                return result.model_copy(deep=True)

            return await self._generate_once(key, request, duration)
        except Exception as exc:
            logger.error("Advisor pipeline failed: %s", exc, exc_info=True)
            return TechnicalFailure(message=GENERATION_FAILED_MESSAGE, error=str(exc))

    async def _generate_once(
        self, key: str, request: AdvisorRequest, duration: Optional[int]
    ) -> AdvisorResult:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await self._generate(request, duration)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Marks the exception retrieved when nobody joined this generation.
            future.exception()
            raise
        else:
            future.set_result(result)
        finally:
            self._inflight.pop(key, None)

        if isinstance(result, TechnicalFailure):
            return result
        self.cache.set(key, result)
        return result.model_copy(deep=True)

    async def _enrich_weather(self, request: AdvisorRequest) -> Optional[WeatherSnapshot]:
        if not (request.location and request.include_weather) or self.weather is None:
            return None
        try:
            return await self.weather.fetch_current(request.location)
        except Exception as exc:
            logger.warning("Continuing without weather for %s: %s", request.location, exc)
            return None

    async def _generate(self, request: AdvisorRequest, duration: Optional[int]) -> AdvisorResult:
        weather = await self._enrich_weather(request)

        prompt = self.prompt_builder.build(
            request.query,
            travel_style=request.travel_style,
            duration=duration,
            budget=request.budget,
            interests=request.interests,
            include_driving_tips=request.include_driving_tips,
            weather=weather,
        )

        raw_output = await self.generator.generate(prompt)
        if not raw_output:
            return TechnicalFailure(message=NO_RESPONSE_MESSAGE)

        generated_at = self._clock().isoformat()
        try:
            payload = extract_json_from_output(raw_output)
            return normalise_generation(
                payload,
                request=request,
                generated_at=generated_at,
                weather=weather,
                duration=duration,
            )
        except GenerationError as exc:
            logger.error("Unusable model output: %s", exc)
            return TechnicalFailure(message=GENERATION_FAILED_MESSAGE, error=str(exc))

    async def plan_route(
        self,
        start: str,
        end: str,
        *,
        waypoints: Sequence[str] = (),
        duration: Optional[int] = None,
        travel_style: Optional[str] = None,
        interests: Sequence[str] = (),
        location: Optional[str] = None,
    ) -> AdvisorResult:
        """Detailed start-to-end itinerary; defaults to a seven-day trip."""

        duration = duration or DEFAULT_ROUTE_DAYS
        query = build_route_query(
            start,
            end,
            waypoints=waypoints,
            duration=duration,
            travel_style=travel_style,
            interests=interests,
        )
        request = AdvisorRequest(
            query=query,
            location=location or start,
            duration=duration,
            travel_style=travel_style,
            interests=list(interests),
            include_weather=True,
            include_driving_tips=True,
        )
        return await self.advise(request)
