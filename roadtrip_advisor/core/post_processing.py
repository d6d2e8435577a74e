import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from roadtrip_advisor.core.errors import GenerationError
from roadtrip_advisor.core.schemas import (
    Advice,
    AdvisorRequest,
    GeneratedResult,
    GenerationMetadata,
    Itinerary,
    QueryParameters,
    RecommendedApp,
    WeatherSnapshot,
)

logger = logging.getLogger(__name__)

_CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)

ITINERARY_TYPE = "roadtrip_itinerary"
ADVICE_TYPE = "roadtrip_advice"

DEFAULT_RECOMMENDED_APPS: tuple[RecommendedApp, ...] = (
    RecommendedApp(name="Maps.me", description="Cartes hors ligne avec navigation"),
    RecommendedApp(name="GasBuddy", description="Trouver les stations-service les moins chères"),
    RecommendedApp(name="Roadtrippers", description="Planification d'itinéraire avec points d'intérêt"),
    RecommendedApp(name="iOverlander", description="Emplacements de camping et aires de repos"),
    RecommendedApp(name="Waze", description="Navigation avec alertes trafic en temps réel"),
)


def extract_json_from_output(raw_output: Optional[str]) -> Dict[str, Any]:
    """Parse the model output as a JSON object, tolerating code fences and stray prose.

    Raises:
        GenerationError: when no candidate parses to a JSON object.
    """
    if not raw_output or not raw_output.strip():
        raise GenerationError("Empty model output", raw_output=raw_output)

    stripped = raw_output.strip()
    candidates: List[str] = [stripped]

    for match in _CODE_BLOCK_PATTERN.finditer(raw_output):
        block = match.group(1).strip()
        if block:
            candidates.append(block)

    start_idx = stripped.find("{")
    end_idx = stripped.rfind("}")
    if start_idx != -1 and end_idx > start_idx:
        candidates.append(stripped[start_idx : end_idx + 1])

    last_error: Optional[json.JSONDecodeError] = None
    for candidate in dict.fromkeys(candidates):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        if isinstance(parsed, dict):
            return parsed
        logger.debug("Discarding JSON candidate of type %s", type(parsed).__name__)

    if last_error:
        logger.warning("Failed to parse model output as JSON: %s", last_error)
    raise GenerationError("Model output is not a JSON object", raw_output=raw_output)


def _detect_type(payload: Dict[str, Any]) -> str:
    declared = payload.get("type")
    if declared in (ITINERARY_TYPE, ADVICE_TYPE):
        return declared
    if any(key in payload for key in ("days", "itineraire")):
        return ITINERARY_TYPE
    if any(key in payload for key in ("answer", "reponse")):
        return ADVICE_TYPE
    raise GenerationError(f"Unrecognised response shape (type={declared!r})")


def build_metadata(
    request: AdvisorRequest,
    *,
    generated_at: str,
    duration: Optional[int] = None,
) -> GenerationMetadata:
    effective_duration = request.duration or duration
    return GenerationMetadata(
        generated_at=generated_at,
        query_parameters=QueryParameters(
            location=request.location or "non spécifié",
            duration=effective_duration or "non spécifié",
            budget=request.budget if request.budget not in (None, "") else "non spécifié",
            style=request.travel_style or "standard",
        ),
    )


def normalise_generation(
    payload: Dict[str, Any],
    *,
    request: AdvisorRequest,
    generated_at: str,
    weather: Optional[WeatherSnapshot] = None,
    duration: Optional[int] = None,
) -> GeneratedResult:
    """Validate the parsed payload and merge request-side context into it.

    Raises:
        GenerationError: when the payload matches neither the itinerary nor the advice shape.
    """
    result_type = _detect_type(payload)
    data = {key: value for key, value in payload.items() if key not in ("type", "meteo_actuelle", "current_weather")}
    data["generated_at"] = generated_at
    data["location"] = request.location
    data["metadata"] = build_metadata(request, generated_at=generated_at, duration=duration)

    try:
        if result_type == ITINERARY_TYPE:
            itinerary = Itinerary.model_validate(data)
            if weather is not None:
                itinerary.current_weather = weather
            if not itinerary.recommended_apps:
                itinerary.recommended_apps = [app.model_copy() for app in DEFAULT_RECOMMENDED_APPS]
            return itinerary
        return Advice.model_validate(data)
    except ValidationError as exc:
        logger.warning("Model output failed %s validation: %s", result_type, exc)
        raise GenerationError(f"Model output does not match the {result_type} schema") from exc
