"""FastAPI surface for the roadtrip advisor."""
from __future__ import annotations

import logging
import os

# Load environment variables from .env file
from dotenv import load_dotenv

# Load .env file before any other imports that might need environment variables
load_dotenv()

from typing import Any, Dict, List

import sentry_sdk
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from roadtrip_advisor.api.dependencies import (
    get_advisor_bundle,
    get_user_id,
    lifespan,
    require_user_id,
)
from roadtrip_advisor.api.response_builder import _result_to_response, result_status
from roadtrip_advisor.api.schemas import (
    AskRequest,
    ConversationHistory,
    DeleteResponse,
    RouteRequest,
    SaveMessageRequest,
    SaveMessageResponse,
)
from roadtrip_advisor.core.errors import PersistenceError
from roadtrip_advisor.services.data_service import MessageCreate, group_by_conversation
from roadtrip_advisor.services.weather import WeatherReport

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if os.getenv("SENTRY_DSN"):  # pragma: no cover - runtime configuration
    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        send_default_pii=False,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
    )

SERVER_ERROR = "Erreur serveur."

app = FastAPI(title="Roadtrip Advisor API", version="0.1.0", lifespan=lifespan)


@app.post("/ai/ask")
async def ask_roadtrip_advisor(
    payload: AskRequest,
    header_user_id: str | None = Depends(get_user_id),
) -> JSONResponse:
    """Ask the roadtrip advisor a free-text question.

    The answer is always shaped as an assistant chat message. Off-topic
    questions and trips longer than the allowed maximum come back as HTTP 200
    with ``error: true`` and an ``errorType`` so the client can show the
    refusal in the conversation; only upstream/technical failures are 500.

    Example JSON payload:
        ```json
        {
            "prompt": "Roadtrip de 10 jours en Écosse en van",
            "location": "Edinburgh",
            "includeWeather": true,
            "interests": ["châteaux", "whisky"],
            "conversationId": "c-42"
        }
        ```
    """

    if payload.text is None:
        raise HTTPException(status_code=400, detail="Le champ 'prompt' est requis.")

    user_id = payload.user_id or header_user_id
    logger.info("Advisor request received (conversation=%s)", payload.conversation_id)

    bundle = get_advisor_bundle()
    result = await bundle.advise(payload.to_advisor_request())
    status_code, body = _result_to_response(
        result, user_id=user_id, conversation_id=payload.conversation_id
    )
    if status_code >= 500:
        logger.error("Technical failure in advisor: %s", body)
    return JSONResponse(status_code=status_code, content=body)


@app.post("/ai/save", status_code=201, response_model=SaveMessageResponse)
async def save_conversation(
    payload: SaveMessageRequest,
    user_id: str | None = Depends(get_user_id),
) -> SaveMessageResponse:
    """Persist one conversation message in the data service."""

    if not payload.role or not payload.content or not payload.conversation_id:
        raise HTTPException(status_code=400, detail="Données de conversation incomplètes.")

    bundle = get_advisor_bundle()
    try:
        message = await bundle.data_service.create_message(
            MessageCreate(
                role=payload.role,
                content=payload.content,
                user_id=user_id,
                conversation_id=payload.conversation_id,
            )
        )
    except PersistenceError as exc:
        logger.error("saveConversation failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=SERVER_ERROR) from exc

    return SaveMessageResponse(success=True, message=message)


@app.get("/ai/history", response_model=ConversationHistory)
async def get_history(user_id: str = Depends(require_user_id)) -> ConversationHistory:
    """Return every message of the caller grouped by conversation id."""

    bundle = get_advisor_bundle()
    try:
        messages = await bundle.data_service.get_messages_by_user(user_id)
    except PersistenceError as exc:
        logger.error("getHistory failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=SERVER_ERROR) from exc
    return group_by_conversation(messages)


@app.delete("/ai/history", response_model=DeleteResponse)
async def delete_history(user_id: str = Depends(require_user_id)) -> DeleteResponse:
    bundle = get_advisor_bundle()
    try:
        await bundle.data_service.delete_messages_by_user(user_id)
    except PersistenceError as exc:
        logger.error("deleteHistory failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=SERVER_ERROR) from exc

    logger.info("History deleted for user %s", user_id)
    return DeleteResponse(success=True)


@app.get("/ai/conversation/{conversation_id}", response_model=List[Dict[str, Any]])
async def get_conversation(
    conversation_id: str,
    user_id: str | None = Depends(get_user_id),
) -> List[Dict[str, Any]]:
    bundle = get_advisor_bundle()
    try:
        return await bundle.data_service.get_messages_by_conversation(user_id, conversation_id)
    except PersistenceError as exc:
        logger.error("getConversationById failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=SERVER_ERROR) from exc


@app.delete("/ai/conversation/{conversation_id}", response_model=DeleteResponse)
async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(require_user_id),
) -> DeleteResponse:
    bundle = get_advisor_bundle()
    try:
        await bundle.data_service.delete_conversation(user_id, conversation_id)
    except PersistenceError as exc:
        logger.error("deleteConversation failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=SERVER_ERROR) from exc

    logger.info("Conversation %s deleted for user %s", conversation_id, user_id)
    return DeleteResponse(success=True, message="Conversation supprimée avec succès.")


@app.post("/roadtrip")
async def roadtrip(payload: AskRequest) -> JSONResponse:
    """Return the raw advisor result (no chat formatting)."""

    if payload.text is None:
        raise HTTPException(status_code=400, detail="Le champ 'query' est requis.")

    bundle = get_advisor_bundle()
    result = await bundle.advise(payload.to_advisor_request())
    return JSONResponse(status_code=result_status(result), content=result.model_dump(mode="json"))


@app.post("/roadtrip/itinerary")
async def roadtrip_itinerary(payload: RouteRequest) -> JSONResponse:
    """Detailed start-to-end itinerary with weather at the starting point."""

    bundle = get_advisor_bundle()
    result = await bundle.plan_route(
        start=payload.start_point,
        end=payload.end_point,
        waypoints=payload.waypoints,
        duration=payload.duration,
        travel_style=payload.travel_style,
        interests=payload.interests,
    )
    return JSONResponse(status_code=result_status(result), content=result.model_dump(mode="json"))


@app.get("/weather/{city}", response_model=WeatherReport)
async def weather(city: str, fresh: bool = False) -> WeatherReport:
    """Current weather for ``city``; degrades to cached or seasonal data instead of failing."""

    if not city.strip():
        raise HTTPException(status_code=400, detail="Le paramètre 'city' est requis")

    bundle = get_advisor_bundle()
    try:
        return await bundle.weather_report(city, force_fresh=fresh)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Unexpected weather error for %s: %s", city, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Erreur lors de la récupération des données météo") from exc


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health endpoint used for readiness probes."""

    return {"status": "healthy", "service": "roadtrip-advisor-api"}


@app.get("/advisor/info")
async def get_advisor_info() -> Dict[str, Any]:
    bundle = get_advisor_bundle()
    return {"advisor_info": bundle.info()}
