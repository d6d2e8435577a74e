"""Pytest configuration and shared test doubles for the roadtrip advisor."""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage

# Ensure the project root is on sys.path so that `import roadtrip_advisor` works without installing.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roadtrip_advisor.core.schemas import WeatherSnapshot  # noqa: E402


class StubLLM:
    """Async chat-model double that records every message list it receives."""

    def __init__(
        self,
        content: Any = None,
        *,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        self.content = content
        self.error = error
        self.delay = delay
        self.calls: List[List[Any]] = []

    async def ainvoke(self, messages: List[Any]) -> AIMessage:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.content if self.content is not None else "")


class StubWeather:
    """Weather enricher double returning a fixed snapshot (or ``None``)."""

    def __init__(self, snapshot: Optional[WeatherSnapshot] = None, *, error: Optional[Exception] = None) -> None:
        self.snapshot = snapshot
        self.error = error
        self.locations: List[str] = []

    async def fetch_current(self, location: str) -> Optional[WeatherSnapshot]:
        self.locations.append(location)
        if self.error is not None:
            raise self.error
        return self.snapshot


@pytest.fixture
def itinerary_payload() -> Dict[str, Any]:
    """Representative itinerary the model is expected to return."""

    return {
        "type": "roadtrip_itinerary",
        "destination": "Écosse",
        "recommended_duration": "3 jours",
        "estimated_budget": {
            "amount": "900€",
            "breakdown": {
                "lodging": "90€/jour",
                "food": "40€/jour",
                "fuel": "30€/jour",
                "activities": "25€/jour",
            },
        },
        "ideal_season": "Été",
        "days": [
            {
                "day_number": 1,
                "route": "Édimbourg → Stirling",
                "distance": "60 km",
                "driving_time": "1 heure",
                "recommended_stops": ["Château d'Édimbourg", "Falkirk Wheel"],
                "lodging": "B&B à Stirling",
                "activities": ["Visite du château", "Balade dans la vieille ville"],
            },
            {
                "day_number": 2,
                "route": "Stirling → Glencoe",
                "distance": "150 km",
                "recommended_stops": ["Loch Lomond", "Rannoch Moor"],
                "lodging": "Auberge à Glencoe",
                "activities": ["Randonnée au Lost Valley"],
            },
            {
                "day_number": 3,
                "route": "Glencoe → Fort William",
                "distance": "30 km",
                "recommended_stops": ["Glenfinnan"],
                "lodging": "Hôtel à Fort William",
                "activities": ["Train Jacobite", "Ben Nevis"],
            },
        ],
        "route_tips": ["Roulez à gauche", "Single track roads : utilisez les passing places"],
        "essential_gear": ["Veste imperméable", "Anti-moustiques"],
    }


@pytest.fixture
def itinerary_json(itinerary_payload: Dict[str, Any]) -> str:
    return json.dumps(itinerary_payload, ensure_ascii=False)


@pytest.fixture
def advice_json() -> str:
    return json.dumps(
        {
            "type": "roadtrip_advice",
            "subject": "Location de van",
            "answer": "Réservez votre van au moins trois mois à l'avance en haute saison.",
            "suggestions": ["Comparez les assurances", "Vérifiez le kilométrage inclus"],
            "useful_resources": ["Indie Campers", "Yescapa"],
        },
        ensure_ascii=False,
    )


@pytest.fixture
def snapshot() -> WeatherSnapshot:
    return WeatherSnapshot(place="Edinburgh", condition="ciel dégagé", temperature=17.5)


@pytest.fixture
def make_llm():
    """Factory for ``StubLLM`` instances."""

    return StubLLM


@pytest.fixture
def make_weather():
    """Factory for ``StubWeather`` instances."""

    return StubWeather
