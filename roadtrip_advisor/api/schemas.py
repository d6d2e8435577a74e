from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

from roadtrip_advisor.core.schemas import AdvisorRequest, ValidationFailure


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AskRequest(_CamelModel):
    """Body of ``POST /ai/ask``; ``prompt`` and ``query`` are interchangeable."""

    prompt: Optional[str] = None
    query: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[PositiveInt] = None
    budget: Optional[Union[float, str]] = None
    travel_style: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    include_weather: bool = False
    include_driving_tips: bool = True
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None

    @property
    def text(self) -> Optional[str]:
        for value in (self.prompt, self.query):
            if value and value.strip():
                return value
        return None

    def to_advisor_request(self) -> AdvisorRequest:
        return AdvisorRequest(
            query=self.text or "",
            location=self.location,
            duration=self.duration,
            budget=self.budget,
            travel_style=self.travel_style,
            interests=self.interests,
            include_weather=self.include_weather,
            include_driving_tips=self.include_driving_tips,
        )


class RouteRequest(_CamelModel):
    """Body of ``POST /roadtrip/itinerary``."""

    start_point: str = Field(min_length=1)
    end_point: str = Field(min_length=1)
    waypoints: List[str] = Field(default_factory=list)
    duration: Optional[PositiveInt] = None
    travel_style: Optional[str] = None
    interests: List[str] = Field(default_factory=list)


class AssistantMessage(_CamelModel):
    """Conversational turn returned to the chat client."""

    role: Literal["assistant"] = "assistant"
    content: str
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None


class AssistantRefusal(AssistantMessage):
    """Validation failure rendered as an assistant message (HTTP 200)."""

    error: bool = True
    error_type: Literal["validation_duration", "invalid_topic"]
    details: ValidationFailure


class SaveMessageRequest(_CamelModel):
    role: Optional[Literal["user", "assistant", "system"]] = None
    content: Optional[str] = None
    conversation_id: Optional[str] = None


class SaveMessageResponse(BaseModel):
    success: bool = True
    message: Any = None


class DeleteResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


ConversationHistory = Dict[str, List[Dict[str, Any]]]
