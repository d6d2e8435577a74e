"""Pydantic data models for the roadtrip advisor pipeline.

This module contains the request model accepted by the advisor, the shapes the
language model is asked to produce, and the closed set of result variants the
pipeline can hand back to the HTTP layer.

Key model categories:
- AdvisorRequest: free-text query plus optional trip parameters
- Itinerary / Advice: successful generations, normalised to English keys
- ValidationFailure / TechnicalFailure: conversational refusals and upstream errors
- AdvisorResult: discriminated union over the four variants above
- WeatherSnapshot: current conditions merged into an itinerary
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

MAX_TRIP_DAYS = 14

WeatherSource = Literal["live", "fallback_cache", "synthetic"]


class AdvisorRequest(BaseModel):
    """Free-text roadtrip question plus the optional knobs a client may send.

    Attributes:
        query: The user's question, stripped; must not be blank
        location: Place used for weather enrichment
        duration: Explicit trip length in days
        budget: Budget as a number (euros) or free text
        travel_style: Preferred style (luxe, famille, aventure, ...)
        interests: Centres of interest; order is irrelevant for caching
        include_weather: Enrich the prompt with current weather at ``location``
        include_driving_tips: Ask the model for region-specific driving advice
    """

    query: str = Field(description="Free-text travel question")
    location: Optional[str] = Field(default=None, description="Location for weather enrichment")
    duration: Optional[PositiveInt] = Field(default=None, description="Trip length in days")
    budget: Optional[Union[float, str]] = Field(default=None, description="Budget, number or text")
    travel_style: Optional[str] = Field(default=None, description="Preferred travel style")
    interests: List[str] = Field(default_factory=list, description="Centres of interest")
    include_weather: bool = Field(default=False, description="Fetch current weather for location")
    include_driving_tips: bool = Field(default=True, description="Request local driving advice")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be empty")
        return stripped

    @field_validator("interests", mode="before")
    @classmethod
    def _interests_default(cls, value):
        return [] if value is None else value


class WeatherSnapshot(BaseModel):
    """Current conditions for the requested place."""

    place: str
    condition: str
    temperature: float = Field(description="Temperature in °C")
    precipitation_mm: Optional[float] = Field(default=None, description="Rain over the last hour in mm")
    wind_speed_kmh: Optional[float] = Field(default=None, description="Wind speed in km/h")
    source: WeatherSource = "live"


class BudgetBreakdown(BaseModel):
    lodging: Optional[str] = Field(default=None, validation_alias=AliasChoices("lodging", "hebergement"))
    food: Optional[str] = Field(default=None, validation_alias=AliasChoices("food", "nourriture"))
    fuel: Optional[str] = Field(default=None, validation_alias=AliasChoices("fuel", "carburant"))
    activities: Optional[str] = Field(default=None, validation_alias=AliasChoices("activities", "activites"))

    @field_validator("lodging", "food", "fuel", "activities", mode="before")
    @classmethod
    def _stringify(cls, value):
        return value if value is None or isinstance(value, str) else str(value)


class EstimatedBudget(BaseModel):
    amount: Optional[str] = Field(default=None, validation_alias=AliasChoices("amount", "montant"))
    breakdown: Optional[BudgetBreakdown] = Field(
        default=None, validation_alias=AliasChoices("breakdown", "details")
    )

    @field_validator("amount", mode="before")
    @classmethod
    def _stringify(cls, value):
        return value if value is None or isinstance(value, str) else str(value)


class DayPlan(BaseModel):
    """One day of a roadtrip itinerary."""

    day_number: PositiveInt = Field(validation_alias=AliasChoices("day_number", "day", "jour"))
    route: str = Field(default="", validation_alias=AliasChoices("route", "trajet"))
    distance: Optional[str] = None
    driving_time: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("driving_time", "temps_conduite")
    )
    recommended_stops: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recommended_stops", "etapes_recommandees"),
    )
    lodging: Optional[str] = Field(default=None, validation_alias=AliasChoices("lodging", "hebergement"))
    activities: List[str] = Field(default_factory=list, validation_alias=AliasChoices("activities", "activites"))

    @field_validator("distance", mode="before")
    @classmethod
    def _stringify(cls, value):
        return value if value is None or isinstance(value, str) else str(value)


class RecommendedApp(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "nom"))
    description: str = ""


class QueryParameters(BaseModel):
    location: str = "non spécifié"
    duration: Union[int, str] = "non spécifié"
    budget: Union[float, str] = "non spécifié"
    style: str = "standard"


class GenerationMetadata(BaseModel):
    """Request echo attached to every generated answer."""

    generated_at: str
    query_parameters: QueryParameters = Field(default_factory=QueryParameters)


class _GeneratedResult(BaseModel):
    generated_at: Optional[str] = None
    location: Optional[str] = None
    metadata: Optional[GenerationMetadata] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Itinerary(_GeneratedResult):
    """Day-by-day roadtrip plan produced by the model."""

    type: Literal["roadtrip_itinerary"] = "roadtrip_itinerary"
    destination: str = ""
    recommended_duration: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("recommended_duration", "duree_recommandee")
    )
    estimated_budget: Optional[EstimatedBudget] = Field(
        default=None, validation_alias=AliasChoices("estimated_budget", "budget_estime")
    )
    ideal_season: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ideal_season", "saison_ideale")
    )
    days: List[DayPlan] = Field(default_factory=list, validation_alias=AliasChoices("days", "itineraire"))
    route_tips: List[str] = Field(default_factory=list, validation_alias=AliasChoices("route_tips", "conseils_route"))
    essential_gear: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("essential_gear", "equipement_essentiel")
    )
    current_weather: Optional[WeatherSnapshot] = None
    recommended_apps: List[RecommendedApp] = Field(
        default_factory=list, validation_alias=AliasChoices("recommended_apps", "apps_recommandees")
    )

    @field_validator("recommended_duration", mode="before")
    @classmethod
    def _stringify(cls, value):
        return value if value is None or isinstance(value, str) else str(value)


class Advice(_GeneratedResult):
    """General roadtrip advice that does not warrant a full itinerary."""

    type: Literal["roadtrip_advice"] = "roadtrip_advice"
    subject: str = Field(default="", validation_alias=AliasChoices("subject", "sujet"))
    answer: str = Field(default="", validation_alias=AliasChoices("answer", "reponse"))
    suggestions: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("suggestions", "recommandations")
    )
    useful_resources: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("useful_resources", "ressources_utiles")
    )


class ValidationFailure(BaseModel):
    """Conversational refusal: the request is out of scope or breaks a policy."""

    type: Literal["validation_error"] = "validation_error"
    kind: Literal["duration_exceeded", "invalid_topic"]
    message: str
    max_duration: Optional[int] = None
    requested_duration: Optional[int] = None


class TechnicalFailure(BaseModel):
    """Upstream or internal failure; the detail is for logs, not for end users."""

    type: Literal["technical_error"] = "technical_error"
    message: str
    error: Optional[str] = None


AdvisorResult = Annotated[
    Union[Itinerary, Advice, ValidationFailure, TechnicalFailure],
    Field(discriminator="type"),
]

GeneratedResult = Union[Itinerary, Advice]


__all__ = [
    "MAX_TRIP_DAYS",
    "Advice",
    "AdvisorRequest",
    "AdvisorResult",
    "BudgetBreakdown",
    "DayPlan",
    "EstimatedBudget",
    "GeneratedResult",
    "GenerationMetadata",
    "Itinerary",
    "QueryParameters",
    "RecommendedApp",
    "TechnicalFailure",
    "ValidationFailure",
    "WeatherSnapshot",
]
