"""Prompt templates and the builder that assembles them for a request."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from roadtrip_advisor.core.schemas import MAX_TRIP_DAYS, WeatherSnapshot

roadtrip_system_prompt = """Tu es un conseiller expert en roadtrips avec plus de 20 ans d'expérience.
Tu aides les voyageurs à planifier des roadtrips parfaits et personnalisés en fonction de leurs besoins spécifiques.

RÈGLE ABSOLUE : un roadtrip ne dépasse jamais {max_days} jours. Si l'utilisateur demande une durée plus longue,
propose un itinéraire de {max_days} jours maximum et explique pourquoi. Le tableau "days" ne contient jamais plus
de {max_days} entrées.

Réponds TOUJOURS en JSON valide, sans texte autour, avec l'une des deux structures suivantes.

Pour les itinéraires de roadtrip :
{{
  "type": "roadtrip_itinerary",
  "destination": "Nom de la région ou du pays",
  "recommended_duration": "X jours",
  "estimated_budget": {{
    "amount": "XXX€",
    "breakdown": {{
      "lodging": "XX€/jour",
      "food": "XX€/jour",
      "fuel": "XX€/jour",
      "activities": "XX€/jour"
    }}
  }},
  "ideal_season": "Printemps/Été/Automne/Hiver",
  "days": [
    {{
      "day_number": 1,
      "route": "Ville A → Ville B",
      "distance": "XXX km",
      "driving_time": "X heures",
      "recommended_stops": ["Lieu 1", "Lieu 2"],
      "lodging": "Type ou nom d'hébergement",
      "activities": ["Activité 1", "Activité 2"]
    }}
  ],
  "route_tips": ["Conseil 1", "Conseil 2"],
  "essential_gear": ["Objet 1", "Objet 2"]
}}

Pour les conseils généraux ou les recommandations :
{{
  "type": "roadtrip_advice",
  "subject": "Sujet de la question",
  "answer": "Ta réponse détaillée",
  "suggestions": ["Recommandation 1", "Recommandation 2"],
  "useful_resources": ["Ressource 1", "Ressource 2"]
}}

Utilise des lieux réels, donne des conseils utiles et adapte les suggestions au climat si tu le connais."""

travel_style_instruction = (
    "L'utilisateur préfère un voyage de style : {travel_style}. Adapte tes recommandations en conséquence."
)
duration_instruction = (
    "L'utilisateur envisage un voyage d'environ {duration} jours. Propose un itinéraire adapté à cette durée."
)
budget_instruction = (
    "L'utilisateur a un budget d'environ {budget}. Veille à ce que tes suggestions soient abordables."
)
interests_instruction = (
    "L'utilisateur s'intéresse particulièrement à : {interests}. Mets l'accent sur ces centres d'intérêt."
)
driving_tips_instruction = (
    "Inclus toujours des conseils pratiques de conduite spécifiques à la région, comme la signalisation "
    "routière locale, les limitations de vitesse, les règles de stationnement et les précautions de sécurité."
)
extra_context_instruction = """Informations supplémentaires à prendre en compte :
{context}
Incorpore ces informations dans l'itinéraire, les activités ou les conseils."""

weather_context_line = "Météo actuelle à {place} : {condition}, {temperature}°C{details}."
precipitation_context = ", précipitations : {precipitation} mm"
wind_context = ", vent : {wind} km/h"

DEFAULT_ROUTE_DAYS = 7

route_query_template = (
    "Crée un itinéraire de roadtrip détaillé de {start} à {end}{waypoints} pour un voyage de {duration} jours"
    "{style}{interests}. Inclus les distances entre les étapes, les temps de conduite estimés "
    "et les attractions incontournables."
)


@dataclass(slots=True, frozen=True)
class Prompt:
    """System instruction and user message sent to the model."""

    system: str
    user: str


def _format_budget(budget: Union[float, str]) -> str:
    if isinstance(budget, (int, float)):
        amount = int(budget) if float(budget).is_integer() else budget
        return f"{amount}€"
    return str(budget)


def _format_number(value: float) -> Union[int, float]:
    value = round(value, 1)
    return int(value) if float(value).is_integer() else value


def format_weather_context(weather: WeatherSnapshot) -> str:
    details = ""
    if weather.precipitation_mm is not None:
        details += precipitation_context.format(precipitation=_format_number(weather.precipitation_mm))
    if weather.wind_speed_kmh is not None:
        details += wind_context.format(wind=_format_number(weather.wind_speed_kmh))
    return weather_context_line.format(
        place=weather.place,
        condition=weather.condition,
        temperature=_format_number(weather.temperature),
        details=details,
    )


class PromptBuilder:
    """Compose the system instruction and user message for one advisor request."""

    def __init__(self, *, max_days: int = MAX_TRIP_DAYS) -> None:
        self.max_days = max_days

    def build_system_prompt(
        self,
        *,
        travel_style: Optional[str] = None,
        duration: Optional[int] = None,
        budget: Optional[Union[float, str]] = None,
        interests: Sequence[str] = (),
        include_driving_tips: bool = True,
        weather: Optional[WeatherSnapshot] = None,
    ) -> str:
        sections = [roadtrip_system_prompt.format(max_days=self.max_days)]

        if travel_style:
            sections.append(travel_style_instruction.format(travel_style=travel_style))
        if duration:
            sections.append(duration_instruction.format(duration=min(duration, self.max_days)))
        if budget not in (None, ""):
            sections.append(budget_instruction.format(budget=_format_budget(budget)))
        if interests:
            sections.append(interests_instruction.format(interests=", ".join(interests)))
        if include_driving_tips:
            sections.append(driving_tips_instruction)
        if weather is not None:
            sections.append(extra_context_instruction.format(context=format_weather_context(weather)))

        return "\n\n".join(sections)

    def build(
        self,
        query: str,
        *,
        travel_style: Optional[str] = None,
        duration: Optional[int] = None,
        budget: Optional[Union[float, str]] = None,
        interests: Sequence[str] = (),
        include_driving_tips: bool = True,
        weather: Optional[WeatherSnapshot] = None,
    ) -> Prompt:
        system = self.build_system_prompt(
            travel_style=travel_style,
            duration=duration,
            budget=budget,
            interests=interests,
            include_driving_tips=include_driving_tips,
            weather=weather,
        )
        return Prompt(system=system, user=query.strip())


def build_route_query(
    start: str,
    end: str,
    *,
    waypoints: Sequence[str] = (),
    duration: Optional[int] = None,
    travel_style: Optional[str] = None,
    interests: Sequence[str] = (),
) -> str:
    """Turn a structured start/end request into the free-text query the advisor expects."""

    return route_query_template.format(
        start=start,
        end=end,
        waypoints=f" en passant par {', '.join(waypoints)}" if waypoints else "",
        duration=duration or DEFAULT_ROUTE_DAYS,
        style=f" de style {travel_style}" if travel_style else "",
        interests=f" avec un intérêt pour {', '.join(interests)}" if interests else "",
    )
