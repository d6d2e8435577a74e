from typing import List, Optional, Tuple

from roadtrip_advisor.api.schemas import AssistantMessage, AssistantRefusal
from roadtrip_advisor.core.schemas import (
    Advice,
    AdvisorResult,
    Itinerary,
    TechnicalFailure,
    ValidationFailure,
)

_ERROR_TYPES = {
    "duration_exceeded": "validation_duration",
    "invalid_topic": "invalid_topic",
}

_DAY_SEPARATOR = "\n🔸🔸🔸\n\n"


def format_itinerary(result: Itinerary) -> str:
    """Render an itinerary as chat-ready markdown, keeping day, stop and activity order."""

    lines: List[str] = [
        "",
        f"✨ **ROADTRIP : {result.destination.upper()}**",
        f"🗓️ Durée recommandée : **{result.recommended_duration or 'non précisée'}**",
        f"📅 Saison idéale : **{result.ideal_season or 'non précisée'}**",
    ]
    amount = result.estimated_budget.amount if result.estimated_budget else None
    lines.append(f"💰 Budget estimé : **{amount or 'non précisé'}**")
    lines.append("")

    if result.current_weather:
        weather = result.current_weather
        lines.append(f"🌤️ **Météo à {weather.place}**")
        lines.append(f"   🌤️ {weather.condition}, {weather.temperature:g}°C")
        lines.append("")

    breakdown = result.estimated_budget.breakdown if result.estimated_budget else None
    if breakdown:
        lines.append("📊 **Répartition du budget :**")
        lines.append(f"   🏨 Hébergement : {breakdown.lodging or '-'}")
        lines.append(f"   🍽️ Nourriture : {breakdown.food or '-'}")
        lines.append(f"   ⛽ Carburant : {breakdown.fuel or '-'}")
        lines.append(f"   🎯 Activités : {breakdown.activities or '-'}")
        lines.append("")

    formatted = "\n".join(lines) + "\n🗺️ **ITINÉRAIRE DÉTAILLÉ**\n───\n\n"

    for day in result.days:
        day_lines = [f"📍 **Jour {day.day_number} :** {day.route}"]
        if day.distance:
            day_lines.append(f"   📏 Distance : {day.distance}")
        if day.driving_time:
            day_lines.append(f"   ⏱️ Temps de conduite : {day.driving_time}")
        if day.recommended_stops:
            day_lines.append("   🎯 Étapes recommandées :")
            day_lines.extend(f"     • {stop}" for stop in day.recommended_stops)
        if day.activities:
            day_lines.append("   🎨 Activités proposées :")
            day_lines.extend(f"     • {activity}" for activity in day.activities)
        if day.lodging:
            day_lines.append(f"   🏨 Hébergement suggéré : {day.lodging}")
        formatted += "\n".join(day_lines) + "\n" + _DAY_SEPARATOR

    if result.route_tips:
        formatted += "💡 **CONSEILS PRATIQUES**\n───\n"
        formatted += "".join(f"🔸 {tip}\n" for tip in result.route_tips)
        formatted += "\n"

    if result.essential_gear:
        formatted += "🎒 **ÉQUIPEMENT ESSENTIEL**\n───\n"
        formatted += "".join(f"✅ {item}\n" for item in result.essential_gear)

    return formatted


def format_advice(result: Advice) -> str:
    formatted = f"\n💬 **{result.subject.upper() or 'CONSEIL ROADTRIP'}**\n\n{result.answer}\n"
    if result.suggestions:
        formatted += "\n💡 **RECOMMANDATIONS**\n───\n"
        formatted += "".join(f"🔸 {suggestion}\n" for suggestion in result.suggestions)
    if result.useful_resources:
        formatted += "\n📚 **RESSOURCES UTILES**\n───\n"
        formatted += "".join(f"✅ {resource}\n" for resource in result.useful_resources)
    return formatted


def _result_to_response(
    result: AdvisorResult,
    *,
    user_id: Optional[str] = None,
    conversation_id: Optional[str] = None,
) -> Tuple[int, dict]:
    """Map an advisor result to ``(status_code, body)`` for the chat endpoint.

    Refusals are conversational turns (200); only technical failures are 5xx.
    """

    if isinstance(result, Itinerary):
        content = format_itinerary(result)
    elif isinstance(result, Advice):
        content = format_advice(result)
    elif isinstance(result, ValidationFailure):
        refusal = AssistantRefusal(
            content=result.message,
            user_id=user_id,
            conversation_id=conversation_id,
            error_type=_ERROR_TYPES[result.kind],
            details=result,
        )
        return 200, refusal.model_dump(by_alias=True, mode="json")
    elif isinstance(result, TechnicalFailure):
        return 500, result.model_dump(mode="json")
    else:
        raise TypeError(f"Unsupported advisor result: {type(result).__name__}")

    message = AssistantMessage(content=content, user_id=user_id, conversation_id=conversation_id)
    return 200, message.model_dump(by_alias=True, mode="json")


def result_status(result: AdvisorResult) -> int:
    return 500 if isinstance(result, TechnicalFailure) else 200
