"""External service integrations for the roadtrip advisor.

- LLM: OpenAI chat model in JSON mode behind ``ResponseGenerator``
- Weather: OpenWeatherMap current conditions with cached fallbacks
- Data service: conversation history REST store

Example Usage:
    >>> from roadtrip_advisor.core.config import ApiSettings
    >>> from roadtrip_advisor.services import create_weather_client, WeatherService
    >>>
    >>> settings = ApiSettings.from_env()
    >>> weather = WeatherService(create_weather_client(settings))
"""

from roadtrip_advisor.services.llm import ResponseGenerator, create_chat_model

from roadtrip_advisor.services.weather import (
    WeatherClient,
    WeatherReport,
    WeatherService,
    create_weather_client,
)

from roadtrip_advisor.services.data_service import (
    DataServiceClient,
    MessageCreate,
    create_data_service_client,
    group_by_conversation,
)

__all__ = [
    # LLM
    "ResponseGenerator",
    "create_chat_model",
    # Weather
    "WeatherClient",
    "WeatherReport",
    "WeatherService",
    "create_weather_client",
    # Data service
    "DataServiceClient",
    "MessageCreate",
    "create_data_service_client",
    "group_by_conversation",
]
