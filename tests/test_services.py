"""Tests for the external service clients (weather, data service, LLM gateway)."""
from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from roadtrip_advisor.core.cache import TTLStore
from roadtrip_advisor.core.errors import EnrichmentError, PersistenceError
from roadtrip_advisor.core.prompts import Prompt
from roadtrip_advisor.services.data_service import (
    DataServiceClient,
    MessageCreate,
    group_by_conversation,
)
from roadtrip_advisor.services.llm import ResponseGenerator
from roadtrip_advisor.services.weather import WeatherClient, WeatherService, season_for_month
from roadtrip_advisor.services.weather.service import FALLBACK_NOTE, SYNTHETIC_NOTE

OPENWEATHER_PAYLOAD = {
    "name": "Edinburgh",
    "dt": 1760860800,
    "main": {"temp": 11.4, "humidity": 82},
    "weather": [{"description": "bruine légère"}],
    "wind": {"speed": 5},
    "rain": {"1h": 0.4},
}


class FakeTimer:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class WeatherProvider:
    """MockTransport handler that can be switched into failure mode."""

    def __init__(self, payload=None) -> None:
        self.payload = payload or OPENWEATHER_PAYLOAD
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "unavailable"})
        return httpx.Response(200, json=self.payload)


def make_weather_service(provider, *, api_key="test-key", timer=None, now=None):
    timer = timer or FakeTimer()
    client = WeatherClient(api_key, transport=httpx.MockTransport(provider))
    kwargs = {}
    if now is not None:
        kwargs["now"] = now
    return WeatherService(
        client,
        fresh_cache=TTLStore(ttl=600, timer=timer),
        fallback_cache=TTLStore(ttl=86400 * 7, timer=timer),
        **kwargs,
    )


async def test_weather_client_maps_provider_payload():
    provider = WeatherProvider()
    client = WeatherClient("test-key", transport=httpx.MockTransport(provider))

    report = await client.current("Edinburgh")

    request = provider.requests[0]
    assert request.url.path == "/data/2.5/weather"
    assert request.url.params["q"] == "Edinburgh"
    assert request.url.params["units"] == "metric"
    assert request.url.params["lang"] == "fr"
    assert request.url.params["appid"] == "test-key"
    assert report.city == "Edinburgh"
    assert report.temperature == 11.4
    assert report.condition == "bruine légère"
    assert report.humidity == 82
    assert report.wind_speed_kmh == 18.0
    assert report.precipitation_mm == 0.4
    assert report.source == "live"
    await client.aclose()


async def test_weather_client_requires_api_key():
    provider = WeatherProvider()
    client = WeatherClient(None, transport=httpx.MockTransport(provider))

    with pytest.raises(EnrichmentError):
        await client.current("Edinburgh")
    assert provider.requests == []


async def test_weather_client_wraps_http_errors():
    provider = WeatherProvider()
    provider.status_code = 503
    client = WeatherClient("test-key", transport=httpx.MockTransport(provider))

    with pytest.raises(EnrichmentError):
        await client.current("Edinburgh")


async def test_weather_client_rejects_unexpected_payload():
    client = WeatherClient("test-key", transport=httpx.MockTransport(WeatherProvider({"cod": 200})))

    with pytest.raises(EnrichmentError):
        await client.current("Edinburgh")


async def test_weather_service_serves_fresh_cache():
    provider = WeatherProvider()
    timer = FakeTimer()
    service = make_weather_service(provider, timer=timer)

    first = await service.report("Edinburgh")
    second = await service.report("edinburgh")
    assert len(provider.requests) == 1
    assert second == first

    timer.now = 601
    await service.report("Edinburgh")
    assert len(provider.requests) == 2


async def test_weather_service_force_fresh_bypasses_cache():
    provider = WeatherProvider()
    service = make_weather_service(provider)

    await service.report("Edinburgh")
    await service.report("Edinburgh", force_fresh=True)

    assert len(provider.requests) == 2


async def test_weather_service_falls_back_to_last_observation():
    provider = WeatherProvider()
    timer = FakeTimer()
    service = make_weather_service(provider, timer=timer)

    live = await service.report("Edinburgh")
    provider.status_code = 500
    timer.now = 3600

    report = await service.report("Edinburgh")

    assert report.source == "fallback_cache"
    assert report.note == FALLBACK_NOTE
    assert report.temperature == live.temperature
    assert live.source == "live"


async def test_weather_service_seasonal_estimate_when_nothing_cached():
    provider = WeatherProvider()
    provider.status_code = 500
    service = make_weather_service(
        provider, now=lambda: datetime(2026, 7, 14, 12, 0, tzinfo=timezone.utc)
    )

    report = await service.report("Lisbonne")

    assert report.source == "synthetic"
    assert report.note == SYNTHETIC_NOTE
    assert report.city == "Lisbonne"
    assert report.temperature == 27.0
    assert report.condition == "ensoleillé"


async def test_weather_service_rejects_blank_city():
    service = make_weather_service(WeatherProvider())
    with pytest.raises(ValueError):
        await service.report("   ")


async def test_fetch_current_never_returns_synthetic_data():
    provider = WeatherProvider()
    provider.status_code = 500
    service = make_weather_service(provider)

    assert await service.fetch_current("Lisbonne") is None


async def test_fetch_current_returns_live_snapshot():
    service = make_weather_service(WeatherProvider())

    snapshot = await service.fetch_current("Édimbourg")

    assert snapshot is not None
    assert snapshot.place == "Édimbourg"
    assert snapshot.condition == "bruine légère"
    assert snapshot.temperature == 11.4
    assert snapshot.wind_speed_kmh == 18.0
    assert snapshot.precipitation_mm == 0.4


@pytest.mark.parametrize(
    ("month", "season"),
    [(1, "winter"), (4, "spring"), (9, "summer"), (11, "autumn"), (12, "winter")],
)
def test_season_for_month(month, season):
    assert season_for_month(month) == season


class DataServiceStub:
    def __init__(self, status_code: int = 200, body=None) -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)


def make_data_client(stub: DataServiceStub) -> DataServiceClient:
    return DataServiceClient("http://data:5002/", transport=httpx.MockTransport(stub))


async def test_create_message_posts_camel_case_payload():
    stub = DataServiceStub(201, {"_id": "m1", "role": "user"})
    client = make_data_client(stub)

    created = await client.create_message(
        MessageCreate(role="user", content="Bonjour", user_id="u1", conversation_id="c1")
    )

    request = stub.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://data:5002/api/messages"
    assert json.loads(request.content) == {
        "role": "user",
        "content": "Bonjour",
        "userId": "u1",
        "conversationId": "c1",
    }
    assert created == {"_id": "m1", "role": "user"}
    assert client.base_url == "http://data:5002"


async def test_conversation_requests_forward_user_id():
    stub = DataServiceStub(200, [{"role": "user", "content": "Salut"}])
    client = make_data_client(stub)

    messages = await client.get_messages_by_conversation("u1", "c1")
    await client.delete_conversation("u1", "c1")

    get_request, delete_request = stub.requests
    assert get_request.url.path == "/api/messages/conversation/c1"
    assert get_request.url.params["userId"] == "u1"
    assert delete_request.method == "DELETE"
    assert delete_request.url.params["userId"] == "u1"
    assert messages == [{"role": "user", "content": "Salut"}]


async def test_user_requests_use_user_paths():
    stub = DataServiceStub(200)
    client = make_data_client(stub)

    assert await client.get_messages_by_user("u1") == []
    assert await client.delete_messages_by_user("u1") is None

    assert [request.url.path for request in stub.requests] == [
        "/api/messages/user/u1",
        "/api/messages/user/u1",
    ]


async def test_data_service_http_error_becomes_persistence_error():
    client = make_data_client(DataServiceStub(503, {"error": "down"}))

    with pytest.raises(PersistenceError) as excinfo:
        await client.get_messages_by_user("u1")

    assert excinfo.value.status_code == 503


async def test_data_service_transport_error_becomes_persistence_error():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = DataServiceClient("http://data:5002", transport=httpx.MockTransport(unreachable))

    with pytest.raises(PersistenceError):
        await client.delete_messages_by_user("u1")


def test_group_by_conversation():
    messages = [
        {"conversationId": "c1", "content": "a"},
        {"content": "orphelin"},
        {"conversationId": "c2", "content": "b"},
        {"conversationId": "c1", "content": "c"},
    ]

    grouped = group_by_conversation(messages)

    assert list(grouped) == ["c1", "default", "c2"]
    assert [message["content"] for message in grouped["c1"]] == ["a", "c"]
    assert grouped["default"] == [{"content": "orphelin"}]


def test_message_create_rejects_unknown_role():
    with pytest.raises(ValueError):
        MessageCreate(role="bot", content="x", conversation_id="c1")


async def test_response_generator_sends_system_and_user_messages(make_llm):
    llm = make_llm('{"type": "roadtrip_advice"}')
    generator = ResponseGenerator(llm)

    text = await generator.generate(Prompt(system="consignes", user="question"))

    assert text == '{"type": "roadtrip_advice"}'
    system_message, user_message = llm.calls[0]
    assert system_message.content == "consignes"
    assert user_message.content == "question"


async def test_response_generator_joins_content_chunks(make_llm):
    llm = make_llm([{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}])

    assert await ResponseGenerator(llm).generate(Prompt(system="s", user="u")) == '{"a": 1}'


async def test_response_generator_returns_none_for_blank_output(make_llm):
    assert await ResponseGenerator(make_llm("   ")).generate(Prompt(system="s", user="u")) is None


async def test_response_generator_propagates_provider_errors(make_llm):
    generator = ResponseGenerator(make_llm(error=TimeoutError("slow provider")))

    with pytest.raises(TimeoutError):
        await generator.generate(Prompt(system="s", user="u"))


async def test_ids_are_escaped_as_single_path_segments():
    stub = DataServiceStub(200, [])
    client = make_data_client(stub)

    await client.get_messages_by_user("a/b?evil=1")
    await client.delete_conversation("u1", "../user/u2")

    user_request, conversation_request = stub.requests
    assert user_request.url.raw_path == b"/api/messages/user/a%2Fb%3Fevil%3D1"
    assert "evil" not in user_request.url.params
    assert conversation_request.url.raw_path.startswith(b"/api/messages/conversation/..%2Fuser%2Fu2")
    assert conversation_request.url.params["userId"] == "u1"
