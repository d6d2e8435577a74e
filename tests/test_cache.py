"""Tests for cache keys and the TTL store."""
from __future__ import annotations

import pytest

from roadtrip_advisor.core.cache import CACHE_KEY_PREFIX, TTLStore, derive_cache_key
from roadtrip_advisor.core.schemas import AdvisorRequest


class FakeTimer:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_key_is_order_insensitive_in_interests():
    first = AdvisorRequest(query="roadtrip", interests=["a", "b"])
    second = AdvisorRequest(query="roadtrip", interests=["b", "a"])
    assert derive_cache_key(first) == derive_cache_key(second)


def test_key_does_not_mutate_interests():
    request = AdvisorRequest(query="roadtrip", interests=["z", "a"])
    derive_cache_key(request)
    assert request.interests == ["z", "a"]


def test_key_is_deterministic_and_prefixed():
    request = AdvisorRequest(query="roadtrip en Norvège", location="Oslo", duration=5, budget=1200)
    key = derive_cache_key(request)
    assert key == derive_cache_key(request.model_copy(deep=True))
    assert key.startswith(CACHE_KEY_PREFIX)


def test_key_ignores_weather_and_driving_toggles():
    base = AdvisorRequest(query="roadtrip", location="Oslo")
    toggled = AdvisorRequest(query="roadtrip", location="Oslo", include_weather=True, include_driving_tips=False)
    assert derive_cache_key(base) == derive_cache_key(toggled)


def test_omitted_and_explicit_none_share_a_key():
    omitted = AdvisorRequest(query="roadtrip")
    explicit = AdvisorRequest(query="roadtrip", location=None, duration=None, budget=None, travel_style=None)
    assert derive_cache_key(omitted) == derive_cache_key(explicit)


@pytest.mark.parametrize(
    "changes",
    [
        {"query": "roadtrip en Islande"},
        {"location": "Bergen"},
        {"duration": 6},
        {"budget": "serré"},
        {"travel_style": "luxe"},
        {"interests": ["fjords"]},
    ],
)
def test_each_shaping_field_changes_the_key(changes):
    base = {"query": "roadtrip en Norvège", "location": "Oslo"}
    assert derive_cache_key(AdvisorRequest(**base)) != derive_cache_key(AdvisorRequest(**{**base, **changes}))


def test_camel_case_aliases_are_accepted():
    request = AdvisorRequest.model_validate(
        {"query": " roadtrip ", "travelStyle": "aventure", "includeWeather": True}
    )
    assert request.query == "roadtrip"
    assert request.travel_style == "aventure"
    assert request.include_weather is True


def test_ttl_store_expires_entries():
    timer = FakeTimer()
    store: TTLStore[str] = TTLStore(ttl=10, timer=timer)
    store.set("k", "v")
    assert store.get("k") == "v"
    assert "k" in store

    timer.now = 9.9
    assert store.get("k") == "v"

    timer.now = 10.0
    assert store.get("k") is None
    assert "k" not in store
    assert len(store) == 0


def test_ttl_store_replaces_whole_values():
    store: TTLStore[dict] = TTLStore(ttl=60)
    store.set("k", {"a": 1})
    store.set("k", {"b": 2})
    assert store.get("k") == {"b": 2}
    assert len(store) == 1


def test_ttl_store_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        TTLStore(ttl=0)
