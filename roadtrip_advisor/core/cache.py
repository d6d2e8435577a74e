"""TTL cache store and deterministic cache keys for advisor results."""
from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from cachetools import TTLCache

from roadtrip_advisor.core.schemas import AdvisorRequest

ValueT = TypeVar("ValueT")

CACHE_KEY_PREFIX = "roadtrip_"


class TTLStore(Generic[ValueT]):
    """Bounded in-memory store whose entries expire ``ttl`` seconds after being set.

    Values are replaced whole on ``set``; there is no read-modify-write API, so
    concurrent writers for the same key resolve as last-writer-wins.
    """

    def __init__(
        self,
        *,
        ttl: float,
        maxsize: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[ValueT]:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: Hashable, value: ValueT) -> None:
        with self._lock:
            self._cache[key] = value

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)


def _cache_payload(request: AdvisorRequest) -> dict[str, Any]:
    return {
        "query": request.query,
        "location": request.location,
        "duration": request.duration,
        "budget": request.budget,
        "travel_style": request.travel_style,
        "interests": sorted(request.interests),
    }


def derive_cache_key(request: AdvisorRequest) -> str:
    """Return a stable key for the request.

    Only the parameters that shape the generated answer participate; the
    ``include_weather`` and ``include_driving_tips`` toggles do not, and an
    omitted optional field hashes the same as an explicit ``None``.
    """

    canonical = json.dumps(
        _cache_payload(request),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"
