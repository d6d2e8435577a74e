"""Configuration helpers for API keys and environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid numeric value for {name}: {raw!r}") from exc


@dataclass(slots=True)
class ApiSettings:
    """Centralised container for the external service credentials and tunables."""

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    weather_api_key: Optional[str] = None
    data_service_url: str = "http://localhost:5002"
    sentry_dsn: Optional[str] = None
    llm_timeout_s: float = 60.0
    data_service_timeout_s: float = 10.0
    weather_timeout_s: float = 5.0
    advisor_cache_ttl_s: float = 3600.0
    weather_cache_ttl_s: float = 600.0
    weather_fallback_ttl_s: float = 86400.0 * 7

    @classmethod
    def from_env(cls) -> "ApiSettings":
        """Load settings from the process environment (``.env`` already applied)."""

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            weather_api_key=os.getenv("WEATHER_API_KEY"),
            data_service_url=os.getenv("DATA_SERVICE_URL", "http://localhost:5002"),
            sentry_dsn=os.getenv("SENTRY_DSN"),
            llm_timeout_s=_float_env("LLM_TIMEOUT_S", 60.0),
            data_service_timeout_s=_float_env("DATA_SERVICE_TIMEOUT_S", 10.0),
            weather_timeout_s=_float_env("WEATHER_TIMEOUT_S", 5.0),
            advisor_cache_ttl_s=_float_env("ADVISOR_CACHE_TTL_S", 3600.0),
            weather_cache_ttl_s=_float_env("WEATHER_CACHE_TTL_S", 600.0),
            weather_fallback_ttl_s=_float_env("WEATHER_FALLBACK_TTL_S", 86400.0 * 7),
        )

    def ensure(self, field: str) -> str:
        """Return the requested field and fail fast if it is missing."""

        value = getattr(self, field)
        if not value:
            raise RuntimeError(f"Missing configuration value: {field}")
        return value
