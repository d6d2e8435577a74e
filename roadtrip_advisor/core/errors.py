"""Exception hierarchy for failures raised inside the advisor pipeline.

User-facing outcomes are expressed through the ``AdvisorResult`` variants in
``roadtrip_advisor.core.schemas``; the exceptions below are what collaborators
raise before the orchestrator or the HTTP layer converts them.
"""
from __future__ import annotations


class AdvisorError(Exception):
    """Base class for every error raised by the roadtrip advisor."""


class GenerationError(AdvisorError):
    """The language model returned nothing usable (empty, malformed or unknown shape)."""

    def __init__(self, message: str, *, raw_output: str | None = None) -> None:
        super().__init__(message)
        self.raw_output = raw_output


class EnrichmentError(AdvisorError):
    """Optional context (weather) could not be fetched."""


class PersistenceError(AdvisorError):
    """The conversation data service failed or was unreachable."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
