"""LLM provider integration.

Public API:
    - ResponseGenerator: issues prompts and returns raw JSON text
    - create_chat_model: factory for the OpenAI chat model in JSON mode
"""
from roadtrip_advisor.services.llm.generator import (
    DEFAULT_TEMPERATURE,
    ResponseGenerator,
    create_chat_model,
)

__all__ = [
    "DEFAULT_TEMPERATURE",
    "ResponseGenerator",
    "create_chat_model",
]
