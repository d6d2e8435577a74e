"""Structured-JSON generation through a LangChain chat model."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from roadtrip_advisor.core.config import ApiSettings
from roadtrip_advisor.core.prompts import Prompt

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
JSON_RESPONSE_FORMAT = {"type": "json_object"}


def create_chat_model(settings: ApiSettings) -> Runnable:
    """Build the OpenAI chat model bound to JSON-object output mode."""

    llm: BaseChatModel = ChatOpenAI(
        model=settings.openai_model,
        temperature=DEFAULT_TEMPERATURE,
        api_key=settings.ensure("openai_api_key"),
        timeout=settings.llm_timeout_s,
        max_retries=1,
    )
    return llm.bind(response_format=JSON_RESPONSE_FORMAT)


def _content_to_text(content: Any) -> Optional[str]:
    if content is None:
        return None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks: List[str] = []
        for chunk in content:
            if isinstance(chunk, dict) and chunk.get("type") == "text":
                chunks.append(chunk.get("text", ""))
            elif isinstance(chunk, str):
                chunks.append(chunk)
        return "".join(chunks)
    return str(content)


class ResponseGenerator:
    """Send a system + user prompt to the model and return its raw text content."""

    def __init__(self, llm: Runnable) -> None:
        self.llm = llm

    @property
    def model_name(self) -> str:
        bound = getattr(self.llm, "bound", self.llm)
        return getattr(bound, "model_name", None) or type(bound).__name__

    async def generate(self, prompt: Prompt) -> Optional[str]:
        """Return the model's text, or ``None`` when the provider sent back nothing.

        Provider errors (network, rate limits, auth) propagate to the caller.
        """

        messages = [SystemMessage(content=prompt.system), HumanMessage(content=prompt.user)]
        logger.debug("Sending prompt to %s (%d system chars)", self.model_name, len(prompt.system))

        response = await self.llm.ainvoke(messages)
        text = _content_to_text(getattr(response, "content", response))
        if not text or not text.strip():
            logger.warning("Model %s returned empty content", self.model_name)
            return None
        return text
