"""Async client for the conversation data microservice."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from roadtrip_advisor.core.config import ApiSettings
from roadtrip_advisor.core.errors import PersistenceError
from roadtrip_advisor.services.data_service.schemas import MessageCreate

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Escape an id for use as a single URL path segment."""

    return quote(str(value), safe="")


class DataServiceClient:
    """Pass-through wrapper around the ``/api/messages`` REST contract.

    Message bodies are treated as opaque JSON; only the required fields of a
    new message are validated before forwarding.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api",
            headers={"accept": "application/json"},
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTPX client."""

        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Data service %s %s returned %s", method, path, exc.response.status_code)
            raise PersistenceError(
                f"Data service error on {method} {path}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Data service %s %s unreachable: %s", method, path, exc)
            raise PersistenceError(f"Data service unreachable on {method} {path}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise PersistenceError(f"Data service returned invalid JSON on {method} {path}") from exc

    async def create_message(self, message: MessageCreate) -> Dict[str, Any]:
        payload = message.model_dump(by_alias=True)
        return await self._request("POST", "/messages", json=payload)

    async def get_messages_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/messages/user/{_segment(user_id)}")
        return list(data or [])

    async def get_messages_by_conversation(
        self, user_id: Optional[str], conversation_id: str
    ) -> List[Dict[str, Any]]:
        data = await self._request(
            "GET",
            f"/messages/conversation/{_segment(conversation_id)}",
            params={"userId": user_id} if user_id else None,
        )
        return list(data or [])

    async def delete_messages_by_user(self, user_id: str) -> Any:
        return await self._request("DELETE", f"/messages/user/{_segment(user_id)}")

    async def delete_conversation(self, user_id: Optional[str], conversation_id: str) -> Any:
        return await self._request(
            "DELETE",
            f"/messages/conversation/{_segment(conversation_id)}",
            params={"userId": user_id} if user_id else None,
        )


def group_by_conversation(messages: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Bucket messages by ``conversationId``; messages without one land in ``"default"``."""

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for message in messages:
        conversation_id = message.get("conversationId") or "default"
        grouped.setdefault(str(conversation_id), []).append(message)
    return grouped


def create_data_service_client(settings: ApiSettings, **kwargs: Any) -> DataServiceClient:
    return DataServiceClient(
        settings.data_service_url,
        timeout_s=settings.data_service_timeout_s,
        **kwargs,
    )
