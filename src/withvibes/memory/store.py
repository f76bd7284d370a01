"""Memory store client for Zep Cloud."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from withvibes.exceptions import StoreError
from withvibes.memory.models import FactRecord, MessageUnit, Role

logger = logging.getLogger(__name__)

_ZEP_ROLES = {Role.SUBJECT: "user", Role.AGENT: "assistant"}


class StoreClient(Protocol):
    """Minimal contract the write pipeline and tools rely on."""

    async def ensure_subject(self, subject_id: str) -> bool:
        """Create the subject. Returns False if it already existed."""
        ...

    async def ensure_conversation(self, conversation_id: str, subject_id: str) -> bool:
        """Create the conversation. Returns False if it already existed."""
        ...

    async def append_messages(self, conversation_id: str, units: Sequence[MessageUnit]) -> None:
        """Append messages to a conversation."""
        ...

    async def append_fact(self, subject_id: str, text: str) -> None:
        """Ingest raw text into the subject's graph."""
        ...

    async def search_facts(self, subject_id: str, query: str, limit: int) -> list[FactRecord]:
        """Search the subject's graph for facts."""
        ...


class ZepStoreClient:
    """Thin async client over the Zep Cloud v3 REST API.

    Performs no retries and no batching. The two ``ensure_*`` calls are
    idempotent: a conflict ("already exists") response counts as success.
    Timeouts come from the underlying httpx transport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.getzep.com/api/v2",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Zep project API key
            base_url: API base URL
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (tests, shared pools)
        """
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Api-Key {api_key}"}

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self._client.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=self._headers,
            )
        except httpx.TimeoutException as e:
            raise StoreError(f"Request to {path} timed out", network=True) from e
        except httpx.TransportError as e:
            raise StoreError(f"Request to {path} failed: {e}", network=True) from e

        if response.is_error:
            raise StoreError(_error_message(response), status=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def _ensure(self, path: str, payload: dict[str, Any], what: str) -> bool:
        try:
            await self._post(path, payload)
        except StoreError as e:
            if e.is_conflict:
                logger.debug("%s already exists", what)
                return False
            raise
        logger.debug("%s created", what)
        return True

    async def ensure_subject(self, subject_id: str) -> bool:
        return await self._ensure(
            "/users",
            {"user_id": subject_id, "first_name": subject_id},
            f"User {subject_id}",
        )

    async def ensure_conversation(self, conversation_id: str, subject_id: str) -> bool:
        return await self._ensure(
            "/threads",
            {"thread_id": conversation_id, "user_id": subject_id},
            f"Thread {conversation_id}",
        )

    async def append_messages(self, conversation_id: str, units: Sequence[MessageUnit]) -> None:
        messages = [{"role": _ZEP_ROLES[unit.role], "content": unit.text} for unit in units]
        await self._post(f"/threads/{conversation_id}/messages", {"messages": messages})

    async def append_fact(self, subject_id: str, text: str) -> None:
        await self._post("/graph", {"user_id": subject_id, "type": "text", "data": text})

    async def search_facts(self, subject_id: str, query: str, limit: int) -> list[FactRecord]:
        data = await self._post(
            "/graph/search",
            {"user_id": subject_id, "query": query, "limit": limit, "scope": "edges"},
        )
        edges = (data or {}).get("edges") or []
        return [
            FactRecord(
                fact=edge.get("fact") or "Unknown",
                valid_from=edge.get("valid_at"),
                valid_to=edge.get("invalid_at"),
            )
            for edge in edges
            if isinstance(edge, dict)
        ]

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return response.text or response.reason_phrase
