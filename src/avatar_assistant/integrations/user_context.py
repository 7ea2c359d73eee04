"""HTTP lookup of per-user context (today's plan, profile hints)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class UserContextClient:
    """Fetches arbitrary user context keyed by user id.

    The lookup never raises: any network failure, non-2xx status or
    non-object JSON body yields an empty dict.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_secs: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout_secs
        self._transport = transport

    async def fetch(self, user_id: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.url, headers={"x-user-id": user_id})
            if not resp.is_success:
                logger.warning("User context lookup returned %s for %s", resp.status_code, user_id)
                return {}
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("User context lookup failed for %s: %s", user_id, exc)
            return {}
        return data if isinstance(data, dict) else {}


class StaticUserContext:
    """In-process context source used for offline runs and tests."""

    def __init__(self, contexts: dict[str, dict[str, Any]] | None = None) -> None:
        self._contexts = contexts or {}

    async def fetch(self, user_id: str) -> dict[str, Any]:
        return dict(self._contexts.get(user_id, {}))
