"""Data stores backing the side-effecting tools."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any

import httpx

from avatar_assistant.errors import CollaboratorUnavailable

logger = logging.getLogger(__name__)

DAILY_CHALLENGES: tuple[str, ...] = (
    "Drink a glass of water before every meal today.",
    "Add one extra serving of vegetables to lunch or dinner.",
    "Take a 10-minute walk after your largest meal.",
    "Hit at least 25g of protein at breakfast.",
    "Prep tomorrow's lunch tonight.",
    "Put your phone away for the first 10 minutes after waking up.",
    "Write down one win from today before bed.",
)


class ShoppingListStore(ABC):
    """Append-only access to a user's shopping list."""

    @abstractmethod
    async def add_item(
        self,
        user_id: str,
        item: str,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> dict[str, Any]:
        """Persist a new list entry and return it."""


class InMemoryShoppingListStore(ShoppingListStore):
    def __init__(self) -> None:
        self._items: dict[str, list[dict[str, Any]]] = {}

    async def add_item(
        self,
        user_id: str,
        item: str,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> dict[str, Any]:
        entry = {"item": item, "quantity": quantity, "unit": unit}
        self._items.setdefault(user_id, []).append(entry)
        return dict(entry)

    def items(self, user_id: str) -> list[dict[str, Any]]:
        return [dict(entry) for entry in self._items.get(user_id, [])]


class HttpShoppingListStore(ShoppingListStore):
    """Shopping list service reached over HTTP."""

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

    async def add_item(
        self,
        user_id: str,
        item: str,
        quantity: float | None = None,
        unit: str | None = None,
    ) -> dict[str, Any]:
        payload = {"item": item, "quantity": quantity, "unit": unit}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload, headers={"x-user-id": user_id})
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollaboratorUnavailable(f"shopping list service: {exc}") from exc
        try:
            body = resp.json()
        except ValueError:
            body = None
        return body if isinstance(body, dict) else payload


class DailyChallengeStore(ABC):
    """Daily challenge lookup keyed by user and ISO date."""

    @abstractmethod
    async def get(self, user_id: str, date_key: str) -> dict[str, Any]:
        """Return `{date, challenge, completed}` for the given day."""

    @abstractmethod
    async def mark_complete(self, user_id: str, date_key: str) -> dict[str, Any]:
        """Mark the day's challenge complete and return the updated record."""


class InMemoryDailyChallengeStore(DailyChallengeStore):
    """Rotates through `DAILY_CHALLENGES` by calendar day."""

    def __init__(self, challenges: tuple[str, ...] = DAILY_CHALLENGES) -> None:
        if not challenges:
            raise ValueError("At least one challenge is required.")
        self._challenges = challenges
        self._completed: set[tuple[str, str]] = set()

    async def get(self, user_id: str, date_key: str) -> dict[str, Any]:
        return {
            "date": date_key,
            "challenge": self._challenge_for(date_key),
            "completed": (user_id, date_key) in self._completed,
        }

    async def mark_complete(self, user_id: str, date_key: str) -> dict[str, Any]:
        self._completed.add((user_id, date_key))
        logger.debug("Challenge %s completed by %s", date_key, user_id)
        return await self.get(user_id, date_key)

    def _challenge_for(self, date_key: str) -> str:
        ordinal = date.fromisoformat(date_key).toordinal()
        return self._challenges[ordinal % len(self._challenges)]
