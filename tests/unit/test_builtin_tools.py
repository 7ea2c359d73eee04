import asyncio
from typing import Any

import httpx
import pytest

from avatar_assistant.agent.registry import ToolRegistry
from avatar_assistant.agent.tools import DEFAULT_PROTEIN_RANGE, register_builtin_tools
from avatar_assistant.errors import ToolValidationError
from avatar_assistant.integrations.stores import (
    HttpShoppingListStore,
    InMemoryDailyChallengeStore,
    InMemoryShoppingListStore,
    ShoppingListStore,
)
from avatar_assistant.integrations.user_context import StaticUserContext, UserContextClient
from avatar_assistant.types import ToolName


class _BrokenListStore(ShoppingListStore):
    async def add_item(self, user_id: str, item: str, quantity=None, unit=None) -> dict[str, Any]:
        raise ConnectionError("list service down")


class _BrokenContext:
    async def fetch(self, user_id: str) -> dict[str, Any]:
        raise TimeoutError("context service down")


def _registry(
    *,
    shopping_list: ShoppingListStore | None = None,
    user_context: Any = None,
) -> tuple[ToolRegistry, InMemoryShoppingListStore | ShoppingListStore]:
    store = shopping_list or InMemoryShoppingListStore()
    registry = ToolRegistry()
    register_builtin_tools(
        registry,
        shopping_list=store,
        challenges=InMemoryDailyChallengeStore(),
        user_context=user_context or StaticUserContext({"u1": {"weightLbs": 180}}),
    )
    return registry, store


def test_every_tool_name_is_registered() -> None:
    registry, _ = _registry()
    assert registry.missing_tools() == []


def test_add_to_shopping_list_persists_item() -> None:
    registry, store = _registry()
    result = asyncio.run(
        registry.execute(
            ToolName.ADD_TO_SHOPPING_LIST,
            {"user_id": "u1", "item": "chicken", "quantity": 2, "unit": "lbs"},
        )
    )
    assert result.ok
    assert result.message == "Added 2 lbs chicken to your shopping list."
    assert store.items("u1") == [{"item": "chicken", "quantity": 2.0, "unit": "lbs"}]


def test_add_to_shopping_list_requires_item() -> None:
    registry, store = _registry()
    with pytest.raises(ToolValidationError):
        asyncio.run(registry.execute(ToolName.ADD_TO_SHOPPING_LIST, {"user_id": "u1", "item": "  "}))
    assert store.items("u1") == []


def test_list_store_failure_degrades() -> None:
    registry, _ = _registry(shopping_list=_BrokenListStore())
    result = asyncio.run(
        registry.execute(ToolName.ADD_TO_SHOPPING_LIST, {"user_id": "u1", "item": "milk"})
    )
    assert not result.ok
    assert result.message
    assert result.navigate_to is None


def test_navigation_tools_only_signal() -> None:
    registry, store = _registry()
    nav = asyncio.run(registry.execute(ToolName.NAVIGATE, {"user_id": "u1", "route": "/log-water"}))
    assert nav.navigate_to == "/log-water"

    rush = asyncio.run(registry.execute(ToolName.OPEN_FITBRAIN_RUSH, {"user_id": "u1"}))
    assert rush.navigate_to == "/fitbrain-rush"
    assert rush.client_event == "fitbrain:open"

    help_result = asyncio.run(registry.execute(ToolName.SHOW_ANTI_INFLAMMATORY_HELP, {"user_id": "u1"}))
    assert help_result.navigate_to is None
    assert help_result.page == "anti-inflammatory"
    assert store.items("u1") == []


def test_navigate_requires_destination() -> None:
    registry, _ = _registry()
    with pytest.raises(ToolValidationError):
        registry.validate(ToolName.NAVIGATE, {"user_id": "u1"})


def test_protein_target_from_bodyweight() -> None:
    registry, _ = _registry()
    result = asyncio.run(registry.execute(ToolName.ESTIMATE_PROTEIN_TARGET, {"user_id": "u1"}))
    assert result.data == {"min_grams": 126, "max_grams": 180, "basis": "bodyweight"}


def test_protein_target_defaults_when_context_fails() -> None:
    registry, _ = _registry(user_context=_BrokenContext())
    result = asyncio.run(registry.execute(ToolName.ESTIMATE_PROTEIN_TARGET, {"user_id": "u1"}))
    assert result.ok
    low, high = DEFAULT_PROTEIN_RANGE
    assert result.data == {"min_grams": low, "max_grams": high, "basis": "default"}


def test_daily_challenge_read_and_complete() -> None:
    registry, _ = _registry()
    args = {"user_id": "u1", "date_key": "2026-10-19"}

    before = asyncio.run(registry.execute(ToolName.GET_DAILY_CHALLENGE, args))
    assert before.data["completed"] is False

    done = asyncio.run(registry.execute(ToolName.COMPLETE_DAILY_CHALLENGE, args))
    assert done.ok
    assert done.data["completed"] is True
    assert done.data["challenge"] == before.data["challenge"]

    other_user = asyncio.run(
        registry.execute(ToolName.GET_DAILY_CHALLENGE, {"user_id": "u2", "date_key": "2026-10-19"})
    )
    assert other_user.data["completed"] is False


def test_daily_challenge_rejects_malformed_date() -> None:
    registry, _ = _registry()
    with pytest.raises(ToolValidationError):
        registry.validate(ToolName.GET_DAILY_CHALLENGE, {"user_id": "u1", "date_key": "yesterday"})


def test_user_context_client_returns_empty_on_failure() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["x-user-id"] == "u1"
        return httpx.Response(503)

    client = UserContextClient("http://context.local/ctx", transport=httpx.MockTransport(_handler))
    assert asyncio.run(client.fetch("u1")) == {}


def test_user_context_client_returns_json_object() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"today": {"planName": "Lean"}}))
    client = UserContextClient("http://context.local/ctx", transport=transport)
    assert asyncio.run(client.fetch("u1")) == {"today": {"planName": "Lean"}}


def test_http_list_store_failure_degrades_through_tool() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    registry, _ = _registry(
        shopping_list=HttpShoppingListStore("http://lists.local/items", transport=transport)
    )
    result = asyncio.run(
        registry.execute(ToolName.ADD_TO_SHOPPING_LIST, {"user_id": "u1", "item": "oats"})
    )
    assert not result.ok
    assert "shopping list" in result.message
