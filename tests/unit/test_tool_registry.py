import asyncio

import pytest
from pydantic import BaseModel, Field

from avatar_assistant.agent.registry import ToolRegistry, ToolSpec
from avatar_assistant.contracts import ToolResult
from avatar_assistant.errors import ToolValidationError, UnknownToolError
from avatar_assistant.types import ToolName


class RouteInput(BaseModel):
    route: str = Field(min_length=1)


def _spec(calls: list[str]) -> ToolSpec:
    async def _handler(data: RouteInput) -> ToolResult:
        calls.append(data.route)
        return ToolResult(ok=True, navigate_to=data.route)

    return ToolSpec(
        name=ToolName.NAVIGATE,
        description="navigate",
        args_schema=RouteInput,
        handler=_handler,
    )


def test_tool_registry_validation_blocks_execution() -> None:
    calls: list[str] = []
    registry = ToolRegistry()
    registry.register(_spec(calls))

    result = asyncio.run(registry.execute(ToolName.NAVIGATE, {"route": "/shopping-list"}))
    assert result.ok
    assert result.navigate_to == "/shopping-list"

    with pytest.raises(ToolValidationError) as excinfo:
        asyncio.run(registry.execute(ToolName.NAVIGATE, {"route": ""}))
    assert excinfo.value.tool == "navigate"
    assert calls == ["/shopping-list"]


def test_validate_reports_missing_arguments() -> None:
    registry = ToolRegistry()
    registry.register(_spec([]))

    with pytest.raises(ToolValidationError) as excinfo:
        registry.validate("navigate", {})
    assert any(err["loc"] == ("route",) for err in excinfo.value.errors)


def test_duplicate_tool_registration_rejected() -> None:
    registry = ToolRegistry()
    spec = _spec([])
    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_unknown_and_unregistered_tools() -> None:
    registry = ToolRegistry()
    registry.register(_spec([]))

    with pytest.raises(UnknownToolError):
        registry.validate("teleport", {})
    with pytest.raises(KeyError):
        asyncio.run(registry.execute(ToolName.ADD_TO_SHOPPING_LIST, {}))


def test_missing_tools_lists_unregistered_names() -> None:
    registry = ToolRegistry()
    registry.register(_spec([]))
    missing = registry.missing_tools()
    assert ToolName.NAVIGATE not in missing
    assert len(missing) == len(ToolName) - 1


def test_failed_tool_result_must_explain_and_not_navigate() -> None:
    with pytest.raises(ValueError):
        ToolResult(ok=False)
    with pytest.raises(ValueError):
        ToolResult(ok=False, message="nope", navigate_to="/x")
    assert ToolResult.failure("Could not add").message == "Could not add"
