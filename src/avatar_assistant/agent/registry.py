"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from avatar_assistant.contracts import ToolResult
from avatar_assistant.errors import ToolValidationError, UnknownToolError
from avatar_assistant.types import ToolName, ToolTrace


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: ToolName
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[Any], Awaitable[ToolResult]]
    tags: list[str] = Field(default_factory=list)

    def validate_args(self, payload: dict[str, Any]) -> BaseModel:
        try:
            return self.args_schema.model_validate(payload)
        except ValidationError as exc:
            raise ToolValidationError(
                self.name.value, exc.errors(include_url=False, include_context=False)
            ) from exc

    async def invoke(self, payload: dict[str, Any]) -> ToolResult:
        return await self.handler(self.validate_args(payload))


class ToolRegistry:
    """Stores tool specs keyed by `ToolName` and runs them validate-then-execute."""

    def __init__(self) -> None:
        self._tools: dict[ToolName, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name.value}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def missing_tools(self) -> list[ToolName]:
        return [name for name in ToolName if name not in self._tools]

    def validate(self, name: ToolName | str, payload: dict[str, Any]) -> BaseModel:
        return self._spec(name).validate_args(payload)

    async def execute(self, name: ToolName | str, payload: dict[str, Any]) -> ToolResult:
        spec = self._spec(name)
        start = perf_counter()
        output = await spec.invoke(payload)
        latency_ms = (perf_counter() - start) * 1000.0

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name.value,
                    input_payload=payload,
                    output_preview=output.model_dump_json(by_alias=True, exclude_none=True)[:320],
                    latency_ms=latency_ms,
                )
            )
        return output

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def _spec(self, name: ToolName | str) -> ToolSpec:
        try:
            key = ToolName(name)
        except ValueError:
            raise UnknownToolError(str(name)) from None
        spec = self._tools.get(key)
        if spec is None:
            raise UnknownToolError(key.value)
        return spec
