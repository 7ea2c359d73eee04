"""Exception taxonomy for the assistant core.

None of these cross the `/api/avatar/assistant` boundary: tools turn
validation and collaborator failures into degraded results, the generation
invoker turns service failures into a retry message, and the rollout router
turns contract violations into a legacy fallback.
"""

from __future__ import annotations

from typing import Any


class AssistantError(Exception):
    """Base class for assistant core failures."""


class ToolValidationError(AssistantError):
    """Tool arguments were missing or malformed; the tool did not run."""

    def __init__(self, tool: str, errors: list[dict[str, Any]] | None = None) -> None:
        self.tool = tool
        self.errors = errors or []
        fields = ", ".join(
            ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            for err in self.errors
        )
        super().__init__(f"Invalid arguments for tool {tool}: {fields or 'unknown'}")


class UnknownToolError(AssistantError, KeyError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")

    def __str__(self) -> str:
        return str(self.args[0])


class CollaboratorUnavailable(AssistantError):
    """An external collaborator (HTTP service or store) could not be reached."""


class GenerationServiceError(AssistantError):
    """The chat model call failed, timed out, or returned a non-success status."""


class ContractViolation(AssistantError):
    """A pipeline result does not satisfy the assistant response contract."""
