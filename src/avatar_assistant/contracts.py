"""Request/response contract shared by the legacy and modern assistants."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from avatar_assistant.errors import ContractViolation

EMPTY_PROMPT_TEXT = "Ask me anything about nutrition, fitness, mindset, or navigating the app!"


class RequestContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_name: str | None = Field(default=None, alias="userName")
    current_page: str | None = Field(default=None, alias="currentPage")
    streak: int | None = None
    badges: int | None = None


class A11yOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plain_language: bool = Field(default=False, alias="plainLanguage")
    tts_rate: float | None = Field(default=None, alias="ttsRate", gt=0.0)


class AssistantRequest(BaseModel):
    """Inbound request from the UI layer."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    message: str = ""
    context: RequestContext = Field(default_factory=RequestContext)
    a11y: A11yOptions = Field(default_factory=A11yOptions)


class AssistantResponse(BaseModel):
    """Caller-visible output. Identical shape for legacy and modern paths."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(min_length=1)
    captions: str = Field(min_length=1)
    navigate_to: str | None = Field(default=None, alias="navigateTo", min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _default_captions(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("captions"):
            data = {**data, "captions": data.get("text")}
        return data

    @classmethod
    def of(cls, text: str, navigate_to: str | None = None) -> "AssistantResponse":
        return cls(text=text, captions=text, navigate_to=navigate_to)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolResult(BaseModel):
    """Outcome of a single tool execution."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    data: Any = None
    message: str | None = None
    navigate_to: str | None = Field(default=None, alias="navigateTo")
    action: str | None = None
    page: str | None = None
    client_event: str | None = Field(default=None, alias="clientEvent")

    @model_validator(mode="after")
    def _failed_results_explain_themselves(self) -> "ToolResult":
        if not self.ok:
            if not (self.message and self.message.strip()):
                raise ValueError("failed tool results must carry a message")
            if self.navigate_to is not None:
                raise ValueError("failed tool results must not navigate")
        return self

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(ok=False, message=message)

    def summary_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def check_response_shape(value: Any) -> AssistantResponse:
    """Validate a pipeline result against the response contract.

    Accepts an `AssistantResponse` or a mapping with `text`, optional
    `captions` and optional `navigateTo`. An empty `navigateTo` is treated as
    absent and empty `captions` default to `text`; anything else that does not
    fit the contract raises `ContractViolation`.
    """

    if isinstance(value, AssistantResponse):
        return value
    if not isinstance(value, Mapping):
        raise ContractViolation(f"expected a mapping, got {type(value).__name__}")

    text = value.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ContractViolation("text must be a non-empty string")

    captions = value.get("captions")
    if captions is not None and not isinstance(captions, str):
        raise ContractViolation("captions must be a string when present")

    navigate_to = value.get("navigateTo")
    if navigate_to is not None and not isinstance(navigate_to, str):
        raise ContractViolation("navigateTo must be a string when present")

    try:
        return AssistantResponse(
            text=text,
            captions=captions if captions and captions.strip() else text,
            navigate_to=navigate_to if navigate_to and navigate_to.strip() else None,
        )
    except ValidationError as exc:
        raise ContractViolation(str(exc)) from exc
