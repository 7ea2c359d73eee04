"""Builds the ordered instruction/context payload for the chat model."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from avatar_assistant.config import GenerationConfig
from avatar_assistant.contracts import RequestContext, ToolResult
from avatar_assistant.types import Document

BlockKind = Literal["persona", "utterance", "knowledge", "tools"]

NO_TOOLS_MARKER = "No tools were used."

_PERSONA_RULES = (
    "You are the Avatar concierge inside the My Perfect Meals app.",
    "Your role: help users navigate the app, perform actions, and provide practical health guidance.",
    "Style: Be concise, encouraging, and supportive.",
)

_PERSONA_STANDARD = (
    "Use clear, natural language.",
    "For health answers: provide practical advice with brief rationale and one actionable step.",
    "Always include: 'Educational, not medical advice.'",
    "Never diagnose medical conditions. For emergencies or severe symptoms, advise seeking professional care.",
    "If tools were called, acknowledge the action briefly.",
)

_PERSONA_PLAIN = (
    "Use simple language and short sentences.",
    "Give one practical step.",
    "Always include: 'Educational, not medical advice.'",
    "Never diagnose. For emergencies, tell the user to get professional care.",
    "If tools were called, say what was done in one sentence.",
)


@dataclass(slots=True)
class ContextBlock:
    kind: BlockKind
    content: str


@dataclass(slots=True)
class ComposedContext:
    """Request-scoped model input. Block order is persona, utterance, knowledge, tools."""

    blocks: list[ContextBlock]
    temperature: float
    plain_language: bool = False
    document_ids: list[str] = field(default_factory=list)

    def block(self, kind: BlockKind) -> ContextBlock:
        for item in self.blocks:
            if item.kind == kind:
                return item
        raise KeyError(kind)

    def to_messages(self) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        for item in self.blocks:
            if item.kind == "utterance":
                messages.append(HumanMessage(content=item.content))
            else:
                messages.append(SystemMessage(content=item.content))
        return messages


class ContextComposer:
    def __init__(self, config: GenerationConfig | None = None) -> None:
        self.config = config or GenerationConfig()

    def compose(
        self,
        utterance: str,
        documents: Sequence[Document],
        tool_results: Sequence[tuple[str, ToolResult]],
        *,
        plain_language: bool = False,
        user_context: RequestContext | None = None,
    ) -> ComposedContext:
        blocks = [
            ContextBlock("persona", _persona(plain_language, user_context)),
            ContextBlock("utterance", utterance),
            ContextBlock("knowledge", _knowledge(documents)),
            ContextBlock("tools", _tool_summary(tool_results)),
        ]
        temperature = (
            self.config.plain_language_temperature if plain_language else self.config.temperature
        )
        return ComposedContext(
            blocks=blocks,
            temperature=temperature,
            plain_language=plain_language,
            document_ids=[doc.doc_id for doc in documents],
        )


def _persona(plain_language: bool, user_context: RequestContext | None) -> str:
    lines = list(_PERSONA_RULES)
    lines.extend(_PERSONA_PLAIN if plain_language else _PERSONA_STANDARD)
    if user_context is not None:
        profile: list[str] = []
        if user_context.user_name:
            profile.append(f"name {user_context.user_name}")
        if user_context.current_page:
            profile.append(f"currently on {user_context.current_page}")
        if user_context.streak:
            profile.append(f"{user_context.streak}-day streak")
        if profile:
            lines.append("User: " + ", ".join(profile) + ".")
    return " ".join(lines)


def _knowledge(documents: Sequence[Document]) -> str:
    excerpts = "\n\n".join(f"# {doc.title}\n{doc.text}" for doc in documents)
    return f"Relevant information:\n{excerpts}" if excerpts else "Relevant information: none."


def _tool_summary(tool_results: Sequence[tuple[str, ToolResult]]) -> str:
    if not tool_results:
        return NO_TOOLS_MARKER
    lines = [
        f"- {name}: {json.dumps(result.summary_payload(), default=str)}"
        for name, result in tool_results
    ]
    return "Tool results:\n" + "\n".join(lines)
