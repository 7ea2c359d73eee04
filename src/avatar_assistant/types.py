"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


class Intent(str, Enum):
    """Classified purpose of a user utterance."""

    NAVIGATE = "NAVIGATE"
    DO = "DO"
    QNA_HEALTH = "QNA_HEALTH"
    SMALLTALK = "SMALLTALK"
    BLOCKED = "BLOCKED"


class ToolName(str, Enum):
    """Closed set of tools the registry can dispatch to."""

    NAVIGATE = "navigate"
    OPEN_FITBRAIN_RUSH = "openFitBrainRush"
    SHOW_ANTI_INFLAMMATORY_HELP = "showAntiInflammatoryHelp"
    ADD_TO_SHOPPING_LIST = "addToShoppingList"
    ESTIMATE_PROTEIN_TARGET = "estimateProteinTarget"
    GET_DAILY_CHALLENGE = "getDailyChallenge"
    COMPLETE_DAILY_CHALLENGE = "completeDailyChallenge"


DocumentDomain = Literal["app", "nutrition", "mindset"]


@dataclass(frozen=True, slots=True)
class Document:
    """A knowledge snippet from the fixed retrieval corpus."""

    doc_id: str
    domain: DocumentDomain
    title: str
    text: str
    route: str | None = None


@dataclass(slots=True)
class ScoredDocument:
    """A retrieval result with its keyword score."""

    document: Document
    score: int
    rank: int = 0


@dataclass(slots=True)
class ShoppingListItem:
    """Arguments extracted from an add-to-list utterance."""

    item: str
    quantity: float | None = None
    unit: str | None = None


@dataclass(slots=True)
class ToolCall:
    """A tool invocation request prior to validation."""

    name: ToolName
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float


@dataclass(slots=True)
class TelemetryLogEntry:
    """One diagnostics record kept in the in-memory ring buffer."""

    timestamp_utc: str
    user_id: str
    intent: str | None
    tools_used: list[str]
    has_navigate_to: bool
    error: str | None = None
    path: str | None = None
    latency_ms: float | None = None
