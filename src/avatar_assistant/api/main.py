"""FastAPI entrypoint for assistant, knowledge and telemetry endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI
from pydantic import BaseModel, Field

from avatar_assistant.agent.composer import ContextComposer
from avatar_assistant.agent.generation import ChatModelFactory, GenerationInvoker
from avatar_assistant.agent.legacy import LegacyAssistant
from avatar_assistant.agent.pipeline import ModernPipeline
from avatar_assistant.agent.registry import ToolRegistry
from avatar_assistant.agent.rollout import RolloutRouter
from avatar_assistant.agent.tools import register_builtin_tools
from avatar_assistant.config import (
    AssistantSettings,
    GenerationConfig,
    LegacyConfig,
    RetrievalConfig,
    TelemetryConfig,
)
from avatar_assistant.contracts import AssistantRequest
from avatar_assistant.integrations.stores import (
    HttpShoppingListStore,
    InMemoryDailyChallengeStore,
    InMemoryShoppingListStore,
    ShoppingListStore,
)
from avatar_assistant.integrations.user_context import UserContextClient
from avatar_assistant.obs.telemetry import TelemetryBuffer, make_entry
from avatar_assistant.retrieval.retriever import KeywordRetriever

logger = logging.getLogger(__name__)


def _create_model_factory(
    settings: AssistantSettings, config: GenerationConfig
) -> ChatModelFactory | None:
    if not settings.openai_api_key:
        return None

    from langchain_openai import ChatOpenAI

    def _factory(temperature: float) -> Any:
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
            max_retries=0,
        )

    return _factory


def _create_legacy_llm(settings: AssistantSettings, config: LegacyConfig) -> Any:
    if not settings.openai_api_key:
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=config.model,
        api_key=settings.openai_api_key,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout_seconds,
        max_retries=0,
    )


def _create_shopping_list(settings: AssistantSettings) -> ShoppingListStore:
    if settings.shopping_list_url:
        return HttpShoppingListStore(
            settings.shopping_list_url, timeout_secs=settings.http_timeout_seconds
        )
    return InMemoryShoppingListStore()


class KnowledgeSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    top_k: int = Field(default=3, ge=1, le=20)


class TelemetryEntryRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    intent: str | None = None
    tools_used: list[str] = Field(default_factory=list, alias="toolsUsed")
    has_navigate_to: bool = Field(default=False, alias="hasNavigateTo")
    error: str | None = None


_settings = AssistantSettings()
logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Avatar Assistant", version="0.1.0")

_generation_config = GenerationConfig(model=_settings.openai_model)
_telemetry = TelemetryBuffer(TelemetryConfig().capacity)
_user_context = UserContextClient(
    _settings.user_context_url, timeout_secs=_settings.http_timeout_seconds
)
_retriever = KeywordRetriever(config=RetrievalConfig())
_registry = ToolRegistry()
register_builtin_tools(
    _registry,
    shopping_list=_create_shopping_list(_settings),
    challenges=InMemoryDailyChallengeStore(),
    user_context=_user_context,
)
if _registry.missing_tools():
    raise RuntimeError(f"Tools not registered: {[t.value for t in _registry.missing_tools()]}")

_model_factory = _create_model_factory(_settings, _generation_config)
_pipeline = ModernPipeline(
    registry=_registry,
    retriever=_retriever,
    composer=ContextComposer(_generation_config),
    generator=GenerationInvoker(_model_factory, _generation_config),
    user_context=_user_context,
    top_k=RetrievalConfig().default_k,
)
_legacy = LegacyAssistant(_create_legacy_llm(_settings, LegacyConfig()))
_router = RolloutRouter(modern=_pipeline, legacy=_legacy, telemetry=_telemetry)


@app.get("/health")
def health() -> dict[str, Any]:
    settings = AssistantSettings()
    return {
        "status": "ok",
        "llm_configured": _model_factory is not None,
        "modern_enabled": settings.modern_enabled,
        "allowlist_size": len(settings.allowlist),
        "telemetry_count": len(_telemetry),
    }


@app.post("/api/avatar/assistant")
async def assistant(request: AssistantRequest) -> dict[str, Any]:
    outcome = await _router.route(request)
    logger.info("Assistant request for %s served via %s", request.user_id, outcome.state.value)
    return outcome.response.to_payload()


@app.post("/knowledge/search")
def knowledge_search(request: KnowledgeSearchRequest) -> dict[str, Any]:
    hits = _retriever.retrieve_scored(request.query, request.top_k)
    return {
        "items": [
            {
                "id": hit.document.doc_id,
                "domain": hit.document.domain,
                "title": hit.document.title,
                "route": hit.document.route,
                "score": hit.score,
                "rank": hit.rank,
            }
            for hit in hits
        ]
    }


@app.get("/api/avatar/telemetry")
def telemetry(limit: int = 20) -> dict[str, Any]:
    return {"items": [asdict(entry) for entry in _telemetry.list_recent(limit=limit)]}


@app.post("/api/avatar/telemetry")
def record_telemetry(request: TelemetryEntryRequest) -> dict[str, Any]:
    _telemetry.append(
        make_entry(
            user_id=request.user_id,
            intent=request.intent,
            tools_used=request.tools_used,
            has_navigate_to=request.has_navigate_to,
            error=request.error,
            path="client",
        )
    )
    return {"ok": True, "count": len(_telemetry)}
