"""Modern assistant pipeline: classify, act, retrieve, compose, generate."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

from avatar_assistant.agent.composer import ContextComposer
from avatar_assistant.agent.generation import GenerationInvoker
from avatar_assistant.agent.intent import classify, normalize, parse_action, parse_navigation
from avatar_assistant.agent.registry import ToolRegistry
from avatar_assistant.agent.tools import ANTI_INFLAMMATORY_HELP, FITBRAIN_ROUTE, UserContextSource
from avatar_assistant.contracts import EMPTY_PROMPT_TEXT, AssistantRequest, ToolResult
from avatar_assistant.errors import ToolValidationError
from avatar_assistant.obs.telemetry import NullTelemetrySink, TelemetrySink, Timer, make_entry
from avatar_assistant.retrieval.retriever import KeywordRetriever
from avatar_assistant.types import Document, Intent, TelemetryLogEntry, ToolCall, ToolName

logger = logging.getLogger(__name__)

SAFETY_MESSAGE = (
    "This sounds potentially urgent. I can't help with medical issues - please seek "
    "professional care or call emergency services if you're in danger."
)

_TODAYS_PLAN = re.compile(r"\bdinner\b|\bwhat'?s\s+for\b", flags=re.IGNORECASE)
_PROTEIN = re.compile(r"protein|grams", flags=re.IGNORECASE)
_CHALLENGE = re.compile(r"challenge", flags=re.IGNORECASE)

_DEGRADED_MESSAGES = {
    ToolName.ADD_TO_SHOPPING_LIST: "Could not add to shopping list",
    ToolName.COMPLETE_DAILY_CHALLENGE: "Could not complete the challenge",
}

OnInvalid = Literal["degrade", "skip"]


class ModernPipeline:
    """One request in, one raw response mapping out.

    Steps before generation never abort the request: tool and retrieval
    failures are logged and degraded here. The returned mapping is checked
    against the response contract by the rollout router, not by this class.
    """

    def __init__(
        self,
        *,
        registry: ToolRegistry,
        retriever: KeywordRetriever,
        composer: ContextComposer,
        generator: GenerationInvoker,
        user_context: UserContextSource,
        telemetry: TelemetrySink | None = None,
        top_k: int = 3,
    ) -> None:
        self.registry = registry
        self.retriever = retriever
        self.composer = composer
        self.generator = generator
        self.user_context = user_context
        self.telemetry = telemetry if telemetry is not None else NullTelemetrySink()
        self.top_k = top_k

    async def run(self, request: AssistantRequest) -> dict[str, Any]:
        response, entry = await self.run_with_entry(request)
        if entry is not None:
            self.telemetry.append(entry)
        return response

    async def run_with_entry(
        self, request: AssistantRequest
    ) -> tuple[dict[str, Any], TelemetryLogEntry | None]:
        """Run the pipeline and hand back the telemetry entry instead of recording it.

        The rollout router uses this so a response it rejects is not logged
        as a modern success.
        """

        prompt = normalize(request.message)
        user_id = request.user_id
        if not prompt:
            return {"text": EMPTY_PROMPT_TEXT, "captions": EMPTY_PROMPT_TEXT}, None

        intent = classify(prompt)
        if intent is Intent.BLOCKED:
            logger.info("Safety override for user %s", user_id)
            return (
                {"text": SAFETY_MESSAGE, "captions": SAFETY_MESSAGE},
                _entry(user_id, intent, [], None),
            )

        with Timer() as timer:
            context = await self._fetch_context(user_id)
            if intent not in (Intent.NAVIGATE, Intent.DO) and _TODAYS_PLAN.search(prompt):
                text = f"Today's plan: {_describe_today(context)}. Would you like me to suggest something?"
                return {"text": text, "captions": text}, _entry(user_id, intent, [], None)

            tool_results = await self._run_tools(intent, prompt, user_id)
            navigate_to = next(
                (result.navigate_to for _, result in tool_results if result.ok and result.navigate_to),
                None,
            )
            documents = self._retrieve(prompt)
            composed = self.composer.compose(
                prompt,
                documents,
                tool_results,
                plain_language=request.a11y.plain_language,
                user_context=request.context,
            )
            text = await self.generator.invoke(
                composed, plain_language=request.a11y.plain_language
            )

        entry = _entry(
            user_id,
            intent,
            [name for name, _ in tool_results],
            navigate_to,
            latency_ms=timer.elapsed_ms,
        )
        response: dict[str, Any] = {"text": text, "captions": text}
        if navigate_to:
            response["navigateTo"] = navigate_to
        return response, entry

    async def _fetch_context(self, user_id: str) -> dict[str, Any]:
        try:
            return await self.user_context.fetch(user_id)
        except Exception as exc:
            logger.warning("User context unavailable for %s: %s", user_id, exc)
            return {}

    def _retrieve(self, prompt: str) -> list[Document]:
        try:
            return self.retriever.retrieve(prompt, self.top_k)
        except Exception:
            logger.exception("Knowledge retrieval failed; continuing without excerpts")
            return []

    async def _run_tools(
        self, intent: Intent, prompt: str, user_id: str
    ) -> list[tuple[str, ToolResult]]:
        planned: list[tuple[ToolCall, OnInvalid]] = []

        if intent is Intent.NAVIGATE:
            route = parse_navigation(prompt)
            if route == FITBRAIN_ROUTE:
                planned.append((ToolCall(ToolName.OPEN_FITBRAIN_RUSH, {"user_id": user_id}), "skip"))
            elif route == ANTI_INFLAMMATORY_HELP:
                planned.append(
                    (ToolCall(ToolName.SHOW_ANTI_INFLAMMATORY_HELP, {"user_id": user_id}), "skip")
                )
            elif route:
                planned.append(
                    (ToolCall(ToolName.NAVIGATE, {"user_id": user_id, "route": route}), "skip")
                )
        elif intent is Intent.DO:
            call = parse_action(prompt, user_id)
            if call is not None:
                planned.append((call, "degrade"))
        elif intent is Intent.QNA_HEALTH:
            if _PROTEIN.search(prompt):
                planned.append((ToolCall(ToolName.ESTIMATE_PROTEIN_TARGET, {"user_id": user_id}), "skip"))
            if _CHALLENGE.search(prompt):
                planned.append((ToolCall(ToolName.GET_DAILY_CHALLENGE, {"user_id": user_id}), "skip"))

        results: list[tuple[str, ToolResult]] = []
        for call, on_invalid in planned:
            result = await self._invoke_tool(call, on_invalid)
            if result is not None:
                results.append((call.name.value, result))
        return results

    async def _invoke_tool(self, call: ToolCall, on_invalid: OnInvalid) -> ToolResult | None:
        try:
            return await self.registry.execute(call.name, call.args)
        except ToolValidationError as exc:
            logger.info("Rejected %s call: %s", call.name.value, exc)
            if on_invalid == "skip":
                return None
        except Exception:
            logger.exception("Tool %s failed", call.name.value)
        return ToolResult.failure(
            _DEGRADED_MESSAGES.get(call.name, "That action could not be completed.")
        )


def _entry(
    user_id: str,
    intent: Intent,
    tools_used: list[str],
    navigate_to: str | None,
    *,
    latency_ms: float | None = None,
) -> TelemetryLogEntry:
    return make_entry(
        user_id=user_id,
        intent=intent.value,
        tools_used=tools_used,
        has_navigate_to=bool(navigate_to),
        path="modern",
        latency_ms=latency_ms,
    )


def _describe_today(context: dict[str, Any]) -> str:
    today = context.get("today") if isinstance(context.get("today"), dict) else {}
    instances = today.get("instances")
    if isinstance(instances, list) and instances:
        names = [
            str(item.get("name") or item.get("title"))
            for item in instances
            if isinstance(item, dict) and (item.get("name") or item.get("title"))
        ]
        if names:
            return ", ".join(names)
        return json.dumps(instances, default=str)
    plan_name = today.get("planName")
    if plan_name:
        return str(plan_name)
    return "No meals planned"
