"""Chat model invocation with a non-raising boundary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from avatar_assistant.agent.composer import ComposedContext
from avatar_assistant.config import GenerationConfig
from avatar_assistant.errors import GenerationServiceError

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "I'm having trouble connecting right now. Please try again in a moment."
EMPTY_COMPLETION_TEXT = "Done."

ChatModelFactory = Callable[[float], Any]


class GenerationInvoker:
    """Runs one chat completion per request.

    `model_factory` receives the temperature chosen by the composer and must
    return an object with an async `ainvoke(messages)` (a langchain chat
    model). Without a factory no network call is made and the answer is
    rendered from the composed knowledge and tool blocks instead.
    """

    def __init__(
        self,
        model_factory: ChatModelFactory | None,
        config: GenerationConfig | None = None,
    ) -> None:
        self.model_factory = model_factory
        self.config = config or GenerationConfig()

    @property
    def configured(self) -> bool:
        return self.model_factory is not None

    async def invoke(self, context: ComposedContext, *, plain_language: bool | None = None) -> str:
        if plain_language is not None and plain_language != context.plain_language:
            context.temperature = (
                self.config.plain_language_temperature if plain_language else self.config.temperature
            )
        if self.model_factory is None:
            return render_offline_answer(context)

        try:
            text = await self._complete(context)
        except Exception as exc:
            logger.error("Generation failed: %s", exc)
            return RETRY_MESSAGE
        return text or EMPTY_COMPLETION_TEXT

    async def _complete(self, context: ComposedContext) -> str:
        model = self.model_factory(context.temperature)
        try:
            result = await asyncio.wait_for(
                model.ainvoke(context.to_messages()),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationServiceError(
                f"chat model timed out after {self.config.timeout_seconds}s"
            ) from exc
        return extract_text(result).strip()


def extract_text(result: Any) -> str:
    content = getattr(result, "content", result)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    if content is None:
        return ""
    return str(content)


def render_offline_answer(context: ComposedContext) -> str:
    """Answer from the composed context alone when no chat model is configured."""

    lines: list[str] = []
    tools = context.block("tools").content
    if tools.startswith("Tool results:"):
        lines.append("Done! I've taken care of that for you.")

    knowledge = context.block("knowledge").content
    sections = [part for part in knowledge.split("\n\n") if part.strip()]
    if sections and knowledge.startswith("Relevant information:\n"):
        first = sections[0].removeprefix("Relevant information:\n")
        _, _, body = first.partition("\n")
        if body:
            lines.append(body if not context.plain_language else body.split(". ")[0].rstrip(".") + ".")
    lines.append("Educational, not medical advice.")
    return " ".join(lines)
