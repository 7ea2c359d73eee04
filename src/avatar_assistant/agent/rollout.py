"""Per-request routing between the legacy and modern assistants."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from avatar_assistant.config import AssistantSettings
from avatar_assistant.contracts import AssistantRequest, AssistantResponse, check_response_shape
from avatar_assistant.errors import ContractViolation
from avatar_assistant.obs.telemetry import NullTelemetrySink, TelemetrySink, Timer, make_entry
from avatar_assistant.types import TelemetryLogEntry

logger = logging.getLogger(__name__)


class RolloutState(str, Enum):
    LEGACY_ONLY = "LEGACY_ONLY"
    MODERN_ATTEMPT = "MODERN_ATTEMPT"
    MODERN_ACCEPTED = "MODERN_ACCEPTED"
    FALLBACK_TO_LEGACY = "FALLBACK_TO_LEGACY"


@dataclass(frozen=True, slots=True)
class RolloutDecision:
    flag_enabled: bool
    allowlist: frozenset[str]
    user_id: str

    @property
    def use_modern(self) -> bool:
        if not self.flag_enabled:
            return False
        return not self.allowlist or self.user_id in self.allowlist


@dataclass(frozen=True, slots=True)
class RolloutOutcome:
    """Terminal state reached for one request plus the response it produced."""

    state: RolloutState
    response: AssistantResponse
    error: str | None = None


class ModernAssistant(Protocol):
    async def run_with_entry(
        self, request: AssistantRequest
    ) -> tuple[Any, TelemetryLogEntry | None]: ...


class LegacyPath(Protocol):
    async def respond(self, request: AssistantRequest) -> AssistantResponse: ...


def decide_rollout(settings: AssistantSettings, user_id: str) -> RolloutDecision:
    return RolloutDecision(
        flag_enabled=settings.modern_enabled,
        allowlist=settings.allowlist,
        user_id=user_id,
    )


class RolloutRouter:
    """Runs the modern pipeline for enabled users and guarantees a legacy fallback.

    State transitions per request:

    - decision off -> `LEGACY_ONLY` (legacy result returned verbatim)
    - decision on -> `MODERN_ATTEMPT`, then either
      `MODERN_ACCEPTED` (result passed the shape check) or
      `FALLBACK_TO_LEGACY` (exception or contract violation).

    `settings_provider` is called on every request so configuration changes
    apply without a restart. Settings that fail to load count as decision off.
    The modern entry is written to telemetry only once its result is accepted.
    """

    def __init__(
        self,
        *,
        modern: ModernAssistant,
        legacy: LegacyPath,
        settings_provider: Callable[[], AssistantSettings] = AssistantSettings,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        self.modern = modern
        self.legacy = legacy
        self.settings_provider = settings_provider
        self.telemetry = telemetry if telemetry is not None else NullTelemetrySink()

    async def route(self, request: AssistantRequest) -> RolloutOutcome:
        try:
            use_modern = decide_rollout(self.settings_provider(), request.user_id).use_modern
        except Exception:
            logger.exception("Rollout settings unreadable; serving legacy for user %s", request.user_id)
            use_modern = False
        if not use_modern:
            response = await self.legacy.respond(request)
            self._record(request, response, path="legacy")
            return RolloutOutcome(RolloutState.LEGACY_ONLY, response)

        state = RolloutState.MODERN_ATTEMPT
        logger.debug("%s for user %s", state.value, request.user_id)
        try:
            raw, entry = await self.modern.run_with_entry(request)
            response = check_response_shape(raw)
        except ContractViolation as exc:
            logger.error("Modern response rejected for user %s: %s", request.user_id, exc)
            return await self._fall_back(request, f"ContractViolation: {exc}")
        except Exception as exc:
            logger.exception("Modern assistant failed for user %s", request.user_id)
            return await self._fall_back(request, f"{type(exc).__name__}: {exc}")

        if entry is not None:
            self.telemetry.append(entry)
        return RolloutOutcome(RolloutState.MODERN_ACCEPTED, response)

    async def respond(self, request: AssistantRequest) -> AssistantResponse:
        return (await self.route(request)).response

    async def _fall_back(self, request: AssistantRequest, error: str) -> RolloutOutcome:
        with Timer() as timer:
            response = await self.legacy.respond(request)
        self._record(request, response, path="fallback", error=error, latency_ms=timer.elapsed_ms)
        return RolloutOutcome(RolloutState.FALLBACK_TO_LEGACY, response, error=error)

    def _record(
        self,
        request: AssistantRequest,
        response: AssistantResponse,
        *,
        path: str,
        error: str | None = None,
        latency_ms: float | None = None,
    ) -> None:
        self.telemetry.append(
            make_entry(
                user_id=request.user_id,
                intent=None,
                has_navigate_to=response.navigate_to is not None,
                error=error,
                path=path,
                latency_ms=latency_ms,
            )
        )
