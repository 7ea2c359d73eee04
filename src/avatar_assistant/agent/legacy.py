"""Previously shipped assistant kept as the rollout safety net.

The legacy assistant makes one persona-prompted chat call and detects
navigation from keywords. It never raises: every failure becomes a fixed
apology, so its output always satisfies the response contract.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from avatar_assistant.agent.generation import extract_text
from avatar_assistant.config import LegacyConfig
from avatar_assistant.contracts import EMPTY_PROMPT_TEXT, AssistantRequest, AssistantResponse
from avatar_assistant.errors import GenerationServiceError

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I'm having trouble responding right now. Please try again!"
DEFAULT_REPLY = "I'm here to help! What would you like to know?"

_APP_KNOWLEDGE = """
MY PERFECT MEALS APP FEATURES:

MAIN DASHBOARD:
- Shopping List: Smart grocery list with ingredient consolidation
- Today's Motivation: Daily inspirational content

MEAL PLANNING:
- Weekly Meal Calendar (/weekly-meal-planning): Plan 7 days of meals with AI assistance
- Craving Creator (/craving-creator): Generate meals based on current cravings and preferences
- Holiday Feast (/holiday-feast): Create special occasion multi-course meals
- Potluck Planner (/potluck-planner): Plan potluck dishes

FOOD & DINING:
- Restaurant Guide (/restaurant-guide): Healthy options at popular restaurants
- Fridge Rescue (/fridge-rescue): Create meals from ingredients you already have
- Kids Meals Hub (/kids-hub): Kid-friendly meal planning including a lunchbox planner

HEALTH & PROGRESS:
- My Progress (/my-biometrics): Health tracking pages
- Men's Health (/mens-health) and Women's Health (/womens-health)
- Blood Sugar Hub (/blood-sugar-hub): Glycemic-aware meal guidance
- Complete Profile (/profile): Multi-step health profile

ACCOUNT & SETTINGS:
- Profile Editor (/profile): Edit health data, dietary restrictions, goals
- Onboarding (/onboarding): Initial health assessment and setup
""".strip()

# (message keywords, route) checked in order once a navigation phrase is present.
_MESSAGE_ROUTES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("blood sugar", "glucose", "glycemic"), "/blood-sugar-hub"),
    (("women's health", "womens health", "women health"), "/womens-health"),
    (("men's health", "mens health", "men health"), "/mens-health"),
    (("meal plan", "weekly meal", "meal calendar"), "/weekly-meal-planning"),
    (("craving",), "/craving-creator"),
    (("profile", "onboarding"), "/profile"),
    (("dashboard", "home", "main page"), "/"),
    (("kids", "children", "kid meal"), "/kids-hub"),
    (("restaurant", "dining out"), "/restaurant-guide"),
    (("progress", "tracking", "biometrics"), "/my-biometrics"),
)

_NAV_PHRASES = ("go to", "take me to", "navigate to", "open")

# Routes the model may mention in its reply.
_REPLY_ROUTES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("/weekly-meal-planning",), "/weekly-meal-planning"),
    (("/craving-creator",), "/craving-creator"),
    (("/blood-sugar-hub",), "/blood-sugar-hub"),
    (("/womens-health",), "/womens-health"),
    (("/mens-health",), "/mens-health"),
    (("/profile",), "/profile"),
    (("/kids-hub",), "/kids-hub"),
    (("/restaurant-guide",), "/restaurant-guide"),
    (("/my-progress", "my progress"), "/my-biometrics"),
)


class LegacyAssistant:
    def __init__(self, llm: Any | None, config: LegacyConfig | None = None) -> None:
        self.llm = llm
        self.config = config or LegacyConfig()

    async def respond(self, request: AssistantRequest) -> AssistantResponse:
        message = request.message.strip()
        if not message:
            return AssistantResponse.of(EMPTY_PROMPT_TEXT)

        try:
            reply = await self._complete(request, message)
        except Exception as exc:
            logger.error("Legacy avatar assistant error: %s", exc)
            return AssistantResponse.of(APOLOGY_TEXT)

        text = reply or DEFAULT_REPLY
        return AssistantResponse.of(text, detect_navigation(message, text))

    async def _complete(self, request: AssistantRequest, message: str) -> str:
        if self.llm is None:
            raise GenerationServiceError("legacy chat model is not configured")
        messages = [
            SystemMessage(content=build_system_prompt(request, message)),
            HumanMessage(content=message),
        ]
        try:
            result = await asyncio.wait_for(
                self.llm.ainvoke(messages), timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise GenerationServiceError("legacy chat model timed out") from exc
        return extract_text(result).strip()


def build_system_prompt(request: AssistantRequest, message: str) -> str:
    ctx = request.context
    return f"""You are Maya, the friendly AI health concierge for My Perfect Meals app. You help users navigate the app and understand features.

USER CONTEXT:
- Name: {ctx.user_name or "there"}
- Current Page: {ctx.current_page or "unknown"}
- Health Streak: {ctx.streak or 0} days
- Badges Earned: {ctx.badges or 0}

{_APP_KNOWLEDGE}

PERSONALITY:
- Warm, encouraging, and knowledgeable
- Keep responses conversational (2-3 sentences max)
- Sound natural when spoken aloud
- Reference their progress when relevant
- Use "you can" instead of "users can"

RESPONSE GUIDELINES:
- Give clear, actionable guidance
- Mention specific page routes when helpful (like /weekly-meal-planning)
- If unsure about something, admit it but offer general help

User question: "{message}"
""".strip()


def detect_navigation(message: str, reply: str) -> str | None:
    """Pick a route from an explicit navigation request, else from the reply."""

    msg = message.lower()
    if any(phrase in msg for phrase in _NAV_PHRASES):
        for keywords, route in _MESSAGE_ROUTES:
            if any(keyword in msg for keyword in keywords):
                return route

    lowered = reply.lower()
    for keywords, route in _REPLY_ROUTES:
        if any(keyword in lowered for keyword in keywords):
            return route
    return None
