"""Built-in tool implementations for the assistant."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from avatar_assistant.agent.registry import ToolRegistry, ToolSpec
from avatar_assistant.contracts import ToolResult
from avatar_assistant.integrations.stores import (
    DAILY_CHALLENGES,
    DailyChallengeStore,
    ShoppingListStore,
)
from avatar_assistant.types import ToolName

logger = logging.getLogger(__name__)

DEFAULT_PROTEIN_RANGE = (100, 150)
FITBRAIN_ROUTE = "/fitbrain-rush"
ANTI_INFLAMMATORY_HELP = "help:anti-inflammatory"


class UserContextSource(Protocol):
    async def fetch(self, user_id: str) -> dict[str, Any]: ...


class _ToolInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    user_id: str = Field(min_length=1)


class NavigateInput(_ToolInput):
    route: str = Field(min_length=1)


class UserOnlyInput(_ToolInput):
    pass


class AddToShoppingListInput(_ToolInput):
    item: str = Field(min_length=1, max_length=200)
    quantity: float | None = Field(default=None, gt=0)
    unit: str | None = Field(default=None, max_length=32)


class DailyChallengeInput(_ToolInput):
    date_key: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")

    def resolved_date(self) -> str:
        return self.date_key or date.today().isoformat()


def register_builtin_tools(
    registry: ToolRegistry,
    *,
    shopping_list: ShoppingListStore,
    challenges: DailyChallengeStore,
    user_context: UserContextSource,
) -> None:
    """Register the default tool set used by the modern pipeline.

    Tools:
    - `navigate`: signal a destination route to the UI.
    - `openFitBrainRush`: navigate to the trivia game and emit a client event.
    - `showAntiInflammatoryHelp`: ask the UI to open an in-page help panel.
    - `addToShoppingList`: persist a list item.
    - `estimateProteinTarget`: daily protein range from the user's bodyweight.
    - `getDailyChallenge` / `completeDailyChallenge`: daily challenge store.

    Tools that touch a collaborator catch its failures and return a
    best-effort result instead of raising.
    """

    async def _navigate(input_data: NavigateInput) -> ToolResult:
        return ToolResult(
            ok=True,
            navigate_to=input_data.route,
            action="navigate",
            message=f"Opening {input_data.route}",
        )

    async def _open_fitbrain(input_data: UserOnlyInput) -> ToolResult:
        return ToolResult(
            ok=True,
            navigate_to=FITBRAIN_ROUTE,
            action="navigate",
            client_event="fitbrain:open",
            message="Opening FitBrain Rush",
        )

    async def _anti_inflammatory_help(input_data: UserOnlyInput) -> ToolResult:
        return ToolResult(
            ok=True,
            action="showHelp",
            page="anti-inflammatory",
            message="Showing anti-inflammatory eating tips",
        )

    async def _add_to_list(input_data: AddToShoppingListInput) -> ToolResult:
        try:
            entry = await shopping_list.add_item(
                input_data.user_id,
                input_data.item,
                input_data.quantity,
                input_data.unit,
            )
        except Exception as exc:
            logger.warning("addToShoppingList failed for %s: %s", input_data.user_id, exc)
            return ToolResult.failure("Could not add to shopping list right now.")
        return ToolResult(
            ok=True,
            data=entry,
            action="addToShoppingList",
            message=f"Added {_describe_item(input_data)} to your shopping list.",
        )

    async def _estimate_protein(input_data: UserOnlyInput) -> ToolResult:
        try:
            context = await user_context.fetch(input_data.user_id)
            weight_lbs = _bodyweight_lbs(context)
        except Exception as exc:
            logger.warning("estimateProteinTarget context failed for %s: %s", input_data.user_id, exc)
            weight_lbs = None

        if weight_lbs is None:
            low, high = DEFAULT_PROTEIN_RANGE
            basis = "default"
        else:
            low, high = round(weight_lbs * 0.7), round(weight_lbs * 1.0)
            basis = "bodyweight"
        return ToolResult(
            ok=True,
            data={"min_grams": low, "max_grams": high, "basis": basis},
            message=f"Suggested protein: {low}-{high} g per day.",
        )

    async def _get_challenge(input_data: DailyChallengeInput) -> ToolResult:
        date_key = input_data.resolved_date()
        try:
            record = await challenges.get(input_data.user_id, date_key)
        except Exception as exc:
            logger.warning("getDailyChallenge failed for %s: %s", input_data.user_id, exc)
            record = {"date": date_key, "challenge": DAILY_CHALLENGES[0], "completed": False}
        return ToolResult(ok=True, data=record, message=f"Today's challenge: {record['challenge']}")

    async def _complete_challenge(input_data: DailyChallengeInput) -> ToolResult:
        date_key = input_data.resolved_date()
        try:
            record = await challenges.mark_complete(input_data.user_id, date_key)
        except Exception as exc:
            logger.warning("completeDailyChallenge failed for %s: %s", input_data.user_id, exc)
            return ToolResult.failure("Could not mark the challenge complete right now.")
        return ToolResult(
            ok=True,
            data=record,
            action="completeDailyChallenge",
            message="Challenge marked complete. Nice work!",
        )

    registry.register(
        ToolSpec(
            name=ToolName.NAVIGATE,
            description="Signal a destination route to the UI.",
            args_schema=NavigateInput,
            handler=_navigate,
            tags=["navigation"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.OPEN_FITBRAIN_RUSH,
            description="Open the FitBrain Rush trivia game.",
            args_schema=UserOnlyInput,
            handler=_open_fitbrain,
            tags=["navigation"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.SHOW_ANTI_INFLAMMATORY_HELP,
            description="Show anti-inflammatory eating help.",
            args_schema=UserOnlyInput,
            handler=_anti_inflammatory_help,
            tags=["help"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.ADD_TO_SHOPPING_LIST,
            description="Add an item with optional quantity and unit to the shopping list.",
            args_schema=AddToShoppingListInput,
            handler=_add_to_list,
            tags=["list", "mutation"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.ESTIMATE_PROTEIN_TARGET,
            description="Estimate a daily protein range for the user.",
            args_schema=UserOnlyInput,
            handler=_estimate_protein,
            tags=["nutrition", "lookup"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.GET_DAILY_CHALLENGE,
            description="Look up the user's daily challenge.",
            args_schema=DailyChallengeInput,
            handler=_get_challenge,
            tags=["challenge", "lookup"],
        )
    )
    registry.register(
        ToolSpec(
            name=ToolName.COMPLETE_DAILY_CHALLENGE,
            description="Mark the user's daily challenge complete.",
            args_schema=DailyChallengeInput,
            handler=_complete_challenge,
            tags=["challenge", "mutation"],
        )
    )


def _describe_item(input_data: AddToShoppingListInput) -> str:
    parts: list[str] = []
    if input_data.quantity is not None:
        parts.append(f"{input_data.quantity:g}")
    if input_data.unit:
        parts.append(input_data.unit)
    parts.append(input_data.item)
    return " ".join(parts)


def _bodyweight_lbs(context: dict[str, Any]) -> float | None:
    profile = context.get("profile") if isinstance(context.get("profile"), dict) else {}
    for source in (context, profile):
        for key in ("weightLbs", "weight_lbs", "weight"):
            value = source.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
                return float(value)
        kg = source.get("weightKg") or source.get("weight_kg")
        if isinstance(kg, (int, float)) and not isinstance(kg, bool) and kg > 0:
            return float(kg) * 2.20462
    return None
