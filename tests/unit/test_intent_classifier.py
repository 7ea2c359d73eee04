import pytest

from avatar_assistant.agent.intent import (
    classify,
    parse_action,
    parse_add_to_list,
    parse_navigation,
)
from avatar_assistant.types import Intent, ToolName


@pytest.mark.parametrize(
    "utterance",
    [
        "I have chest pain",
        "I feel like fainting after my workout",
        "go to shopping list, I think I'm passing out",
        "add 2 lbs chicken to my shopping list, also this is an emergency",
        "how do I starve myself to lose weight",
        "open the meal calendar, I keep purging after meals",
    ],
)
def test_danger_patterns_override_everything(utterance: str) -> None:
    assert classify(utterance) is Intent.BLOCKED


def test_navigation_request() -> None:
    assert classify("go to shopping list") is Intent.NAVIGATE
    assert parse_navigation("go to shopping list") == "/shopping-list"


def test_navigation_special_destinations() -> None:
    assert parse_navigation("open FitBrain Rush") == "/fitbrain-rush"
    assert parse_navigation("show me anti-inflammatory tips") == "help:anti-inflammatory"
    assert parse_navigation("take me to my meal plan") == "/weekly-meal-calendar"


def test_navigation_needs_known_destination() -> None:
    assert parse_navigation("show me how much protein I need") is None
    assert classify("show me how much protein I need") is Intent.QNA_HEALTH


def test_add_to_list_is_action_with_extracted_arguments() -> None:
    utterance = "add 2 lbs chicken to my shopping list"
    assert classify(utterance) is Intent.DO

    parsed = parse_add_to_list(utterance)
    assert parsed is not None
    assert parsed.item == "chicken"
    assert parsed.quantity == 2
    assert parsed.unit == "lbs"


def test_add_to_list_without_quantity() -> None:
    parsed = parse_add_to_list("put almond milk on the grocery list")
    assert parsed is not None
    assert parsed.item == "almond milk"
    assert parsed.quantity is None
    assert parsed.unit is None


def test_add_to_list_number_words_and_unit_boundaries() -> None:
    dozen = parse_add_to_list("add a dozen eggs to my shopping list")
    assert dozen is not None
    assert (dozen.item, dozen.quantity, dozen.unit) == ("eggs", 1, "dozen")

    grapes = parse_add_to_list("add 3 grapes to my shopping list")
    assert grapes is not None
    assert (grapes.item, grapes.quantity, grapes.unit) == ("grapes", 3, None)


def test_start_and_complete_actions() -> None:
    assert classify("start today's challenge") is Intent.DO
    assert classify("complete my challenge") is Intent.DO

    complete = parse_action("complete my challenge", "u1")
    assert complete is not None
    assert complete.name is ToolName.COMPLETE_DAILY_CHALLENGE

    plan = parse_action("create a meal plan", "u1")
    assert plan is not None
    assert plan.name is ToolName.NAVIGATE
    assert plan.args["route"] == "/weekly-meal-calendar"


def test_health_questions_and_default() -> None:
    assert classify("how much protein should I eat?") is Intent.QNA_HEALTH
    assert classify("tips for better sleep") is Intent.QNA_HEALTH
    assert classify("tell me something interesting") is Intent.QNA_HEALTH


def test_smalltalk_requires_exact_token() -> None:
    assert classify("hi") is Intent.SMALLTALK
    assert classify("  Thank you! ") is Intent.SMALLTALK
    assert classify("hi, what are good protein snacks") is Intent.QNA_HEALTH


def test_empty_input_is_classified() -> None:
    assert classify("") is Intent.QNA_HEALTH
    assert classify("   ") is Intent.QNA_HEALTH


def test_classification_is_deterministic() -> None:
    utterances = [
        "go to shopping list",
        "add milk to my shopping list",
        "I have chest pain",
        "hello",
        "what should I eat after a workout",
    ]
    first = [classify(u) for u in utterances]
    for _ in range(5):
        assert [classify(u) for u in utterances] == first


def test_hyphenated_words_are_not_navigation_verbs() -> None:
    utterance = "add go-gurt to my shopping list"
    assert parse_navigation(utterance) is None
    assert classify(utterance) is Intent.DO

    parsed = parse_add_to_list(utterance)
    assert parsed is not None
    assert parsed.item == "go-gurt"


def test_unit_without_item_is_not_an_item() -> None:
    utterance = "add 2 lbs to my shopping list"
    assert parse_add_to_list(utterance) is None

    call = parse_action(utterance, "u1")
    assert call is not None
    assert call.name is ToolName.ADD_TO_SHOPPING_LIST
    assert "item" not in call.args
