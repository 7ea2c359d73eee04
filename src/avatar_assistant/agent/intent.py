"""Rule-based intent classification and argument extraction.

Classification is a pure function of the utterance. Rules are evaluated in a
fixed precedence order and the first match wins:

1. Safety patterns -> `BLOCKED`, even when navigation or action patterns also
   match the same utterance.
2. Navigation verb plus a known destination -> `NAVIGATE`.
3. Add-to-list or start/complete-style action -> `DO`.
4. Nutrition, fitness or mindset keywords -> `QNA_HEALTH`.
5. Bare greeting or farewell -> `SMALLTALK`.
6. Anything else -> `QNA_HEALTH`.
"""

from __future__ import annotations

import re

from avatar_assistant.types import Intent, ShoppingListItem, ToolCall, ToolName

_DANGER_PATTERNS = tuple(
    re.compile(pattern, flags=re.IGNORECASE)
    for pattern in (
        r"\bchest\s+pain",
        r"\bfaint(?:ed|ing)?\b",
        r"\bpass(?:ed|ing)?\s+out\b",
        r"\bsuicid",
        r"\bkill(?:ing)?\s+myself\b",
        r"\bself[\s-]?harm",
        r"\bhurt(?:ing)?\s+myself\b",
        r"\bcut(?:ting)?\s+myself\b",
        r"\bstarv(?:e|ing)\s+myself\b",
        r"\beating\s+disorder",
        r"\banorexi",
        r"\bbulimi",
        r"\bpurg(?:e|ed|ing)\b",
        r"\bemergency\b",
        r"\bcan'?t\s+breathe\b",
        r"\boverdos",
        r"\bheart\s+attack\b",
    )
)

_NAV_VERB = re.compile(
    r"(?<![\w-])(?:go|open|show|take\s+me|navigate|bring\s+me|view|launch)(?![\w-])",
    flags=re.IGNORECASE,
)

# Checked in order; longer, more specific aliases come first.
_DESTINATIONS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, flags=re.IGNORECASE), route)
    for pattern, route in (
        (r"\b(?:shopping|grocery)\s+list\b", "/shopping-list"),
        (r"\bfit\s?brain(?:\s+rush)?\b|\btrivia\b", "/fitbrain-rush"),
        (r"\banti[\s-]?inflammatory\b", "help:anti-inflammatory"),
        (r"\b(?:weekly\s+)?meal\s+(?:calendar|plan(?:ner|ning)?)\b|\bweekly\s+meals?\b", "/weekly-meal-calendar"),
        (r"\bcraving(?:s|\s+creator)?\b", "/craving-creator"),
        (r"\b(?:log\s+meals?|meal\s+log(?:ging)?|meal\s+journal)\b", "/log-meals"),
        (r"\b(?:log\s+)?water(?:\s+track(?:er|ing))?\b|\bhydration\b", "/log-water"),
        (r"\bblood\s+sugar\b|\bglucose\b", "/blood-sugar-hub"),
        (r"\brestaurants?(?:\s+guide)?\b", "/restaurant-guide"),
        (r"\bfridge\s+rescue\b", "/fridge-rescue"),
        (r"\bkids?(?:\s+(?:hub|meals?))?\b", "/kids-hub"),
        (r"\b(?:my\s+)?progress\b|\bbiometrics\b", "/my-biometrics"),
        (r"\bprofile\b", "/profile"),
        (r"\bdashboard\b|\bhome(?:\s+page)?\b", "/dashboard"),
    )
)

_ADD_TO_LIST = re.compile(
    r"\b(?:add|put)\s+(?P<phrase>.+?)\s+(?:to|on|onto|in|into)\s+"
    r"(?:my\s+|the\s+|our\s+)?(?:shopping|grocery)\s+list\b",
    flags=re.IGNORECASE,
)

_ACTION = re.compile(
    r"\b(?P<verb>start|begin|create|complete|finish|make)\s+"
    r"(?:a\s+|an\s+|my\s+|the\s+|today'?s\s+|new\s+)*"
    r"(?P<noun>challenge|meal\s+plan|plan|workout|journal\s+entry|journal|habit|streak)\b",
    flags=re.IGNORECASE,
)

_HEALTH_KEYWORDS = re.compile(
    r"\b(?:protein|carb|carbs|carbohydrates?|fats?|calories?|macros?|nutrition|nutrients?"
    r"|diet|vitamins?|fib(?:er|re)|sugar|hydrat\w*|water|meals?|eat(?:ing)?|food"
    r"|fitness|workouts?|exercis\w*|training|muscles?|weight|sleep|recovery"
    r"|mindset|habits?|motivation|stress|focus|challenge|grams?)\b",
    flags=re.IGNORECASE,
)

_SMALLTALK_TOKENS = frozenset(
    {
        "hi",
        "hello",
        "hey",
        "hiya",
        "yo",
        "sup",
        "howdy",
        "good morning",
        "good afternoon",
        "good evening",
        "good night",
        "thanks",
        "thank you",
        "thx",
        "bye",
        "goodbye",
        "see you",
        "see ya",
        "later",
        "what's up",
        "whats up",
    }
)

_QUANTITY_WORDS = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}

_ITEM_PHRASE = re.compile(
    r"^(?:(?P<qty>\d+(?:\.\d+)?|" + "|".join(_QUANTITY_WORDS) + r")\s+)?"
    r"(?:(?P<unit>lbs?|pounds?|oz|ounces?|kg|kilograms?|g|grams?|cups?|cans?|bags?"
    r"|boxe?s|box|bottles?|dozen|packs?|packages?|pieces?|bunch(?:es)?|loaf|loaves"
    r"|gallons?|liters?|litres?|l|jars?|cartons?)\.?(?:\s+|$))?"
    r"(?:of\s+)?(?P<item>.*)$",
    flags=re.IGNORECASE,
)


def normalize(utterance: str | None) -> str:
    return (utterance or "").strip()


def is_dangerous(utterance: str) -> bool:
    return any(pattern.search(utterance) for pattern in _DANGER_PATTERNS)


def classify(utterance: str | None) -> Intent:
    """Map an utterance to exactly one `Intent`."""

    text = normalize(utterance)
    if is_dangerous(text):
        return Intent.BLOCKED
    if parse_navigation(text) is not None:
        return Intent.NAVIGATE
    if _ADD_TO_LIST.search(text) or _ACTION.search(text):
        return Intent.DO
    if _HEALTH_KEYWORDS.search(text):
        return Intent.QNA_HEALTH
    if _smalltalk_key(text) in _SMALLTALK_TOKENS:
        return Intent.SMALLTALK
    return Intent.QNA_HEALTH


def parse_navigation(utterance: str | None) -> str | None:
    """Return the destination route for a navigation request, if any."""

    text = normalize(utterance)
    verb = _NAV_VERB.search(text)
    if verb is None:
        return None
    remainder = text[verb.end():]
    for pattern, route in _DESTINATIONS:
        if pattern.search(remainder):
            return route
    return None


def parse_add_to_list(utterance: str | None) -> ShoppingListItem | None:
    """Extract item, quantity and unit from an add-to-list request."""

    match = _ADD_TO_LIST.search(normalize(utterance))
    if match is None:
        return None
    phrase = match.group("phrase").strip()
    parts = _ITEM_PHRASE.match(phrase)
    item = re.sub(r"^(?:some|the)\s+", "", parts.group("item").strip(), flags=re.IGNORECASE)
    if not item:
        return None
    return ShoppingListItem(
        item=item,
        quantity=_parse_quantity(parts.group("qty")),
        unit=parts.group("unit").lower() if parts.group("unit") else None,
    )


def parse_action(utterance: str | None, user_id: str) -> ToolCall | None:
    """Resolve a `DO` utterance into the tool call it asks for."""

    text = normalize(utterance)
    add = parse_add_to_list(text)
    if add is not None:
        return ToolCall(
            name=ToolName.ADD_TO_SHOPPING_LIST,
            args={
                "user_id": user_id,
                "item": add.item,
                "quantity": add.quantity,
                "unit": add.unit,
            },
        )
    if _ADD_TO_LIST.search(text):
        # Matched the list pattern but no usable item; let validation reject it.
        return ToolCall(name=ToolName.ADD_TO_SHOPPING_LIST, args={"user_id": user_id})

    match = _ACTION.search(text)
    if match is None:
        return None
    verb = match.group("verb").lower()
    noun = re.sub(r"\s+", " ", match.group("noun").lower())
    if noun == "challenge":
        if verb in {"complete", "finish"}:
            return ToolCall(name=ToolName.COMPLETE_DAILY_CHALLENGE, args={"user_id": user_id})
        return ToolCall(name=ToolName.GET_DAILY_CHALLENGE, args={"user_id": user_id})
    if noun in {"meal plan", "plan"}:
        return ToolCall(
            name=ToolName.NAVIGATE,
            args={"user_id": user_id, "route": "/weekly-meal-calendar"},
        )
    if noun in {"journal", "journal entry"}:
        return ToolCall(name=ToolName.NAVIGATE, args={"user_id": user_id, "route": "/log-meals"})
    return None


def _parse_quantity(raw: str | None) -> float | None:
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _QUANTITY_WORDS:
        return float(_QUANTITY_WORDS[lowered])
    return float(lowered)


def _smalltalk_key(text: str) -> str:
    return re.sub(r"[^\w\s']", "", text.lower()).strip()
