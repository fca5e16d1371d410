"""Intent classification for bot mentions.

Turns the free text of a mention into one of four structured commands
using an ordered table of keyword rules:

1. "help" / "commands"         -> HelpCommand
2. category markers ("bd", ...) -> picks the category for every later rule
3. "update ... to ..."         -> UpdateCommand
4. "status"                    -> StatusCommand
5. anything else               -> CreateCommand

Keyword checks are plain, unanchored substring tests. A request whose
title happens to contain "status" or "bd" is classified accordingly;
that ambiguity is accepted rather than papered over with heuristics.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from helper_bot.models.category import Category, detect_category, get_profile
from helper_bot.models.command import (
    Command,
    CreateCommand,
    HelpCommand,
    StatusCommand,
    UpdateCommand,
)

log = structlog.get_logger()

HELP_KEYWORDS = ("help", "commands")
SHOW_ALL_KEYWORDS = ("all", "completed")

_UPDATE_SPLIT = re.compile(r"update\s+", re.IGNORECASE)
_TO_SPLIT = re.compile(r"\s+to\s+", re.IGNORECASE)
_QUOTE_CHARS = "\"'“”‘’"


@dataclass(frozen=True)
class ClassificationRule:
    """One entry of the rule table.

    The rule returns a command, or None to let the next rule try.
    """

    name: str
    apply: Callable[[str, str, Category], Command | None]


def _strip_quotes(text: str) -> str:
    """Remove one pair of surrounding quotes, keeping inner apostrophes."""
    stripped = text.strip()
    if len(stripped) >= 2 and stripped[0] in _QUOTE_CHARS and stripped[-1] in _QUOTE_CHARS:
        stripped = stripped[1:-1]
    return stripped.strip()


def _drop_leading_marker(query: str, category: Category) -> str:
    """Remove a leading category marker ("bd Acme" -> "Acme")."""
    lowered = query.lower()
    for marker in get_profile(category).markers:
        if lowered.startswith(marker + " "):
            return query[len(marker) :].strip()
    return query


def parse_update(text: str, category: Category) -> UpdateCommand | None:
    """Extract "update <query> to <status>" from a mention.

    Splits after the first "update" and then on the first "to", so a status
    that itself contains "to" ("Added to CRM") stays intact.

    Returns:
        UpdateCommand, or None if either side comes out empty
    """
    parts = _UPDATE_SPLIT.split(text, maxsplit=1)
    if len(parts) < 2:
        return None

    sides = _TO_SPLIT.split(parts[1], maxsplit=1)
    if len(sides) < 2:
        return None

    query = _drop_leading_marker(_strip_quotes(sides[0]), category)
    new_status = _strip_quotes(sides[1])
    if not query or not new_status:
        return None

    return UpdateCommand(category=category, query=query, new_status_text=new_status)


def _help_rule(text: str, lowered: str, category: Category) -> Command | None:
    if any(keyword in lowered for keyword in HELP_KEYWORDS):
        return HelpCommand()
    return None


def _update_rule(text: str, lowered: str, category: Category) -> Command | None:
    if "update" in lowered and " to " in lowered:
        return parse_update(text, category)
    return None


def _status_rule(text: str, lowered: str, category: Category) -> Command | None:
    if "status" not in lowered:
        return None
    terminal = get_profile(category).terminal_status.lower()
    include_terminal = terminal in lowered or any(
        keyword in lowered for keyword in SHOW_ALL_KEYWORDS
    )
    return StatusCommand(category=category, include_terminal=include_terminal)


def _create_rule(text: str, lowered: str, category: Category) -> Command | None:
    return CreateCommand(category=category)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("help", _help_rule),
    ClassificationRule("update", _update_rule),
    ClassificationRule("status", _status_rule),
    ClassificationRule("create", _create_rule),
)


class IntentClassifier:
    """Classifies mention text into a Command.

    Example:
        classifier = IntentClassifier()
        command = classifier.classify('<@U01> update "Foo" to Completed')
        # UpdateCommand(category=Category.FEATURE, query="Foo", ...)
    """

    def __init__(self, rules: tuple[ClassificationRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def classify(self, text: str) -> Command:
        """Classify the raw text of a mention.

        Args:
            text: Mention text as received (may include <@U...> tokens)

        Returns:
            The first command produced by the rule table; CreateCommand
            when no keyword rule fires.
        """
        lowered = text.lower()
        category = detect_category(text)

        for rule in self._rules:
            command = rule.apply(text, lowered, category)
            if command is not None:
                log.debug("command_classified", rule=rule.name, category=category.value)
                return command

        return CreateCommand(category=category)
