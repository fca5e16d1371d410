"""Structured commands produced by the intent classifier."""

from dataclasses import dataclass

from .category import Category


@dataclass(frozen=True)
class HelpCommand:
    """Reply with the command summary."""


@dataclass(frozen=True)
class StatusCommand:
    """List recent requests of a category."""

    category: Category
    include_terminal: bool = False


@dataclass(frozen=True)
class UpdateCommand:
    """Move one request to a new status."""

    category: Category
    query: str
    new_status_text: str


@dataclass(frozen=True)
class CreateCommand:
    """Archive the current thread as a new request."""

    category: Category


Command = HelpCommand | StatusCommand | UpdateCommand | CreateCommand
