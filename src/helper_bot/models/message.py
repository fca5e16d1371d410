"""Data models for inbound mention events and handling outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .command import Command
from .effect import Effect


@dataclass(frozen=True)
class MentionEvent:
    """The bot was mentioned in a channel or thread."""

    channel_id: str
    event_ts: str
    thread_ts: str | None  # None if the mention started a new thread
    user_id: str
    text: str

    # Platform-specific metadata
    raw_event: dict[str, Any]

    @property
    def reply_thread_ts(self) -> str:
        """Thread that replies (and archiving) should target."""
        return self.thread_ts or self.event_ts


class Outcome(Enum):
    """What handling a mention ended up doing."""

    HELP_REPLIED = "help_replied"
    STATUS_REPORTED = "status_reported"
    STATUS_UPDATED = "status_updated"
    RECORD_CREATED = "record_created"
    INVALID_STATUS = "invalid_status"
    NO_MATCH = "no_match"
    AMBIGUOUS_MATCH = "ambiguous_match"
    ERROR = "error"


@dataclass(frozen=True)
class HandlingResult:
    """Result of handling one mention event."""

    command: Command | None  # None if classification itself failed
    outcome: Outcome
    effects: tuple[Effect, ...] = ()
