"""Data models for request records and thread snapshots."""

from dataclasses import dataclass
from datetime import datetime

from .category import Category


@dataclass(frozen=True)
class RequestRecord:
    """A tracked request as stored in the record store."""

    identifier: str  # 32 lowercase hex chars, no dashes
    title: str
    status: str
    collection_id: str
    category: Category | None = None
    source_reference: str | None = None
    created_at: datetime | None = None
    last_edited_at: datetime | None = None


@dataclass(frozen=True)
class RecordCreate:
    """Data for creating a new request record."""

    title: str
    status: str
    source_reference: str
    created_at: datetime
    body: tuple[str, ...] = ()  # Paragraphs written as page content


@dataclass(frozen=True)
class ThreadMessage:
    """One message of a conversation thread, in thread order."""

    user_id: str
    text: str
    ts: str
    timestamp: datetime
