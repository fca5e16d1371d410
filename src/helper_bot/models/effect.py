"""Effects: descriptions of calls made against external collaborators.

The orchestrator decides *what* to do by building these values; the
EffectRunner in core.effects performs them against the chat and store
adapters and keeps a journal of everything it ran.
"""

from dataclasses import dataclass

from .record import RecordCreate


@dataclass(frozen=True)
class PostMessage:
    """Post a message, optionally as a thread reply."""

    channel_id: str
    text: str
    thread_ts: str | None = None


@dataclass(frozen=True)
class UpdateMessage:
    """Overwrite a previously posted message in place."""

    channel_id: str
    message_ts: str
    text: str


@dataclass(frozen=True)
class FetchThread:
    """Read the root message and all replies of a thread."""

    channel_id: str
    root_ts: str


@dataclass(frozen=True)
class LookupUser:
    """Resolve a user id to a human-readable name."""

    user_id: str


@dataclass(frozen=True)
class LookupChannel:
    """Resolve a channel id to its name."""

    channel_id: str


@dataclass(frozen=True)
class StoreQuery:
    """Query a collection, newest edits first."""

    collection_id: str
    title_contains: str | None = None
    status_not_equals: str | None = None
    page_size: int = 10


@dataclass(frozen=True)
class StoreFetch:
    """Fetch a single record by identifier."""

    record_id: str


@dataclass(frozen=True)
class StoreCreate:
    """Create a record in a collection."""

    collection_id: str
    record: RecordCreate


@dataclass(frozen=True)
class StoreMutate:
    """Set the status field of an existing record."""

    record_id: str
    status: str


ChatEffect = PostMessage | UpdateMessage | FetchThread | LookupUser | LookupChannel
StoreEffect = StoreQuery | StoreFetch | StoreCreate | StoreMutate
Effect = ChatEffect | StoreEffect
