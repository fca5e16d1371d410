"""Data models and transfer objects."""

from .category import (
    CATEGORY_PROFILES,
    Category,
    CategoryProfile,
    detect_category,
    get_profile,
)
from .command import Command, CreateCommand, HelpCommand, StatusCommand, UpdateCommand
from .effect import (
    Effect,
    FetchThread,
    LookupChannel,
    LookupUser,
    PostMessage,
    StoreCreate,
    StoreFetch,
    StoreMutate,
    StoreQuery,
    UpdateMessage,
)
from .message import HandlingResult, MentionEvent, Outcome
from .record import RecordCreate, RequestRecord, ThreadMessage

__all__ = [
    # Category models
    "CATEGORY_PROFILES",
    "Category",
    "CategoryProfile",
    "detect_category",
    "get_profile",
    # Command models
    "Command",
    "CreateCommand",
    "HelpCommand",
    "StatusCommand",
    "UpdateCommand",
    # Effect models
    "Effect",
    "FetchThread",
    "LookupChannel",
    "LookupUser",
    "PostMessage",
    "StoreCreate",
    "StoreFetch",
    "StoreMutate",
    "StoreQuery",
    "UpdateMessage",
    # Message models
    "HandlingResult",
    "MentionEvent",
    "Outcome",
    # Record models
    "RecordCreate",
    "RequestRecord",
    "ThreadMessage",
]
