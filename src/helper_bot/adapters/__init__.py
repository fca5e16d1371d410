"""Concrete implementations of provider interfaces."""

from .chat.slack import SlackAdapter
from .store.notion import NotionAdapter

__all__ = [
    "NotionAdapter",
    "SlackAdapter",
]
