"""Protocol definitions for pluggable adapters."""

from .chat import ChatProvider
from .store import RecordStore

__all__ = ["ChatProvider", "RecordStore"]
