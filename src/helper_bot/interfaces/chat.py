"""Abstract interface for chat platform integrations."""

from collections.abc import AsyncIterator
from typing import Protocol

from ..models.message import MentionEvent
from ..models.record import ThreadMessage


class ChatProvider(Protocol):
    """Abstract interface for chat platform integrations.

    This protocol defines the contract the orchestrator and bot lifecycle
    rely on. The Slack adapter is the only implementation today.
    """

    @property
    def bot_user_id(self) -> str | None:
        """Platform user id of the bot, once known after connect()."""
        ...

    async def connect(self) -> None:
        """
        Start receiving events from the chat platform.

        Raises:
            ConnectionError: If the listener cannot be started
        """
        ...

    async def disconnect(self) -> None:
        """Stop receiving events and release resources."""
        ...

    async def listen(self) -> AsyncIterator[MentionEvent]:
        """
        Yield bot mention events as they arrive.

        Yields:
            MentionEvent: Each mention of the bot

        Example:
            async for event in provider.listen():
                await orchestrator.handle(event)
        """
        ...

    async def post_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> str:
        """
        Post a message, optionally as a reply in a thread.

        Args:
            channel_id: Target channel identifier
            text: Message text (mrkdwn)
            thread_ts: Root message timestamp for threading (optional)

        Returns:
            Handle (timestamp) of the posted message

        Raises:
            SendError: If message delivery fails
        """
        ...

    async def update_message(
        self,
        channel_id: str,
        message_ts: str,
        text: str,
    ) -> None:
        """
        Replace the text of a message posted earlier.

        Args:
            channel_id: Channel containing the message
            message_ts: Handle returned by post_message()
            text: New message text

        Raises:
            SendError: If the update fails
        """
        ...

    async def fetch_thread(
        self,
        channel_id: str,
        root_ts: str,
    ) -> list[ThreadMessage]:
        """
        Fetch the root message and every reply of a thread, in thread order.

        Raises:
            ThreadReadError: If the thread cannot be read
        """
        ...

    async def fetch_channel_name(self, channel_id: str) -> str:
        """
        Resolve a channel id to its display name (without "#").

        Raises:
            LookupFailedError: If the channel cannot be resolved
        """
        ...

    async def fetch_user_display_name(self, user_id: str) -> str:
        """
        Resolve a user id to the person's name.

        Raises:
            LookupFailedError: If the user cannot be resolved
        """
        ...
