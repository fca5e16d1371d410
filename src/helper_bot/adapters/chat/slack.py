"""Slack chat adapter using slack-bolt.

This module implements the ChatProvider protocol for Slack using the
slack-bolt library. Mentions arrive as `app_mention` events either over
the Events API (HTTP mode, served with aiohttp) or over Socket Mode.

Features:
- Request signature verification and the url_verification handshake (bolt)
- A GET liveness route next to the events endpoint in HTTP mode
- Thread replies, in-place message updates, and paginated thread reads
- User and channel name lookups
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

import structlog
from aiohttp import web
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.app.async_app import AsyncApp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from ...config.schema import ServerConfig, SlackConfig
from ...models.message import MentionEvent
from ...models.record import ThreadMessage
from ...utils.async_helpers import TransportError

log = structlog.get_logger()

HEALTH_TEXT = "HelperBot is running!"
REPLIES_PAGE_LIMIT = 200


class SlackAdapterError(TransportError):
    """Base exception for Slack adapter errors."""


class ConnectionError(SlackAdapterError):
    """Raised when connection to Slack fails."""


class SendError(SlackAdapterError):
    """Raised when posting or updating a message fails."""


class ThreadReadError(SlackAdapterError):
    """Raised when a thread cannot be read."""


class LookupFailedError(SlackAdapterError):
    """Raised when a user or channel cannot be resolved."""


def _parse_ts(ts: str) -> datetime:
    """Convert a Slack ts ("1712345678.000100") to an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(float(ts), tz=UTC)
    except (ValueError, TypeError):
        return datetime.now(tz=UTC)


class SlackAdapter:
    """Slack chat adapter implementing the ChatProvider protocol.

    Example:
        config = SlackConfig(
            bot_token="xoxb-...",
            signing_secret="...",
        )
        adapter = SlackAdapter(config, ServerConfig(port=3000))

        await adapter.connect()
        async for event in adapter.listen():
            print(f"Mentioned: {event.text}")
        await adapter.disconnect()
    """

    def __init__(self, config: SlackConfig, server: ServerConfig | None = None) -> None:
        """Initialize the Slack adapter.

        Args:
            config: Slack-specific configuration.
            server: Listener settings for HTTP mode.
        """
        self._config = config
        self._server_config = server or ServerConfig()
        self._connected = False
        self._bot_user_id: str | None = None

        self._app = AsyncApp(
            token=config.bot_token,
            signing_secret=config.signing_secret or None,
            request_verification_enabled=config.mode == "http",
        )
        self._client: AsyncWebClient = self._app.client
        self._socket_handler: AsyncSocketModeHandler | None = None
        self._runner: web.AppRunner | None = None

        # Mentions received but not yet handed to listen()
        self._event_queue: asyncio.Queue[MentionEvent] = asyncio.Queue()

        self._disconnect_event = asyncio.Event()

        self._register_handlers()

    @property
    def bot_user_id(self) -> str | None:
        """Slack user id of the bot, resolved on connect()."""
        return self._bot_user_id

    def _register_handlers(self) -> None:
        """Register event handlers with the Slack app."""

        @self._app.event("app_mention")
        async def handle_app_mention(event: dict[str, Any]) -> None:
            """Queue mention events for the bot loop."""
            await self._process_mention_event(event)

    async def _process_mention_event(self, event: dict[str, Any]) -> None:
        """Turn an app_mention payload into a MentionEvent and queue it.

        Args:
            event: The Slack event payload.
        """
        if event.get("bot_id"):
            return

        mention = MentionEvent(
            channel_id=event.get("channel", ""),
            event_ts=event.get("ts", ""),
            thread_ts=event.get("thread_ts"),
            user_id=event.get("user", ""),
            text=event.get("text", ""),
            raw_event=event,
        )

        await self._event_queue.put(mention)
        log.debug(
            "mention_queued",
            channel_id=mention.channel_id,
            event_ts=mention.event_ts,
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text=HEALTH_TEXT)

    async def connect(self) -> None:
        """Resolve the bot identity and start receiving events.

        Raises:
            ConnectionError: If the token is rejected or the listener fails.
        """
        if self._connected:
            return

        try:
            auth = await self._client.auth_test()
            self._bot_user_id = auth.get("user_id")

            if self._config.mode == "socket":
                await self._start_socket_mode()
            else:
                await self._start_http_server()

            self._connected = True
            self._disconnect_event.clear()

            log.info(
                "slack_connected",
                mode=self._config.mode,
                bot_user_id=self._bot_user_id,
            )

        except Exception as e:
            log.error("slack_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Slack: {e}") from e

    async def _start_socket_mode(self) -> None:
        self._socket_handler = AsyncSocketModeHandler(
            app=self._app,
            app_token=self._config.app_token,
        )
        await self._socket_handler.connect_async()  # type: ignore[no-untyped-call]

    async def _start_http_server(self) -> None:
        server = self._server_config
        app_server = self._app.server(port=server.port, path=server.path, host=server.host)
        app_server.web_app.router.add_get(server.health_path, self._handle_health)

        self._runner = web.AppRunner(app_server.web_app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, server.host, server.port)
        await site.start()

        log.info(
            "slack_http_listening",
            host=server.host,
            port=server.port,
            path=server.path,
            health_path=server.health_path,
        )

    async def disconnect(self) -> None:
        """Stop the listener and close the Slack connection."""
        if not self._connected:
            return

        self._disconnect_event.set()

        if self._socket_handler:
            try:
                await self._socket_handler.close_async()  # type: ignore[no-untyped-call]
            except Exception as e:
                log.warning("disconnect_error", error=str(e))

        if self._runner:
            try:
                await self._runner.cleanup()
            except Exception as e:
                log.warning("disconnect_error", error=str(e))
            self._runner = None

        self._connected = False
        log.info("slack_disconnected")

    async def listen(self) -> AsyncIterator[MentionEvent]:
        """Yield mention events as they arrive.

        Yields:
            MentionEvent: Each mention of the bot.
        """
        if not self._connected:
            raise SlackAdapterError("Not connected. Call connect() first.")

        while not self._disconnect_event.is_set():
            try:
                # Wait with a timeout so disconnect is noticed
                event = await asyncio.wait_for(self._event_queue.get(), timeout=1.0)
                yield event
            except TimeoutError:
                continue
            except asyncio.CancelledError:
                break

    async def post_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: str | None = None,
    ) -> str:
        """Post a message, optionally in a thread.

        Args:
            channel_id: Target channel identifier.
            text: Message text (mrkdwn).
            thread_ts: Root message ts for threading (optional).

        Returns:
            ts of the posted message.

        Raises:
            SendError: If message delivery fails.
        """
        kwargs: dict[str, Any] = {
            "channel": channel_id,
            "text": text,
            "unfurl_links": self._config.unfurl_links,
        }
        if thread_ts:
            kwargs["thread_ts"] = thread_ts

        try:
            result = await self._client.chat_postMessage(**kwargs)
        except SlackApiError as e:
            log.error("post_message_failed", channel_id=channel_id, error=str(e))
            raise SendError(f"Failed to send message: {e}") from e

        message_ts: str = result.get("ts", "")
        log.debug("message_sent", channel_id=channel_id, message_ts=message_ts, thread_ts=thread_ts)
        return message_ts

    async def update_message(self, channel_id: str, message_ts: str, text: str) -> None:
        """Replace the text of a posted message.

        Raises:
            SendError: If the update fails.
        """
        try:
            await self._client.chat_update(channel=channel_id, ts=message_ts, text=text)
        except SlackApiError as e:
            log.error(
                "update_message_failed",
                channel_id=channel_id,
                message_ts=message_ts,
                error=str(e),
            )
            raise SendError(f"Failed to update message: {e}") from e

        log.debug("message_updated", channel_id=channel_id, message_ts=message_ts)

    async def fetch_thread(self, channel_id: str, root_ts: str) -> list[ThreadMessage]:
        """Fetch the root message and every reply, following pagination.

        Raises:
            ThreadReadError: If any page cannot be read.
        """
        messages: list[ThreadMessage] = []
        cursor: str | None = None

        while True:
            kwargs: dict[str, Any] = {
                "channel": channel_id,
                "ts": root_ts,
                "limit": REPLIES_PAGE_LIMIT,
            }
            if cursor:
                kwargs["cursor"] = cursor

            try:
                result = await self._client.conversations_replies(**kwargs)
            except SlackApiError as e:
                log.error("fetch_thread_failed", channel_id=channel_id, error=str(e))
                raise ThreadReadError(f"Failed to read thread: {e}") from e

            for raw in result.get("messages", []):
                ts = raw.get("ts", "")
                messages.append(
                    ThreadMessage(
                        user_id=raw.get("user", ""),
                        text=raw.get("text", ""),
                        ts=ts,
                        timestamp=_parse_ts(ts),
                    )
                )

            cursor = (result.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break

        log.debug("thread_fetched", channel_id=channel_id, messages=len(messages))
        return messages

    async def fetch_channel_name(self, channel_id: str) -> str:
        """Resolve a channel id to its name.

        Raises:
            LookupFailedError: If the channel cannot be resolved.
        """
        try:
            result = await self._client.conversations_info(channel=channel_id)
        except SlackApiError as e:
            raise LookupFailedError(f"Failed to look up channel {channel_id}: {e}") from e

        channel: dict[str, Any] = result.get("channel") or {}
        return channel.get("name") or channel_id

    async def fetch_user_display_name(self, user_id: str) -> str:
        """Resolve a user id to the person's name.

        Prefers the real name, then the display name, then the handle.

        Raises:
            LookupFailedError: If the user cannot be resolved.
        """
        try:
            result = await self._client.users_info(user=user_id)
        except SlackApiError as e:
            raise LookupFailedError(f"Failed to look up user {user_id}: {e}") from e

        user: dict[str, Any] = result.get("user") or {}
        profile: dict[str, Any] = user.get("profile") or {}
        return (
            user.get("real_name")
            or profile.get("real_name")
            or profile.get("display_name")
            or user.get("name")
            or user_id
        )
