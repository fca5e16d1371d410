"""Execution of effects against the chat and store adapters.

The orchestrator expresses every collaborator call as an Effect value and
hands it to an EffectRunner. The runner performs the call, records the
effect in its journal, and normalises failures into the bot's exception
hierarchy:

- chat failures become TransportError (adapter errors already are one)
- store calls are bounded by the store timeout (StoreTimeoutError)
- any other store failure becomes StoreError

A new runner is created for every mention event, so journals never mix.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from helper_bot.models.effect import (
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
from helper_bot.utils.async_helpers import (
    StoreError,
    StoreTimeoutError,
    TransportError,
    with_timeout,
)

if TYPE_CHECKING:
    from helper_bot.interfaces.chat import ChatProvider
    from helper_bot.interfaces.store import RecordStore

log = structlog.get_logger()

T = TypeVar("T")

STORE_TIMEOUT_MESSAGE = "Request timed out"


class EffectRunner:
    """Runs effects for a single mention event.

    Example:
        runner = EffectRunner(chat, store, store_timeout=10.0)
        ts = await runner.run(PostMessage("C123", "Working...", thread_ts="1.2"))
        runner.journal  # (PostMessage(...),)
    """

    def __init__(
        self,
        chat: ChatProvider,
        store: RecordStore,
        store_timeout: float = 10.0,
    ) -> None:
        self._chat = chat
        self._store = store
        self._store_timeout = store_timeout
        self._journal: list[Effect] = []

    @property
    def journal(self) -> tuple[Effect, ...]:
        """Every effect run so far, in execution order."""
        return tuple(self._journal)

    async def run(self, effect: Effect) -> Any:
        """Execute one effect.

        Args:
            effect: The effect to perform

        Returns:
            Whatever the underlying collaborator call returns (message handle,
            thread messages, records, names, or None)

        Raises:
            TransportError: If a chat call fails
            StoreTimeoutError: If a store call exceeds the store timeout
            StoreError: If a store call fails for any other reason
        """
        self._journal.append(effect)
        log.debug("effect_started", effect=type(effect).__name__)

        match effect:
            case PostMessage(channel_id=channel_id, text=text, thread_ts=thread_ts):
                return await self._chat_call(
                    self._chat.post_message(channel_id, text, thread_ts=thread_ts)
                )
            case UpdateMessage(channel_id=channel_id, message_ts=message_ts, text=text):
                return await self._chat_call(
                    self._chat.update_message(channel_id, message_ts, text)
                )
            case FetchThread(channel_id=channel_id, root_ts=root_ts):
                return await self._chat_call(self._chat.fetch_thread(channel_id, root_ts))
            case LookupUser(user_id=user_id):
                return await self._chat_call(self._chat.fetch_user_display_name(user_id))
            case LookupChannel(channel_id=channel_id):
                return await self._chat_call(self._chat.fetch_channel_name(channel_id))
            case StoreQuery():
                return await self._store_call(
                    self._store.query(
                        effect.collection_id,
                        title_contains=effect.title_contains,
                        status_not_equals=effect.status_not_equals,
                        page_size=effect.page_size,
                    )
                )
            case StoreFetch(record_id=record_id):
                return await self._store_call(self._store.fetch_by_id(record_id))
            case StoreCreate(collection_id=collection_id, record=record):
                return await self._store_call(self._store.create(collection_id, record))
            case StoreMutate(record_id=record_id, status=status):
                return await self._store_call(self._store.update_status(record_id, status))

        raise TypeError(f"Unknown effect: {effect!r}")

    async def _chat_call(self, call: Awaitable[T]) -> T:
        try:
            return await call
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(str(e)) from e

    async def _store_call(self, call: Awaitable[T]) -> T:
        try:
            return await with_timeout(
                call,
                self._store_timeout,
                error_message=STORE_TIMEOUT_MESSAGE,
                error_cls=StoreTimeoutError,
            )
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(str(e)) from e
