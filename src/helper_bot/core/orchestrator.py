"""Mention handling pipeline.

This module implements the RequestOrchestrator, which takes one mention
event from start to finish:
1. Classify the mention text into a command
2. Dispatch to the help, status, update, or create handler
3. Run the handler's chat and store calls as effects
4. Reply in the originating thread, exactly once per mention

Every failure is turned into a chat reply here; nothing raised while
handling one mention escapes handle().
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from helper_bot.core.classifier import IntentClassifier
from helper_bot.core.effects import EffectRunner
from helper_bot.core.formatter import (
    UNKNOWN_USER,
    render_candidates,
    render_created,
    render_failure,
    render_footer,
    render_help,
    render_invalid_status,
    render_no_match,
    render_status,
    render_transcript,
    render_unexpected,
    render_updated,
)
from helper_bot.core.matcher import RecordMatcher
from helper_bot.models.category import Category, CategoryProfile, get_profile
from helper_bot.models.command import (
    Command,
    CreateCommand,
    HelpCommand,
    StatusCommand,
    UpdateCommand,
)
from helper_bot.models.effect import (
    FetchThread,
    LookupChannel,
    LookupUser,
    PostMessage,
    StoreCreate,
    StoreMutate,
    StoreQuery,
    UpdateMessage,
)
from helper_bot.models.message import HandlingResult, MentionEvent, Outcome
from helper_bot.models.record import RecordCreate, RequestRecord, ThreadMessage
from helper_bot.utils.async_helpers import (
    BotError,
    EmptyThreadError,
    OperationTimeoutError,
    StoreError,
    StoreNotFoundError,
    TransportError,
    call_with_retry,
)
from helper_bot.utils.logging import bind_context, unbind_context

if TYPE_CHECKING:
    from helper_bot.core.context import BotContext

log = structlog.get_logger()

TITLE_MAX_LENGTH = 80

TIMEOUT_SUFFIX = "Request timed out. The Notion API might be experiencing delays."
DATABASE_NOT_FOUND_SUFFIX = "Database not found. Please check your configuration."
ITEM_NOT_FOUND_SUFFIX = "Item or database not found. Please check your request."
EMPTY_THREAD_MESSAGE = "No messages found in thread"

_ADD_TO_BD = re.compile(r"add\s+(\w+)\s+to\s+(bd|business development)", re.IGNORECASE)
_USER_MENTION = re.compile(r"<@[A-Z0-9]+>")


def build_title(root_text: str, profile: CategoryProfile) -> str:
    """Derive a record title from the root message of a thread.

    The first line is truncated and prefixed with "{Label} request: " unless
    it already names the category. Business development requests phrased as
    "add X to bd" become "BD request: Add X"; otherwise user mentions are
    removed from the title.
    """
    title = root_text.split("\n")[0][:TITLE_MAX_LENGTH]
    prefix = f"{profile.label} request: "

    if profile.category == Category.BUSINESS_DEVELOPMENT:
        match = _ADD_TO_BD.search(root_text)
        if match:
            return f"{prefix}Add {match.group(1)}"
        title = _USER_MENTION.sub("", title).strip()

    if profile.key not in title.lower():
        title = f"{prefix}{title}"
    return title


def source_reference(channel_id: str, thread_ts: str) -> str:
    """Permalink-shaped reference back to the Slack thread."""
    return f"https://slack.com/archives/{channel_id}/p{thread_ts.replace('.', '')}"


class RequestOrchestrator:
    """Handles mention events end to end.

    Holds no per-event state: each call to handle() creates its own
    EffectRunner and matcher, so many events can be handled concurrently.

    Example:
        orchestrator = RequestOrchestrator(context)
        result = await orchestrator.handle(event)
        result.outcome  # Outcome.RECORD_CREATED
    """

    def __init__(
        self,
        context: BotContext,
        classifier: IntentClassifier | None = None,
    ) -> None:
        """Initialize the RequestOrchestrator.

        Args:
            context: Configuration and collaborators
            classifier: Intent classifier (default rule table if omitted)
        """
        self._context = context
        self._classifier = classifier or IntentClassifier()
        self._config = context.config

    async def handle(self, event: MentionEvent) -> HandlingResult:
        """Handle one mention event.

        Args:
            event: The mention to handle

        Returns:
            HandlingResult with the command, outcome, and every effect run
        """
        start_time = time.time()
        runner = EffectRunner(
            self._context.chat,
            self._context.store,
            store_timeout=self._config.runtime.store_timeout,
        )
        command: Command | None = None

        bind_context(channel_id=event.channel_id, event_ts=event.event_ts)
        log.info("mention_received", user_id=event.user_id, thread_ts=event.thread_ts)

        try:
            command = self._classifier.classify(event.text)
            outcome = await self._dispatch(runner, event, command)
        except Exception as e:
            log.exception("mention_handling_failed", error=str(e))
            await self._reply(runner, event, render_unexpected(str(e)))
            outcome = Outcome.ERROR
        else:
            log.info(
                "mention_handled",
                command=type(command).__name__,
                outcome=outcome.value,
                duration_seconds=round(time.time() - start_time, 2),
            )
        finally:
            unbind_context("channel_id", "event_ts")

        return HandlingResult(command=command, outcome=outcome, effects=runner.journal)

    async def _dispatch(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        command: Command,
    ) -> Outcome:
        match command:
            case HelpCommand():
                await self._reply(runner, event, render_help(self._context.bot_name))
                return Outcome.HELP_REPLIED
            case StatusCommand():
                return await self._handle_status(runner, event, command)
            case UpdateCommand():
                return await self._handle_update(runner, event, command)
            case CreateCommand():
                return await self._handle_create(runner, event, command)

        raise TypeError(f"Unknown command: {command!r}")

    # =========================================================================
    # Status
    # =========================================================================

    async def _handle_status(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        command: StatusCommand,
    ) -> Outcome:
        profile = get_profile(command.category)
        provisional_ts = await self._post_quietly(
            runner, event, f"Fetching {profile.label} statuses..."
        )

        try:
            records: list[RequestRecord] = await runner.run(
                StoreQuery(
                    collection_id=self._context.collection_for(command.category),
                    status_not_equals=(
                        None if command.include_terminal else profile.terminal_status
                    ),
                    page_size=self._config.matching.status_page_size,
                )
            )
        except BotError as e:
            log.warning("status_query_failed", category=profile.key, error=str(e))
            text = self._failure_text(f"Failed to fetch {profile.key} requests", e)
            outcome = Outcome.ERROR
        else:
            log.info("status_reported", category=profile.key, records=len(records))
            text = render_status(
                records,
                command.category,
                command.include_terminal,
                self._context.bot_name,
            )
            outcome = Outcome.STATUS_REPORTED

        if provisional_ts is None:
            await self._reply(runner, event, text)
        else:
            await self._overwrite(runner, event, provisional_ts, text)
        return outcome

    # =========================================================================
    # Update
    # =========================================================================

    async def _handle_update(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        command: UpdateCommand,
    ) -> Outcome:
        profile = get_profile(command.category)
        new_status = profile.canonical_status(command.new_status_text)

        if new_status is None:
            log.info("invalid_status", category=profile.key, status=command.new_status_text)
            await self._reply(
                runner, event, render_invalid_status(command.new_status_text, command.category)
            )
            return Outcome.INVALID_STATUS

        matcher = RecordMatcher(runner, page_size=self._config.matching.page_size)
        try:
            matches = await matcher.find(
                self._context.collection_for(command.category), command.query
            )
            if not matches:
                log.info("no_matching_record", query=command.query)
                await self._reply(runner, event, render_no_match(command.query, command.category))
                return Outcome.NO_MATCH

            if len(matches) > 1:
                log.info("ambiguous_match", query=command.query, candidates=len(matches))
                await self._reply(runner, event, render_candidates(matches, command.query))
                return Outcome.AMBIGUOUS_MATCH

            record = matches[0]
            await runner.run(StoreMutate(record_id=record.identifier, status=new_status))
        except BotError as e:
            log.warning("status_update_failed", category=profile.key, error=str(e))
            await self._reply(
                runner,
                event,
                self._failure_text(
                    f"Failed to update {profile.key} request status",
                    e,
                    not_found=ITEM_NOT_FOUND_SUFFIX,
                ),
            )
            return Outcome.ERROR

        log.info(
            "record_status_updated",
            record_id=record.identifier,
            old_status=record.status,
            new_status=new_status,
        )
        await self._reply(runner, event, render_updated(record.title, record.status, new_status))
        return Outcome.STATUS_UPDATED

    # =========================================================================
    # Create
    # =========================================================================

    async def _handle_create(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        command: CreateCommand,
    ) -> Outcome:
        profile = get_profile(command.category)
        thread_ts = event.reply_thread_ts
        collection_id = self._context.collection_for(command.category)

        try:
            messages: list[ThreadMessage] = await runner.run(
                FetchThread(channel_id=event.channel_id, root_ts=thread_ts)
            )
            if not messages:
                raise EmptyThreadError(EMPTY_THREAD_MESSAGE)

            root, replies = messages[0], messages[1:]
            body = await self._build_body(runner, event.channel_id, root, replies)
            new_record = RecordCreate(
                title=build_title(root.text, profile),
                status=profile.initial_status,
                source_reference=source_reference(event.channel_id, thread_ts),
                created_at=root.timestamp,
                body=body,
            )

            async def create_once() -> RequestRecord:
                try:
                    created: RequestRecord = await runner.run(
                        StoreCreate(collection_id=collection_id, record=new_record)
                    )
                except StoreError as e:
                    log.warning("create_attempt_failed", error=str(e))
                    raise
                return created

            record = await call_with_retry(
                create_once,
                max_attempts=self._config.retry.max_attempts,
                delay=self._config.retry.delay,
                retry_on=(StoreError,),
            )
        except BotError as e:
            log.warning("record_create_failed", category=profile.key, error=str(e))
            await self._reply(
                runner,
                event,
                self._failure_text(f"Failed to save {profile.key} request", e),
            )
            return Outcome.ERROR

        log.info("record_created", record_id=record.identifier, category=profile.key)
        await self._reply(runner, event, render_created(command.category, record.identifier))
        return Outcome.RECORD_CREATED

    async def _build_body(
        self,
        runner: EffectRunner,
        channel_id: str,
        root: ThreadMessage,
        replies: Sequence[ThreadMessage],
    ) -> tuple[str, ...]:
        """Assemble the transcript and footer paragraphs for a new record."""
        kept = [reply for reply in replies if reply.text and not self._mentions_bot(reply.text)]

        user_ids = list(dict.fromkeys([root.user_id, *(reply.user_id for reply in kept)]))
        names, channel_name = await asyncio.gather(
            asyncio.gather(*(self._display_name(runner, user_id) for user_id in user_ids)),
            self._channel_name(runner, channel_id),
        )
        name_by_user = dict(zip(user_ids, names, strict=True))

        transcript = render_transcript(
            name_by_user[root.user_id],
            root.text,
            [(name_by_user[reply.user_id], reply.text) for reply in kept],
            has_replies=bool(replies),
        )
        return (transcript, render_footer(channel_name, root.timestamp))

    def _mentions_bot(self, text: str) -> bool:
        if f"@{self._context.bot_name}" in text:
            return True
        bot_user_id = self._context.chat.bot_user_id
        return bool(bot_user_id) and f"<@{bot_user_id}>" in text

    async def _display_name(self, runner: EffectRunner, user_id: str) -> str:
        try:
            name: str = await runner.run(LookupUser(user_id=user_id))
        except TransportError as e:
            log.warning("user_lookup_failed", user_id=user_id, error=str(e))
            return UNKNOWN_USER
        return name

    async def _channel_name(self, runner: EffectRunner, channel_id: str) -> str:
        try:
            name: str = await runner.run(LookupChannel(channel_id=channel_id))
        except TransportError as e:
            log.warning("channel_lookup_failed", channel_id=channel_id, error=str(e))
            return channel_id
        return name

    # =========================================================================
    # Replies
    # =========================================================================

    def _failure_text(
        self,
        prefix: str,
        error: Exception,
        not_found: str = DATABASE_NOT_FOUND_SUFFIX,
    ) -> str:
        """Map an error to the user-facing "❌ {prefix}: {reason}" reply."""
        if isinstance(error, OperationTimeoutError):
            return render_failure(prefix, TIMEOUT_SUFFIX)
        if isinstance(error, StoreNotFoundError):
            return render_failure(prefix, not_found)
        if isinstance(error, EmptyThreadError):
            return render_failure(prefix, EMPTY_THREAD_MESSAGE)

        message = str(error)
        created_property = self._created_property
        if created_property and created_property in message:
            return render_failure(
                prefix,
                f"'{created_property}' property issue. "
                "Please add this property to your Notion database.",
            )
        return render_failure(prefix, message)

    @property
    def _created_property(self) -> str | None:
        notion = self._config.store.notion
        return notion.created_property if notion else None

    async def _post_quietly(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        text: str,
    ) -> str | None:
        """Post a reply, returning its handle or None if posting failed."""
        try:
            ts: str = await runner.run(
                PostMessage(channel_id=event.channel_id, text=text, thread_ts=event.reply_thread_ts)
            )
        except TransportError as e:
            log.error("send_reply_failed", error=str(e))
            return None
        return ts

    async def _reply(self, runner: EffectRunner, event: MentionEvent, text: str) -> None:
        """Post a reply in the event's thread, retrying once on failure."""
        if await self._post_quietly(runner, event, text) is None:
            log.info("retrying_reply")
            await self._post_quietly(runner, event, text)

    async def _overwrite(
        self,
        runner: EffectRunner,
        event: MentionEvent,
        message_ts: str,
        text: str,
    ) -> None:
        """Replace a provisional reply, falling back to a fresh post."""
        try:
            await runner.run(
                UpdateMessage(channel_id=event.channel_id, message_ts=message_ts, text=text)
            )
        except TransportError as e:
            log.warning("update_reply_failed", error=str(e))
            await self._post_quietly(runner, event, text)
