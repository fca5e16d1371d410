"""Bot lifecycle: startup, mention dispatch, and graceful shutdown.

This module implements the Bot class that serves as the main entry point
for the helper bot. It:
- Connects the chat adapter and checks the record store at startup
- Hands each mention to the orchestrator with concurrency control
- Handles graceful shutdown on signals (SIGTERM, SIGINT)
- Keeps simple processing statistics
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
from typing import TYPE_CHECKING

import structlog

from helper_bot.core.context import BotContext
from helper_bot.core.orchestrator import RequestOrchestrator
from helper_bot.models.message import HandlingResult, MentionEvent, Outcome

if TYPE_CHECKING:
    from helper_bot.config.schema import BotConfig
    from helper_bot.interfaces.chat import ChatProvider
    from helper_bot.interfaces.store import RecordStore

log = structlog.get_logger()


class BotLifecycleError(Exception):
    """Base exception for bot lifecycle errors."""


class StartupError(BotLifecycleError):
    """Failed to start the bot."""


class Bot:
    """Runs the orchestrator for every mention the chat adapter delivers.

    Each mention is handled in its own task. An asyncio.Semaphore bounds how
    many are handled at once (runtime.max_concurrent).

    Example:
        bot = await create_bot(config)
        await bot.start()  # Blocks until shutdown signal
    """

    DEFAULT_SHUTDOWN_TIMEOUT = 30

    def __init__(
        self,
        context: BotContext,
        orchestrator: RequestOrchestrator | None = None,
    ) -> None:
        """Initialize the Bot.

        Args:
            context: Configuration and collaborators
            orchestrator: Mention handler (built from context if omitted)
        """
        self._context = context
        self._chat = context.chat
        self._store = context.store
        self._orchestrator = orchestrator or RequestOrchestrator(context)

        # Concurrency control
        self._max_concurrent = context.config.runtime.max_concurrent
        self._semaphore: asyncio.Semaphore | None = None
        self._active_tasks: set[asyncio.Task[HandlingResult | None]] = set()

        # Lifecycle state
        self._running = False
        self._shutdown_event: asyncio.Event | None = None

        # Statistics
        self._mentions_handled = 0
        self._errors_count = 0

    @property
    def is_running(self) -> bool:
        """Return True if the bot is currently running."""
        return self._running

    @property
    def stats(self) -> dict[str, int]:
        """Return processing statistics."""
        return {
            "mentions_handled": self._mentions_handled,
            "errors_count": self._errors_count,
            "active_tasks": len(self._active_tasks),
        }

    async def start(self) -> None:
        """Start the bot and begin handling mentions.

        This method:
        1. Connects to the chat provider
        2. Checks that every category's collection is reachable (non-fatal)
        3. Sets up signal handlers
        4. Starts the mention listening loop
        5. Blocks until shutdown is triggered

        Raises:
            StartupError: If startup fails
        """
        if self._running:
            log.warning("bot_already_running")
            return

        log.info(
            "bot_starting",
            config=self._context.config.model_dump(exclude={"chat", "store"}, mode="json"),
        )

        try:
            self._semaphore = asyncio.Semaphore(self._max_concurrent)
            self._shutdown_event = asyncio.Event()

            log.info("connecting_to_chat_provider")
            await self._chat.connect()
            log.info("chat_provider_connected", bot_user_id=self._chat.bot_user_id)

            await self.check_store()

            self._setup_signal_handlers()

            self._running = True
            log.info("bot_started")

            await self._listen_for_mentions()

        except Exception as e:
            log.exception("bot_startup_failed", error=str(e))
            await self._cleanup()
            raise StartupError(f"Failed to start bot: {e}") from e

    async def stop(self) -> None:
        """Gracefully stop the bot.

        Waits for in-flight mentions (with timeout), then disconnects the
        chat provider and closes the store client.
        """
        if not self._running:
            log.warning("bot_not_running")
            return

        log.info("bot_stopping", active_tasks=len(self._active_tasks))

        if self._shutdown_event:
            self._shutdown_event.set()

        await self._wait_for_tasks()
        await self._cleanup()

        self._running = False
        log.info(
            "bot_stopped",
            mentions_handled=self._mentions_handled,
            errors=self._errors_count,
        )

    async def check_store(self) -> dict[str, bool]:
        """Log whether each category's collection is reachable.

        Failures are logged, never raised: the bot still starts and reports
        store errors per mention.

        Returns:
            Category key -> reachable
        """
        results: dict[str, bool] = {}
        for category, collection_id in self._context.collections.items():
            try:
                title = await self._store.check_collection(collection_id)
            except Exception as e:
                log.warning(
                    "store_collection_unreachable",
                    category=category.value,
                    collection_id=collection_id,
                    error=str(e),
                )
                results[category.value] = False
            else:
                log.info(
                    "store_collection_reachable",
                    category=category.value,
                    collection_id=collection_id,
                    title=title,
                )
                results[category.value] = True
        return results

    async def process_mention(self, event: MentionEvent) -> HandlingResult | None:
        """Handle a single mention within the concurrency limit.

        Args:
            event: Mention to handle

        Returns:
            HandlingResult, or None if the bot has not been started
        """
        if not self._semaphore:
            return None

        async with self._semaphore:
            try:
                result = await self._orchestrator.handle(event)
            except Exception as e:
                log.exception("mention_processing_error", event_ts=event.event_ts, error=str(e))
                self._errors_count += 1
                return None

            self._mentions_handled += 1
            if result.outcome == Outcome.ERROR:
                self._errors_count += 1
            return result

    async def _listen_for_mentions(self) -> None:
        """Listen for mentions until shutdown is triggered."""
        log.info("starting_mention_listener")

        try:
            async for event in self._chat.listen():
                if self._shutdown_event and self._shutdown_event.is_set():
                    log.info("shutdown_signal_received_stopping_listener")
                    break

                task = asyncio.create_task(
                    self.process_mention(event),
                    name=f"mention_{event.event_ts}",
                )
                self._active_tasks.add(task)
                task.add_done_callback(self._active_tasks.discard)

        except asyncio.CancelledError:
            log.info("mention_listener_cancelled")

    async def _wait_for_tasks(self) -> None:
        """Wait for active tasks to complete with timeout."""
        if not self._active_tasks:
            return

        log.info("waiting_for_active_tasks", count=len(self._active_tasks))

        done, pending = await asyncio.wait(
            self._active_tasks,
            timeout=self.DEFAULT_SHUTDOWN_TIMEOUT,
        )

        if pending:
            log.warning("cancelling_pending_tasks", count=len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        log.info("tasks_completed", completed=len(done), cancelled=len(pending))

    async def _cleanup(self) -> None:
        """Clean up resources."""
        log.debug("cleaning_up_resources")

        try:
            await self._chat.disconnect()
            log.info("chat_provider_disconnected")
        except Exception as e:
            log.warning("chat_disconnect_error", error=str(e))

        try:
            await self._store.close()
        except Exception as e:
            log.warning("store_close_error", error=str(e))

        self._active_tasks.clear()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(
                    sig,
                    lambda s: asyncio.create_task(self._handle_signal(s)),
                    sig,
                )
                log.debug("signal_handler_registered", signal=sig.name)

    async def _handle_signal(self, sig: signal.Signals) -> None:
        log.info("received_signal", signal=sig.name)
        await self.stop()


async def create_bot(config: BotConfig) -> Bot:
    """Factory function to create a Bot with all dependencies.

    Instantiates the adapters named by the configuration, bundles them into
    a BotContext, and creates the Bot.

    Args:
        config: Application configuration

    Returns:
        Configured Bot instance

    Raises:
        ValueError: If configuration is invalid
    """
    chat = _create_chat_adapter(config)
    store = _create_store_adapter(config)
    context = BotContext.build(config, chat, store)
    return Bot(context)


def _create_chat_adapter(config: BotConfig) -> ChatProvider:
    """Create a chat adapter based on configuration.

    Raises:
        ValueError: If provider is not supported
    """
    provider = config.chat.provider

    if provider == "slack":
        if not config.chat.slack:
            raise ValueError("Slack configuration required when provider is 'slack'")
        # Import here to avoid loading unnecessary dependencies
        from helper_bot.adapters.chat.slack import SlackAdapter

        return SlackAdapter(config.chat.slack, config.server)

    raise ValueError(f"Unsupported chat provider: {provider}")


def _create_store_adapter(config: BotConfig) -> RecordStore:
    """Create a record store adapter based on configuration.

    Raises:
        ValueError: If provider is not supported
    """
    provider = config.store.provider

    if provider == "notion":
        if not config.store.notion:
            raise ValueError("Notion configuration required when provider is 'notion'")
        from helper_bot.adapters.store.notion import NotionAdapter

        return NotionAdapter(config.store.notion)

    raise ValueError(f"Unsupported store provider: {provider}")
