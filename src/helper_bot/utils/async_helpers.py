"""Async utility functions for resilient collaborator calls.

This module provides:
- The bot's exception hierarchy
- A bounded retry helper with a fixed backoff (tenacity)
- Timeout wrappers for async operations
"""

from __future__ import annotations

import asyncio
import builtins
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

log = structlog.get_logger()

T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class BotError(Exception):
    """Base exception for all bot errors."""


class TransportError(BotError):
    """A chat platform call failed."""


class StoreError(BotError):
    """A record store call failed."""


class StoreNotFoundError(StoreError):
    """The requested record or collection does not exist or is not shared."""


class OperationTimeoutError(BotError):
    """Operation timed out."""


class StoreTimeoutError(StoreError, OperationTimeoutError):
    """A record store call exceeded its time bound."""


class EmptyThreadError(BotError):
    """There were no messages to archive in the thread."""


# =============================================================================
# Retry Helpers
# =============================================================================


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "retrying_operation",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (StoreError,),
) -> T:
    """Await func() until it succeeds or attempts run out.

    The last exception is re-raised once attempts are exhausted.

    Args:
        func: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Maximum number of attempts, including the first.
        delay: Wait between attempts (seconds).
        retry_on: Tuple of exception types to retry on.

    Returns:
        The result of the first successful attempt.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await func()

    # AsyncRetrying with reraise=True never falls through
    raise AssertionError("unreachable")


# =============================================================================
# Timeout Utilities
# =============================================================================


async def with_timeout(
    coro: Awaitable[T],
    timeout: float,
    error_message: str | None = None,
    error_cls: type[OperationTimeoutError] = OperationTimeoutError,
) -> T:
    """Execute an awaitable with a timeout.

    Args:
        coro: The coroutine to execute.
        timeout: Timeout in seconds.
        error_message: Custom error message for timeout.
        error_cls: Exception raised on timeout.

    Returns:
        The result of the coroutine.

    Raises:
        OperationTimeoutError: If the operation times out (or error_cls).
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except builtins.TimeoutError as e:
        msg = error_message or f"Request timed out after {timeout}s"
        log.warning("operation_timeout", timeout=timeout)
        raise error_cls(msg) from e
