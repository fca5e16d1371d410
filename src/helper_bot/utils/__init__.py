"""Utility functions and helpers.

This module provides various utilities for the helper bot:
- async_helpers: Exception hierarchy, retry and timeout helpers
- security: Secret redaction
- logging: Structured logging with secret sanitization
- health: Health check utilities
"""

from helper_bot.utils.async_helpers import (
    BotError,
    EmptyThreadError,
    OperationTimeoutError,
    StoreError,
    StoreNotFoundError,
    StoreTimeoutError,
    TransportError,
    call_with_retry,
    with_timeout,
)
from helper_bot.utils.health import (
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from helper_bot.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from helper_bot.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Errors
    "BotError",
    "EmptyThreadError",
    # Health
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    # Logging
    "LogFormat",
    "LogLevel",
    "OperationTimeoutError",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "StoreError",
    "StoreNotFoundError",
    "StoreTimeoutError",
    "TransportError",
    "bind_context",
    "call_with_retry",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    "with_timeout",
]
