"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    BotConfig,
    ChatConfig,
    LoggingConfig,
    MatchingConfig,
    NotionConfig,
    NotionDatabases,
    RetryConfig,
    RuntimeConfig,
    ServerConfig,
    SlackConfig,
    StoreConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "BotConfig",
    # Top-level configs
    "ChatConfig",
    "StoreConfig",
    "ServerConfig",
    "MatchingConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "RetryConfig",
    # Provider-specific configs
    "SlackConfig",
    "NotionConfig",
    "NotionDatabases",
]
