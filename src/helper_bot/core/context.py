"""Immutable runtime context shared by every mention handler."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from helper_bot.models.category import Category

if TYPE_CHECKING:
    from helper_bot.config.schema import BotConfig, NotionConfig, SlackConfig
    from helper_bot.interfaces.chat import ChatProvider
    from helper_bot.interfaces.store import RecordStore


@dataclass(frozen=True)
class BotContext:
    """Configuration plus the collaborators needed to handle a mention.

    Built once at startup by create_bot() and handed to the orchestrator.
    Nothing in it changes after construction.
    """

    config: BotConfig
    chat: ChatProvider
    store: RecordStore
    collections: Mapping[Category, str]

    @classmethod
    def build(cls, config: BotConfig, chat: ChatProvider, store: RecordStore) -> BotContext:
        """Create a context, deriving the category to collection map from config.

        Raises:
            ValueError: If the Notion store is not configured
        """
        databases = cls._notion_config(config).databases
        collections = MappingProxyType(
            {category: databases.for_category(category) for category in Category}
        )
        return cls(config=config, chat=chat, store=store, collections=collections)

    @staticmethod
    def _notion_config(config: BotConfig) -> NotionConfig:
        if config.store.notion is None:
            raise ValueError("Notion configuration required when provider is 'notion'")
        return config.store.notion

    @property
    def slack(self) -> SlackConfig:
        if self.config.chat.slack is None:
            raise ValueError("Slack configuration required when provider is 'slack'")
        return self.config.chat.slack

    @property
    def bot_name(self) -> str:
        return self.slack.bot_name

    def collection_for(self, category: Category) -> str:
        """Return the collection (database) id backing a category."""
        return self.collections[category]
