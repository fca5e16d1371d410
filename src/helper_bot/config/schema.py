"""Pydantic models for configuration schema."""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.category import Category

NOTION_ID_PATTERN = re.compile(r"^[a-f0-9]{32}$")


class SlackConfig(BaseModel):
    """Slack-specific configuration."""

    bot_token: str
    signing_secret: str = ""
    app_token: str | None = None
    mode: Literal["http", "socket"] = "http"
    bot_name: str = "helperbot"
    unfurl_links: bool = False

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate Slack bot token format."""
        if not v.startswith("xoxb-"):
            raise ValueError("Bot token must start with xoxb-")
        return v

    @field_validator("app_token")
    @classmethod
    def validate_app_token(cls, v: str | None) -> str | None:
        """Validate Slack app token format."""
        if v is not None and not v.startswith("xapp-"):
            raise ValueError("App token must start with xapp-")
        return v

    @field_validator("bot_name")
    @classmethod
    def strip_at_sign(cls, v: str) -> str:
        """Accept "@helperbot" as well as "helperbot"."""
        name = v.strip().lstrip("@")
        if not name:
            raise ValueError("Bot name must not be empty")
        return name

    @model_validator(mode="after")
    def check_mode_credentials(self) -> "SlackConfig":
        """Each connection mode needs its own credential."""
        if self.mode == "http" and not self.signing_secret:
            raise ValueError("HTTP mode requires signing_secret to verify requests")
        if self.mode == "socket" and not self.app_token:
            raise ValueError("Socket mode requires app_token")
        return self


class NotionDatabases(BaseModel):
    """Notion database id per request category."""

    feature: str
    bd: str

    @field_validator("feature", "bd")
    @classmethod
    def normalize_database_id(cls, v: str) -> str:
        """Strip dashes and validate the 32-hex Notion id shape."""
        normalized = v.replace("-", "").strip().lower()
        if not NOTION_ID_PATTERN.match(normalized):
            raise ValueError(f"Invalid Notion database id: {v}")
        return normalized

    def for_category(self, category: Category) -> str:
        """Return the database id backing a category."""
        if category == Category.BUSINESS_DEVELOPMENT:
            return self.bd
        return self.feature


class NotionConfig(BaseModel):
    """Notion-specific configuration."""

    api_key: str
    databases: NotionDatabases
    base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    timeout: float = Field(10.0, ge=1.0, le=60.0)
    title_property: str = "Title"
    status_property: str = "Status"
    source_property: str = "Slack URL"
    created_property: str = "Date Created"


class ServerConfig(BaseModel):
    """HTTP listener configuration for the Slack events endpoint."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(3000, ge=1, le=65535)
    path: str = "/slack/events"
    health_path: str = "/test"


class MatchingConfig(BaseModel):
    """Record lookup configuration."""

    page_size: int = Field(5, ge=1, le=10)
    status_page_size: int = Field(10, ge=1, le=10)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/helper-bot/bot.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class RuntimeConfig(BaseModel):
    """Runtime configuration."""

    max_concurrent: int = Field(5, ge=1, le=50, description="Max concurrent mention handling")
    store_timeout: float = Field(
        10.0, ge=1.0, le=60.0, description="Bound on each record store call in seconds"
    )


class RetryConfig(BaseModel):
    """Retry configuration for record creation."""

    max_attempts: int = Field(3, ge=1, le=10)
    delay: float = Field(1.0, ge=0.0, le=30.0)


class ChatConfig(BaseModel):
    """Chat provider configuration."""

    provider: Literal["slack"]
    slack: SlackConfig | None = None


class StoreConfig(BaseModel):
    """Record store configuration."""

    provider: Literal["notion"]
    notion: NotionConfig | None = None


class BotConfig(BaseSettings):
    """Root configuration for the helper bot."""

    chat: ChatConfig
    store: StoreConfig
    server: ServerConfig = ServerConfig()
    matching: MatchingConfig = MatchingConfig()
    logging: LoggingConfig = LoggingConfig()
    runtime: RuntimeConfig = RuntimeConfig()
    retry: RetryConfig = RetryConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        frozen=True,
    )
