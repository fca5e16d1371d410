"""Health check utilities for the helper bot.

This module provides health check capabilities:
- Configuration sanity
- Slack credential presence for the configured connection mode
- Reachability of each category's Notion database
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from helper_bot.config.schema import BotConfig
    from helper_bot.interfaces.store import RecordStore

log = structlog.get_logger()


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Overall health report."""

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                    "details": c.details,
                }
                for c in self.checks
            ],
            "details": self.details,
        }


class HealthChecker:
    """Performs health checks on the bot's dependencies.

    Example:
        checker = HealthChecker(config)
        report = await checker.run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(self, config: BotConfig, store: RecordStore | None = None) -> None:
        """Initialize the health checker.

        Args:
            config: Application configuration
            store: Record store to probe. If None, a Notion adapter is
                created from config and closed after the checks.
        """
        self._config = config
        self._store = store

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks concurrently and return a report."""
        log.info("health_check_start")
        start_time = datetime.now(UTC)

        checks: list[CheckResult] = []

        results = await asyncio.gather(
            self._check_config(),
            self._check_slack_tokens(),
            self._check_notion_databases(),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                checks.append(
                    CheckResult(
                        name="unknown",
                        status=HealthStatus.UNHEALTHY,
                        message=f"Check failed with exception: {result}",
                    )
                )
            else:
                checks.append(result)

        if all(c.status == HealthStatus.HEALTHY for c in checks):
            overall_status = HealthStatus.HEALTHY
            healthy = True
        elif any(c.status == HealthStatus.UNHEALTHY for c in checks):
            overall_status = HealthStatus.UNHEALTHY
            healthy = False
        else:
            overall_status = HealthStatus.DEGRADED
            healthy = True

        report = HealthReport(
            healthy=healthy,
            status=overall_status,
            timestamp=start_time,
            checks=checks,
            details={
                "total_checks": len(checks),
                "healthy_checks": sum(1 for c in checks if c.status == HealthStatus.HEALTHY),
                "degraded_checks": sum(1 for c in checks if c.status == HealthStatus.DEGRADED),
                "unhealthy_checks": sum(1 for c in checks if c.status == HealthStatus.UNHEALTHY),
            },
        )

        log.info(
            "health_check_complete",
            healthy=healthy,
            status=overall_status.value,
            checks_run=len(checks),
        )

        return report

    async def _check_config(self) -> CheckResult:
        """Check that both providers have their sections."""
        if not self._config.chat.slack:
            return CheckResult(
                name="config",
                status=HealthStatus.UNHEALTHY,
                message="Slack configuration missing",
            )

        if not self._config.store.notion:
            return CheckResult(
                name="config",
                status=HealthStatus.UNHEALTHY,
                message="Notion configuration missing",
            )

        return CheckResult(
            name="config",
            status=HealthStatus.HEALTHY,
            message="Configuration valid",
            details={
                "chat_provider": self._config.chat.provider,
                "store_provider": self._config.store.provider,
                "slack_mode": self._config.chat.slack.mode,
            },
        )

    async def _check_slack_tokens(self) -> CheckResult:
        """Check Slack credential presence (not validity, which needs an API call)."""
        slack_config = self._config.chat.slack
        if not slack_config:
            return CheckResult(
                name="slack_tokens",
                status=HealthStatus.UNHEALTHY,
                message="Slack configuration missing",
            )

        if not slack_config.bot_token.startswith("xoxb-"):
            return CheckResult(
                name="slack_tokens",
                status=HealthStatus.UNHEALTHY,
                message="Invalid bot token format",
            )

        if slack_config.mode == "socket" and not slack_config.app_token:
            return CheckResult(
                name="slack_tokens",
                status=HealthStatus.UNHEALTHY,
                message="Socket mode requires an app token",
            )

        if slack_config.mode == "http" and not slack_config.signing_secret:
            return CheckResult(
                name="slack_tokens",
                status=HealthStatus.UNHEALTHY,
                message="HTTP mode requires a signing secret",
            )

        return CheckResult(
            name="slack_tokens",
            status=HealthStatus.HEALTHY,
            message="Slack credentials configured",
            details={
                "bot_token_present": True,
                "signing_secret_present": bool(slack_config.signing_secret),
                "app_token_present": bool(slack_config.app_token),
            },
        )

    async def _check_notion_databases(self) -> CheckResult:
        """Check that every category's database can be retrieved."""
        notion_config = self._config.store.notion
        if not notion_config:
            return CheckResult(
                name="notion_databases",
                status=HealthStatus.UNHEALTHY,
                message="Notion configuration missing",
            )

        store = self._store
        owns_store = store is None
        if store is None:
            from helper_bot.adapters.store.notion import NotionAdapter

            store = NotionAdapter(notion_config)

        databases = notion_config.databases.model_dump()
        start = time.monotonic()
        try:
            results = await asyncio.gather(
                *(store.check_collection(database_id) for database_id in databases.values()),
                return_exceptions=True,
            )
        finally:
            if owns_store:
                await store.close()
        latency = (time.monotonic() - start) * 1000

        details: dict[str, Any] = {}
        for key, result in zip(databases, results, strict=True):
            if isinstance(result, BaseException):
                details[key] = f"unreachable: {result}"
            else:
                details[key] = f"ok: {result}"

        failures = sum(1 for result in results if isinstance(result, BaseException))
        if failures == 0:
            status, message = HealthStatus.HEALTHY, "All Notion databases reachable"
        elif failures < len(results):
            status, message = HealthStatus.DEGRADED, "Some Notion databases unreachable"
        else:
            status, message = HealthStatus.UNHEALTHY, "No Notion database reachable"

        return CheckResult(
            name="notion_databases",
            status=status,
            message=message,
            latency_ms=latency,
            details=details,
        )
