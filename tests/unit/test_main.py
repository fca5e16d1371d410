"""Tests for the command line entry point."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from conftest import BD_DB, FEATURE_DB

from helper_bot.__main__ import main, parse_args, run_bot

CONFIG_YAML = f"""
chat:
  provider: slack
  slack:
    bot_token: xoxb-test-123
    signing_secret: signing
store:
  provider: notion
  notion:
    api_key: secret_test
    databases:
      feature: "{FEATURE_DB}"
      bd: "{BD_DB}"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config == Path("config/config.yaml")
        assert args.debug is False
        assert args.dry_run is False
        assert args.health_check is False
        assert args.format == "console"

    def test_flags(self) -> None:
        args = parse_args(["-c", "/etc/bot.yaml", "-d", "--dry-run", "--format", "json"])
        assert args.config == Path("/etc/bot.yaml")
        assert args.debug is True
        assert args.dry_run is True
        assert args.format == "json"


class TestRunBot:
    """Test run_bot exit codes."""

    async def test_dry_run_validates_config(self, config_file: Path) -> None:
        assert await run_bot(config_file, dry_run=True) == 0

    async def test_missing_config_file(self, tmp_path: Path) -> None:
        assert await run_bot(tmp_path / "missing.yaml", dry_run=True) == 1

    async def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("chat:\n  provider: slack\n")

        assert await run_bot(path, dry_run=True) == 1

    async def test_health_check_result_sets_exit_code(self, config_file: Path) -> None:
        report = MagicMock(healthy=False)
        with patch("helper_bot.utils.health.HealthChecker") as checker_cls:
            checker_cls.return_value.run_all_checks = AsyncMock(return_value=report)

            assert await run_bot(config_file, health_check=True) == 1

            report.healthy = True
            assert await run_bot(config_file, health_check=True) == 0

    async def test_starts_bot(self, config_file: Path) -> None:
        bot = MagicMock()
        bot.start = AsyncMock()
        with patch("helper_bot.core.bot.create_bot", AsyncMock(return_value=bot)):
            assert await run_bot(config_file) == 0

        bot.start.assert_awaited_once()

    async def test_startup_failure(self, config_file: Path) -> None:
        with patch("helper_bot.core.bot.create_bot", AsyncMock(side_effect=RuntimeError("boom"))):
            assert await run_bot(config_file) == 1


class TestMain:
    """Test the main() wrapper."""

    def test_main_dry_run(self, config_file: Path) -> None:
        assert main(["-c", str(config_file), "--dry-run"]) == 0
