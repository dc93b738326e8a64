"""
Startup checks module for validating configuration before connecting.

This module validates:
- Discord bot token
- The guild verification configs file
- The optional config.yaml theme file
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import yaml

from ..config import (
    DISCORD_BOT_TOKEN,
    SERVER_CONFIGS_PATH,
    CONFIG_YAML_PATH,
)
from .guild_config import GuildConfig
from .logging import logger


class CheckStatus(Enum):
    """Status of a startup check."""
    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"
    SKIP = "SKIP"


@dataclass
class CheckResult:
    """Result of a single startup check."""
    name: str
    status: CheckStatus
    message: str
    details: Optional[str] = None


class StartupChecker:
    """Performs startup checks to validate configuration."""

    CRITICAL_CHECKS = ["Discord Bot Token", "Server Configs"]

    def __init__(self):
        """Initialize the startup checker."""
        self.results: List[CheckResult] = []

    def _add_result(
        self,
        name: str,
        status: CheckStatus,
        message: str,
        details: Optional[str] = None
    ) -> CheckResult:
        """Add a check result to the results list."""
        result = CheckResult(name=name, status=status, message=message, details=details)
        self.results.append(result)
        return result

    def check_discord_token(self) -> CheckResult:
        """Check if Discord bot token is configured."""
        if not DISCORD_BOT_TOKEN:
            return self._add_result(
                name="Discord Bot Token",
                status=CheckStatus.FAIL,
                message="DISCORD_BOT_TOKEN environment variable is not set",
                details="Set DISCORD_BOT_TOKEN in your .env file"
            )

        # Basic token format validation (Discord tokens have a specific format)
        if len(DISCORD_BOT_TOKEN) < 50:
            return self._add_result(
                name="Discord Bot Token",
                status=CheckStatus.WARN,
                message="Discord token seems unusually short",
                details="Token may be invalid - verify in Discord Developer Portal"
            )

        return self._add_result(
            name="Discord Bot Token",
            status=CheckStatus.PASS,
            message="Discord bot token is configured"
        )

    def check_server_configs(self) -> CheckResult:
        """Check that the guild configs file is absent or valid."""
        if not SERVER_CONFIGS_PATH.exists():
            return self._add_result(
                name="Server Configs",
                status=CheckStatus.WARN,
                message=f"{SERVER_CONFIGS_PATH.name} not found, no guild has verification configured",
                details="Run /setupverify in a server to configure it"
            )

        try:
            with open(SERVER_CONFIGS_PATH, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return self._add_result(
                name="Server Configs",
                status=CheckStatus.FAIL,
                message=f"Cannot read {SERVER_CONFIGS_PATH}: {type(e).__name__}: {e}",
                details="Fix or remove the file before starting the bot"
            )

        if not isinstance(data, dict):
            return self._add_result(
                name="Server Configs",
                status=CheckStatus.FAIL,
                message=f"{SERVER_CONFIGS_PATH.name} must contain a JSON object keyed by guild ID"
            )

        malformed = [
            guild_id for guild_id, record in data.items()
            if GuildConfig.from_record(guild_id, record) is None
        ]
        if malformed:
            return self._add_result(
                name="Server Configs",
                status=CheckStatus.WARN,
                message=f"Malformed records for guild(s): {', '.join(malformed)}",
                details="These guilds will behave as if verification were not configured"
            )

        return self._add_result(
            name="Server Configs",
            status=CheckStatus.PASS,
            message=f"{len(data)} guild(s) configured"
        )

    def check_config_yaml(self) -> CheckResult:
        """Check the optional config.yaml theme file."""
        if not CONFIG_YAML_PATH.exists():
            return self._add_result(
                name="Theme Config",
                status=CheckStatus.SKIP,
                message="config.yaml not found, using the default theme"
            )

        try:
            with open(CONFIG_YAML_PATH, 'r', encoding='utf-8') as f:
                yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            return self._add_result(
                name="Theme Config",
                status=CheckStatus.WARN,
                message=f"config.yaml could not be parsed: {type(e).__name__}",
                details="The default theme will be used"
            )

        return self._add_result(
            name="Theme Config",
            status=CheckStatus.PASS,
            message="config.yaml loaded"
        )

    def run_all_checks(self) -> List[CheckResult]:
        """Run all startup checks and return results."""
        self.results = []  # Reset results

        logger.info("=" * 60)
        logger.info("STARTUP CHECKS")
        logger.info("=" * 60)

        checks = [
            ("Discord Bot Token", self.check_discord_token),
            ("Server Configs", self.check_server_configs),
            ("Theme Config", self.check_config_yaml),
        ]

        for name, check_func in checks:
            try:
                result = check_func()
                self._log_result(result)
            except Exception as e:
                result = self._add_result(
                    name=name,
                    status=CheckStatus.FAIL,
                    message=f"Check failed with error: {type(e).__name__}: {e}"
                )
                self._log_result(result)

        # Summary
        logger.info("-" * 60)
        passed = sum(1 for r in self.results if r.status == CheckStatus.PASS)
        warned = sum(1 for r in self.results if r.status == CheckStatus.WARN)
        failed = sum(1 for r in self.results if r.status == CheckStatus.FAIL)
        skipped = sum(1 for r in self.results if r.status == CheckStatus.SKIP)

        summary = f"Results: {passed} passed"
        if warned:
            summary += f", {warned} warnings"
        if failed:
            summary += f", {failed} failed"
        if skipped:
            summary += f", {skipped} skipped"

        logger.info(summary)
        logger.info("=" * 60)

        return self.results

    def _log_result(self, result: CheckResult) -> None:
        """Log a check result with appropriate formatting."""
        status_icons = {
            CheckStatus.PASS: "✓",
            CheckStatus.WARN: "⚠",
            CheckStatus.FAIL: "✗",
            CheckStatus.SKIP: "○",
        }

        icon = status_icons.get(result.status, "?")
        log_msg = f"[{icon}] {result.name}: {result.message}"

        if result.status == CheckStatus.PASS:
            logger.info(log_msg)
        elif result.status == CheckStatus.WARN:
            logger.warning(log_msg)
            if result.details:
                logger.warning(f"    └─ {result.details}")
        elif result.status == CheckStatus.FAIL:
            logger.error(log_msg)
            if result.details:
                logger.error(f"    └─ {result.details}")
        else:  # SKIP
            logger.info(log_msg)
            if result.details:
                logger.info(f"    └─ {result.details}")

    def has_critical_failures(self) -> bool:
        """Check if any critical checks failed (Discord token, server configs)."""
        for result in self.results:
            if result.name in self.CRITICAL_CHECKS and result.status == CheckStatus.FAIL:
                return True
        return False

    def get_failures(self) -> List[CheckResult]:
        """Get all failed check results."""
        return [r for r in self.results if r.status == CheckStatus.FAIL]

    def get_warnings(self) -> List[CheckResult]:
        """Get all warning check results."""
        return [r for r in self.results if r.status == CheckStatus.WARN]


def run_startup_checks(exit_on_critical: bool = True) -> StartupChecker:
    """Run all startup checks and optionally exit on critical failures.

    Args:
        exit_on_critical: If True, raise an exception on critical failures.

    Returns:
        The StartupChecker instance with results.

    Raises:
        SystemExit: If exit_on_critical is True and critical checks fail.
    """
    checker = StartupChecker()
    checker.run_all_checks()

    if exit_on_critical and checker.has_critical_failures():
        failures = checker.get_failures()
        failure_names = [f.name for f in failures]
        raise SystemExit(
            f"Critical startup checks failed: {', '.join(failure_names)}. "
            "Please fix these issues before starting the bot."
        )

    return checker
