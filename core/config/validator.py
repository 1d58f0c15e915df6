"""
Configuration validation at application startup.

Checks the settings that would otherwise only fail on the first request,
with messages that say what to change.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List
from urllib.parse import urlparse

from .settings import Settings, Environment

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a configuration validation check"""
    is_valid: bool
    component: str
    message: str
    severity: str = "error"  # "error", "warning", "info"


class ConfigurationValidator:
    """Validates settings before any network traffic starts."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.validation_results: List[ValidationResult] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            bool: True if no check reported an error
        """
        self.validation_results = []
        self._validate_api_settings()
        self._validate_polling_settings()
        self._validate_logging_settings()

        errors = [r for r in self.validation_results if r.severity == "error"]
        for result in self.validation_results:
            if result.severity == "error":
                logger.error(f"{result.component}: {result.message}")
            elif result.severity == "warning":
                logger.warning(f"{result.component}: {result.message}")

        return not errors

    def _add(self, is_valid: bool, component: str, message: str, severity: str = "error"):
        self.validation_results.append(ValidationResult(is_valid, component, message, severity))

    def _validate_api_settings(self):
        parsed = urlparse(self.settings.mt5_api.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            self._add(False, "mt5_api", f"MT5_API__BASE_URL is not an http(s) URL: {self.settings.mt5_api.base_url!r}")
        elif parsed.scheme == "http" and self.settings.environment == Environment.PRODUCTION:
            self._add(False, "mt5_api", "Passwords are sent as query parameters; use https in production",
                      severity="warning")

        for name in ("login_path", "summary_path", "details_path"):
            path = getattr(self.settings.mt5_api, name)
            if not path.startswith("/"):
                self._add(False, "mt5_api", f"MT5_API__{name.upper()} must start with '/': {path!r}")

    def _validate_polling_settings(self):
        interval = self.settings.polling.interval_seconds
        timeout = self.settings.mt5_api.request_timeout_seconds
        if timeout > interval * 30:
            self._add(False, "polling",
                      f"request timeout ({timeout}s) is far longer than the poll interval ({interval}s); "
                      "slow requests will hold back ticks", severity="warning")

    def _validate_logging_settings(self):
        level = self.settings.logging.level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            self._add(False, "logging", f"Unknown log level: {self.settings.logging.level!r}")

        if self.settings.logging.file_enabled:
            logs_dir = Path(self.settings.logs_dir)
            parent = logs_dir if logs_dir.exists() else logs_dir.parent
            if not os.access(parent, os.W_OK):
                self._add(False, "logging", f"Logs directory is not writable: {logs_dir}")


def validate_startup_configuration(settings: Settings) -> bool:
    """Run all configuration checks; False means the app should not start."""
    return ConfigurationValidator(settings).validate_all()
