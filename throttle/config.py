"""
Throttle Configuration Handler

Explicit configuration object for one throttled upload.
Provides defaults and validation.

Precedence (later wins):
1. config/settings.py (environment / .env)
2. YAML file (config/throttle.yaml if it exists)
3. Keyword overrides (command line)
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

import yaml

from config.settings import (
    LIMIT_BETWEEN,
    LIMIT_CLOCK_FORMAT,
    PROGRESS_INTERVAL,
    PROGRESS_QUIET,
    RATE_LIMIT_KBPS,
    THROTTLE_CONFIG_PATH,
    THROTTLE_WAIT_TIMEOUT,
)
from throttle.constants import FALSE_STRINGS, TRUE_STRINGS
from throttle.errors import ConfigurationError
from throttle.models.time_window import TimeWindow
from throttle.models.transfer_status import TransferStatus
from throttle.reporting.progress_reporter import ProgressReporter
from throttle.transport.limiting_transport import LimitingTransport


class ThrottleConfig:
    """
    Throttle configuration with YAML file support.

    Usage:
        config = ThrottleConfig(overrides={"rate_limit_kbps": 8000})
        window = config.build_time_window()

    Example config/throttle.yaml:
        rate_limit_kbps: 8000
        limit_between: "09:00-17:00"
        progress_interval: 2.0
    """

    KNOWN_KEYS = (
        "rate_limit_kbps",
        "limit_between",
        "clock_format",
        "progress_interval",
        "quiet",
        "wait_timeout",
    )

    def __init__(
        self,
        config_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (None = use default)
            overrides: Values that win over file and defaults (None values ignored)

        Raises:
            ConfigurationError: If any value is invalid
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path or THROTTLE_CONFIG_PATH)

        self._config = self._load_config()
        if overrides:
            self._config.update(
                {key: value for key, value in overrides.items() if value is not None},
            )

        self.validate()

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values from settings"""
        return {
            "rate_limit_kbps": RATE_LIMIT_KBPS,
            "limit_between": LIMIT_BETWEEN,
            "clock_format": LIMIT_CLOCK_FORMAT,
            "progress_interval": PROGRESS_INTERVAL,
            "quiet": PROGRESS_QUIET,
            "wait_timeout": THROTTLE_WAIT_TIMEOUT,
        }

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file on top of defaults"""
        config = self._get_defaults()

        if not self.config_path.exists():
            self.logger.debug(
                f"Config file not found at {self.config_path}. Using defaults.",
            )
            return config

        try:
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config from {self.config_path}: {e}",
            ) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a mapping",
            )

        unknown = set(file_config) - set(self.KNOWN_KEYS)
        if unknown:
            self.logger.warning(
                f"Ignoring unknown config keys in {self.config_path}: "
                f"{sorted(unknown)}",
            )

        config.update(
            {key: value for key, value in file_config.items() if key in self.KNOWN_KEYS},
        )
        self.logger.info(f"Loaded throttle config from {self.config_path}")
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: On the first invalid value
        """
        try:
            self._config["rate_limit_kbps"] = int(self._config["rate_limit_kbps"])
            self._config["progress_interval"] = float(
                self._config["progress_interval"],
            )
            self._config["wait_timeout"] = float(self._config["wait_timeout"] or 0)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric config value: {e}") from e

        if self.rate_limit_kbps < 0:
            raise ConfigurationError(
                f"rate_limit_kbps cannot be negative: {self.rate_limit_kbps}",
            )

        if self.progress_interval <= 0:
            raise ConfigurationError(
                f"progress_interval must be positive: {self.progress_interval}",
            )

        if self.wait_timeout < 0:
            raise ConfigurationError(
                f"wait_timeout cannot be negative: {self.wait_timeout}",
            )

        self._config["quiet"] = self._parse_flag("quiet", self._config["quiet"])

        # Fail now, before any bytes are sent
        self.build_time_window()

    @staticmethod
    def _parse_flag(key: str, value: Any) -> bool:
        """
        Coerce a boolean setting.

        YAML strings like "false" or "off" are read the same way
        config/settings.py reads the environment.

        Raises:
            ConfigurationError: If a string isn't a known boolean spelling
        """
        if not isinstance(value, str):
            return bool(value)

        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ConfigurationError(f"{key} must be a boolean, got {value!r}")

    def build_time_window(self) -> TimeWindow:
        """
        Parse the configured window.

        Returns:
            Parsed TimeWindow, or a zero window if none configured

        Raises:
            ConfigurationError: If the window literal is malformed
        """
        if not self.limit_between:
            return TimeWindow()
        return TimeWindow.parse(self.limit_between, self.clock_format)

    def create_transport(self, http: Any, file_size: int) -> LimitingTransport:
        """
        Build a LimitingTransport for one upload.

        Args:
            http: Downstream httplib2.Http-like object
            file_size: Expected payload size in bytes

        Returns:
            Transport throttled per this configuration
        """
        return LimitingTransport(
            http,
            file_size=file_size,
            rate_limit_kbps=self.rate_limit_kbps,
            window=self.build_time_window(),
            wait_timeout=self.wait_timeout,
        )

    def create_reporter(
        self,
        status_source: Callable[[], TransferStatus],
        output: Optional[TextIO] = None,
    ) -> ProgressReporter:
        """Build a ProgressReporter using the configured interval and mode"""
        return ProgressReporter(
            status_source,
            interval=self.progress_interval,
            quiet=self.quiet,
            output=output,
        )

    # =========================================================================
    # PROPERTY ACCESSORS
    # =========================================================================

    @property
    def rate_limit_kbps(self) -> int:
        """Bandwidth cap in kbps (0 = unlimited)"""
        return self._config["rate_limit_kbps"]

    @property
    def limit_between(self) -> str:
        """Window literal, empty = all day"""
        return self._config["limit_between"] or ""

    @property
    def clock_format(self) -> str:
        """strptime format of the window's clock times"""
        return self._config["clock_format"]

    @property
    def progress_interval(self) -> float:
        """Seconds between progress lines"""
        return self._config["progress_interval"]

    @property
    def quiet(self) -> bool:
        """Only print progress on demand"""
        return self._config["quiet"]

    @property
    def wait_timeout(self) -> float:
        """Longest single throttle wait in seconds (0 = unbounded)"""
        return self._config["wait_timeout"]

    def to_dict(self) -> Dict[str, Any]:
        """Get all configuration as dictionary"""
        return self._config.copy()
