"""Configuration management for jobs_history."""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from .exceptions import ConfigurationError
from .persistence.models import DEFAULT_TIME_PERIOD, MAX_ACCUMULATED_RECORDS, PAGE_SIZE
from .utils.validation_helpers import sanitize_time_period

logger = logging.getLogger(__name__)


_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off', '')


def _warn_invalid_env(env_var: str, value: str, kind: str, default) -> None:
    logger.warning(
        f"Ignoring {env_var}={value!r}: not a valid {kind}. Keeping {default!r}"
    )


def parse_bool_env(env_var: str, default: bool) -> bool:
    """Read a true/false, 1/0, yes/no or on/off flag from the environment."""
    raw = os.getenv(env_var)
    if raw is None:
        return default

    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    _warn_invalid_env(env_var, raw, "boolean", default)
    return default


def _parse_number_env(env_var: str, default, convert: Callable[[str], Any], kind: str):
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        _warn_invalid_env(env_var, raw, kind, default)
        return default


def parse_int_env(env_var: str, default: int) -> int:
    return _parse_number_env(env_var, default, int, "integer")


def parse_float_env(env_var: str, default: float) -> float:
    return _parse_number_env(env_var, default, float, "number")


def parse_optional_str_env(env_var: str, default: Optional[str]) -> Optional[str]:
    """Read a string setting; an empty value clears it."""
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.strip() or None


@dataclass
class BackendConfig:
    """Configuration for the job runner history endpoint."""
    base_url: str = "http://localhost:8080"
    history_path: str = "/self-service/jenkins/jobs"
    timeout_seconds: float = 30.0
    verify_ssl: bool = True


@dataclass
class HistoryConfig:
    """Configuration for the history view behaviour."""
    search_debounce_ms: int = 300                            # Keystroke settle time
    max_accumulated_records: int = MAX_ACCUMULATED_RECORDS   # Accumulator ceiling
    default_time_period: str = DEFAULT_TIME_PERIOD.value
    current_user_email: Optional[str] = None                 # Highlights own runs


@dataclass
class PreferencesConfig:
    """Configuration for persisted view preferences."""

    path: Optional[Path] = None

    def __post_init__(self):
        """Set default path if not provided."""
        if self.path is None:
            self.path = Path.home() / ".local/share/jobs_history/preferences.json"


@dataclass
class JobsHistoryConfig:
    """Main configuration for jobs_history."""
    backend: BackendConfig
    history: HistoryConfig
    preferences: PreferencesConfig

    @classmethod
    def default(cls) -> 'JobsHistoryConfig':
        """Build a configuration from built-in defaults only."""
        return cls(
            backend=BackendConfig(),
            history=HistoryConfig(),
            preferences=PreferencesConfig(),
        )

    @classmethod
    def load(cls) -> 'JobsHistoryConfig':
        """Load configuration from file and environment variables."""
        # Start with defaults as dict
        config_dict = {
            "backend": {
                "base_url": "http://localhost:8080",
                "history_path": "/self-service/jenkins/jobs",
                "timeout_seconds": 30.0,
                "verify_ssl": True,
            },
            "history": {
                "search_debounce_ms": 300,
                "max_accumulated_records": MAX_ACCUMULATED_RECORDS,
                "default_time_period": DEFAULT_TIME_PERIOD.value,
                "current_user_email": None,
            },
            "preferences": {
                "path": None,
            },
        }

        # Load from config file if exists
        config_path = Path.home() / ".config" / "jobs_history" / "config.json"
        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    file_config = json.load(f)
                logger.info(f"Loading configuration from {config_path}")

                # Deep merge file_config into config_dict
                for section, values in file_config.items():
                    if section in config_dict and isinstance(values, dict):
                        config_dict[section].update(
                            {k: v for k, v in values.items() if k in config_dict[section]}
                        )

            except json.JSONDecodeError as e:
                error_msg = (
                    f"Configuration file is corrupted or contains invalid JSON:\n"
                    f"  File: {config_path}\n"
                    f"  Error: {e}\n"
                    f"  Using default configuration instead."
                )
                logger.error(error_msg)
                print(f"WARNING: {error_msg}", file=sys.stderr)

            except Exception as e:
                # Other errors (permissions, etc.)
                logger.warning(f"Failed to load config from file: {e}")

        # Override with environment variables
        backend = config_dict["backend"]
        backend["base_url"] = os.getenv('JOBS_HISTORY_BASE_URL', backend["base_url"])
        backend["history_path"] = os.getenv('JOBS_HISTORY_PATH', backend["history_path"])
        backend["timeout_seconds"] = parse_float_env('JOBS_HISTORY_TIMEOUT', backend["timeout_seconds"])
        backend["verify_ssl"] = parse_bool_env('JOBS_HISTORY_VERIFY_SSL', backend["verify_ssl"])

        history = config_dict["history"]
        history["search_debounce_ms"] = parse_int_env('JOBS_HISTORY_SEARCH_DEBOUNCE_MS', history["search_debounce_ms"])
        history["max_accumulated_records"] = parse_int_env('JOBS_HISTORY_MAX_ACCUMULATED', history["max_accumulated_records"])
        history["default_time_period"] = os.getenv('JOBS_HISTORY_DEFAULT_PERIOD', history["default_time_period"])
        history["current_user_email"] = parse_optional_str_env('JOBS_HISTORY_USER_EMAIL', history["current_user_email"])

        prefs_path = os.getenv('JOBS_HISTORY_PREFS_PATH')
        if prefs_path:
            config_dict["preferences"]["path"] = prefs_path
        if config_dict["preferences"]["path"]:
            config_dict["preferences"]["path"] = Path(config_dict["preferences"]["path"]).expanduser()

        # Sanitize default period
        if sanitize_time_period(history["default_time_period"]) is None:
            logger.warning(
                f"Invalid time period '{history['default_time_period']}' in config, "
                f"resetting to '{DEFAULT_TIME_PERIOD.value}'"
            )
            history["default_time_period"] = DEFAULT_TIME_PERIOD.value

        config = cls(
            backend=BackendConfig(**backend),
            history=HistoryConfig(**history),
            preferences=PreferencesConfig(**config_dict["preferences"]),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.backend.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base URL '{self.backend.base_url}'. "
                "Must start with http:// or https://"
            )

        if not self.backend.history_path.startswith("/"):
            raise ConfigurationError(
                f"Invalid history path '{self.backend.history_path}'. "
                "Must start with '/'"
            )

        if self.backend.timeout_seconds <= 0:
            raise ConfigurationError(
                f"Invalid timeout {self.backend.timeout_seconds}. "
                "Must be greater than 0"
            )

        if not (0 <= self.history.search_debounce_ms <= 5000):
            raise ConfigurationError(
                f"Invalid search debounce {self.history.search_debounce_ms}. "
                "Must be between 0 and 5000 ms"
            )

        if not (PAGE_SIZE <= self.history.max_accumulated_records <= MAX_ACCUMULATED_RECORDS):
            raise ConfigurationError(
                f"Invalid accumulation ceiling {self.history.max_accumulated_records}. "
                f"Must be between {PAGE_SIZE} and {MAX_ACCUMULATED_RECORDS}"
            )

        if sanitize_time_period(self.history.default_time_period) is None:
            raise ConfigurationError(
                f"Invalid default time period '{self.history.default_time_period}'. "
                f"Valid options: {', '.join(p.value for p in type(DEFAULT_TIME_PERIOD))}"
            )
