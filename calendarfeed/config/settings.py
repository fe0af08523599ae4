"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "CALENDARFEED_"

# Keys accepted at the top level of config.yaml
YAML_BASIC_SETTINGS = (
    "app_name",
    "default_timezone",
    "max_occurrences",
    "date_format",
)
YAML_NETWORK_SETTINGS = (
    "request_timeout",
    "max_retries",
    "retry_backoff_factor",
    "validate_ssl",
    "auth_type",
    "auth_username",
    "auth_password",
    "auth_bearer_token",
)


class CalendarFeedSettings(BaseSettings):
    """Application settings read from arguments, CALENDARFEED_* variables and config.yaml.

    Precedence, highest first: explicit keyword arguments, environment
    variables, YAML file, field defaults.
    """

    app_name: str = Field(default="CalendarFeed", description="Application name")

    # Calendar processing
    default_timezone: str = Field(
        default="UTC", description="Zone used when a document declares none"
    )
    max_occurrences: int = Field(
        default=1000, ge=1, description="Upper bound of occurrences expanded per series"
    )
    date_format: Literal["iso", "legacy"] = Field(
        default="iso",
        description="Output date pattern: iso (real milliseconds) or legacy (seconds repeated)",
    )

    # Network and retry settings
    request_timeout: int = Field(default=30, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=3, ge=0, description="Maximum retry attempts")
    retry_backoff_factor: float = Field(default=1.5, description="Exponential backoff factor")
    validate_ssl: bool = Field(default=True, description="Validate SSL certificates")

    # Credentials sent with every calendar download
    auth_type: Literal["none", "basic", "bearer"] = Field(
        default="none", description="Authentication scheme for calendar URLs"
    )
    auth_username: Optional[str] = Field(default=None, description="Basic auth username")
    auth_password: Optional[str] = Field(default=None, description="Basic auth password")
    auth_bearer_token: Optional[str] = Field(default=None, description="Bearer token")

    # Logging
    log_level: str = Field(
        default="INFO", description="Log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL"
    )
    log_colors: bool = Field(default=True, description="Colored console output (auto-detected)")
    third_party_log_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )

    # File paths
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "calendarfeed")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    _explicit_args: set[str] = PrivateAttr(default_factory=set)
    _env_vars_set: set[str] = PrivateAttr(default_factory=set)

    def __init__(self, **kwargs: Any) -> None:
        # Remember which values came from the environment so YAML does not override them
        env_vars_set = {
            key[len(ENV_PREFIX) :].lower() for key in os.environ if key.startswith(ENV_PREFIX)
        }

        super().__init__(**kwargs)

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        self._load_yaml_config()

    @field_validator("log_level", "third_party_log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def config_file(self) -> Path:
        """Path to YAML configuration file."""
        return self.config_dir / "config.yaml"

    def _find_config_file(self) -> Optional[Path]:
        """Find config file, checking the working directory first, then user home."""
        project_config = Path.cwd() / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        if self.config_file.exists():
            return self.config_file

        return None

    def _can_override(self, setting: str) -> bool:
        return setting not in self._explicit_args and setting not in self._env_vars_set

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load calendar processing settings from YAML data."""
        for setting in YAML_BASIC_SETTINGS:
            if setting in config_data and self._can_override(setting):
                setattr(self, setting, config_data[setting])

    def _load_network_settings(self, config_data: dict) -> None:
        """Load network and retry settings, flat or under an ``ics:`` section."""
        sources = [config_data]
        if isinstance(config_data.get("ics"), dict):
            sources.append(config_data["ics"])

        for section in sources:
            for setting in YAML_NETWORK_SETTINGS:
                if setting in section and self._can_override(setting):
                    setattr(self, setting, section[setting])

    def _load_logging_config(self, config_data: dict) -> None:
        """Load logging settings from a ``logging:`` section."""
        logging_config = config_data.get("logging")
        if not isinstance(logging_config, dict):
            return

        mapping = {
            "level": "log_level",
            "colors": "log_colors",
            "third_party_level": "third_party_log_level",
        }
        for yaml_key, setting in mapping.items():
            if yaml_key in logging_config and self._can_override(setting):
                value = logging_config[yaml_key]
                if setting != "log_colors":
                    value = self._normalize_level(str(value))
                setattr(self, setting, value)

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            with config_file.open() as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                return

            self._load_basic_settings(config_data)
            self._load_network_settings(config_data)
            self._load_logging_config(config_data)

        except (OSError, yaml.YAMLError, ValueError) as e:
            # Don't fail if YAML loading fails, just continue with defaults/env vars
            logging.getLogger(__name__).warning(
                f"Could not load YAML config from {config_file}: {e}"
            )


_settings_instance: Optional[CalendarFeedSettings] = None


def get_settings() -> CalendarFeedSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = CalendarFeedSettings()
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
