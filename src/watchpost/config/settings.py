"""SDK configuration settings.

This module provides the WatchpostConfig class and settings singleton.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

from watchpost.config.env_loader import get_environment, load_env_files
from watchpost.config.loader import load_yaml_file
from watchpost.config.models import FilterRules, SamplingRates, ScrubbingRules, TracingOptions
from watchpost.config.validators import (
    resolve_path,
    validate_log_format,
    validate_log_level,
    validate_rate,
)
from watchpost.telemetry import CONFIG_LOAD_FAILED, CONFIG_LOADED, CONFIG_LOADING

log = structlog.get_logger(__name__)


class WatchpostConfig(BaseSettings):
    """Unified SDK configuration.

    Loads configuration from environment variables, an optional YAML file,
    and defaults. Validates all values using Pydantic. Nested rule sets are
    bound with a double-underscore delimiter, e.g.
    ``WATCHPOST_FILTERING__IGNORE_STATUS_CODES='[404, 410]'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WATCHPOST_",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Core
    dsn: str | None = Field(default=None, description="Backend project DSN")
    enabled: bool = Field(default=True, description="Master switch; False makes every call a no-op")
    debug: bool = Field(default=False, description="Debug mode flag")
    environment: str = Field(
        default_factory=lambda: get_environment().value,
        description="Deployment environment reported with every event",
    )
    release: str | None = Field(default=None, description="Application release version")
    server_name: str | None = Field(default=None, description="Host name reported with events")
    send_default_pii: bool = Field(
        default=False, description="Attach IP addresses and other PII automatically"
    )

    # Capture
    sample_rate: float = Field(
        default=SamplingRates.ALL, description="Fraction of error events delivered"
    )
    max_breadcrumbs: int = Field(
        default=100, ge=0, le=1000, description="Breadcrumbs kept per scope (oldest evicted)"
    )
    attach_stacktrace: bool = Field(
        default=True, description="Attach formatted stack traces to exception events"
    )
    minimum_breadcrumb_level: str = Field(
        default="INFO", description="Lowest stdlib log level recorded as a breadcrumb"
    )
    minimum_event_level: str = Field(
        default="ERROR", description="Lowest stdlib log level captured as an event"
    )
    shutdown_timeout_seconds: float = Field(
        default=2.0, ge=0, description="Flush deadline used when the client closes"
    )
    default_tags: dict[str, str] = Field(
        default_factory=dict, description="Tags applied to the root scope"
    )

    # Rule sets
    filtering: FilterRules = Field(default_factory=FilterRules)
    scrubbing: ScrubbingRules = Field(default_factory=ScrubbingRules)
    tracing: TracingOptions = Field(default_factory=TracingOptions)

    # SDK diagnostics
    log_dir: Path | None = Field(default=None, description="Directory for JSONL diagnostics")
    log_level: str = Field(default="WARNING", description="SDK diagnostics log level")
    log_format: str = Field(default="json", description="SDK log format (json or console)")

    @field_validator("log_level", "minimum_breadcrumb_level", "minimum_event_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("sample_rate")
    @classmethod
    def validate_sample_rate(cls, v: float) -> float:
        """Validate error sample rate range."""
        return validate_rate(v)

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str | None) -> Path | None:
        """Resolve relative paths to absolute."""
        return resolve_path(v)


_settings: WatchpostConfig | None = None


def load_app_config(config_file: Path | None = None, **overrides: Any) -> WatchpostConfig:
    """Load and validate SDK configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Reads the optional YAML options file
    3. Creates WatchpostConfig (environment variables fill everything the
       file and overrides leave unset)
    4. Logs configuration loading using structlog

    Args:
        config_file: Optional YAML options file. Its values act as explicit
            constructor arguments and take precedence over the environment.
        **overrides: Explicit values, applied over the file's values.

    Returns:
        Validated WatchpostConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
        ConfigLoadError: If the options file cannot be read.
    """
    log.info(CONFIG_LOADING, environment=get_environment().value)

    load_env_files()

    values: dict[str, Any] = {}
    if config_file is not None:
        values.update(load_yaml_file(config_file))
    values.update(overrides)

    try:
        config = WatchpostConfig(**values)
    except Exception as e:
        log.error(CONFIG_LOAD_FAILED, error=str(e), error_type=type(e).__name__)
        raise

    log.info(
        CONFIG_LOADED,
        environment=config.environment,
        enabled=config.enabled,
        tracing_enabled=config.tracing.enabled,
        scrubbing_enabled=config.scrubbing.enabled,
    )
    return config


def get_settings() -> WatchpostConfig:
    """Get the SDK settings singleton.

    Returns:
        WatchpostConfig instance (singleton pattern).
    """
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached singleton so the next get_settings() reloads."""
    global _settings
    _settings = None
