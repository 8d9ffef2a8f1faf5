"""Unified configuration management for watchpost.

This module provides a single source of truth for all configuration,
integrating environment variables, .env files, an optional YAML file,
and defaults.
"""

from watchpost.config.env_loader import (
    Environment,
    get_environment,
    is_running_in_container,
    is_running_in_kubernetes,
    load_env_files,
)
from watchpost.config.loader import ConfigLoadError, load_yaml_file
from watchpost.config.models import FilterRules, SamplingRates, ScrubbingRules, TracingOptions
from watchpost.config.settings import (
    WatchpostConfig,
    get_settings,
    load_app_config,
    reset_settings,
)

__all__ = [
    # SDK-level settings
    "WatchpostConfig",
    "get_settings",
    "load_app_config",
    "reset_settings",
    # Rule sets
    "FilterRules",
    "ScrubbingRules",
    "TracingOptions",
    "SamplingRates",
    # Environment
    "Environment",
    "get_environment",
    "is_running_in_container",
    "is_running_in_kubernetes",
    "load_env_files",
    # Loaders
    "load_yaml_file",
    "ConfigLoadError",
]
