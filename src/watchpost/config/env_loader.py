"""Environment detection and .env file loading.

This module implements environment-specific .env file loading with
priority order, plus detection of the deployment environment the host
application runs in.
"""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from watchpost.telemetry import ENV_FILES_LOADED, get_logger

log = get_logger(__name__)


class Environment(str, Enum):
    """Well-known deployment environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


_ALIASES = {
    "production": Environment.PRODUCTION,
    "prod": Environment.PRODUCTION,
    "staging": Environment.STAGING,
    "stage": Environment.STAGING,
    "development": Environment.DEVELOPMENT,
    "dev": Environment.DEVELOPMENT,
    "test": Environment.TEST,
}


def get_environment() -> Environment:
    """Detect current environment from environment variables.

    Variables are checked in order: ``WATCHPOST_ENVIRONMENT``, ``APP_ENV``,
    ``ENVIRONMENT``. The first one that is set wins.

    Returns:
        Environment enum value.

    Environment variable mapping:
    - "production" or "prod" → Environment.PRODUCTION
    - "staging" or "stage" → Environment.STAGING
    - "development" or "dev" → Environment.DEVELOPMENT
    - "test" → Environment.TEST
    - Unset or unrecognized → Environment.PRODUCTION
    """
    for name in ("WATCHPOST_ENVIRONMENT", "APP_ENV", "ENVIRONMENT"):
        value = os.getenv(name, "").strip().lower()
        if value:
            return _ALIASES.get(value, Environment.PRODUCTION)
    return Environment.PRODUCTION


def is_running_in_container() -> bool:
    """Whether the process appears to run inside a container."""
    return os.getenv("container") is not None or Path("/.dockerenv").exists()


def is_running_in_kubernetes() -> bool:
    """Whether the process runs inside a Kubernetes pod."""
    return bool(os.getenv("KUBERNETES_SERVICE_HOST"))


def load_env_files(project_root: Path | None = None) -> list[str]:
    """Load .env files in priority order.

    Priority order (highest to lowest):
    1. `.env.{environment}.local` (highest priority, gitignored)
    2. `.env.{environment}` (environment-specific)
    3. `.env.local` (local overrides, gitignored)
    4. `.env` (base configuration)

    Args:
        project_root: Directory holding the .env files. Defaults to the
            current working directory (the host application's root).

    Returns:
        Names of the files that were loaded, lowest priority first.
    """
    if project_root is None:
        project_root = Path.cwd()

    env_name = get_environment().value

    # Loaded highest priority first: with override=False the first file to
    # set a variable wins, and real environment variables beat every file.
    env_files = [
        project_root / f".env.{env_name}.local",
        project_root / f".env.{env_name}",
        project_root / ".env.local",
        project_root / ".env",
    ]

    loaded_files = []
    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file.name)

    loaded_files.reverse()
    if loaded_files:
        log.info(
            ENV_FILES_LOADED,
            environment=env_name,
            files=loaded_files,
            project_root=str(project_root),
        )
    return loaded_files
