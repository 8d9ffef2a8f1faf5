"""Custom Pydantic validators for configuration.

This module provides validators for cross-field validation and
custom type conversions.
"""

from pathlib import Path

import regex


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Validated log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if value.upper() not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return value.upper()


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Args:
        value: Log format string.

    Returns:
        Validated log format.

    Raises:
        ValueError: If log format is not valid.
    """
    valid_formats = {"json", "console"}
    if value.lower() not in valid_formats:
        raise ValueError(f"log_format must be one of {valid_formats}, got {value}")
    return value.lower()


def validate_rate(value: float, name: str = "sample_rate") -> float:
    """Validate a sampling rate lies in [0, 1].

    Args:
        value: Rate value.
        name: Field name for the error message.

    Returns:
        The rate as float.

    Raises:
        ValueError: If the rate is outside [0, 1].
    """
    rate = float(value)
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")
    return rate


def validate_patterns(patterns: list[str]) -> list[str]:
    """Validate that every redaction pattern compiles.

    Args:
        patterns: Regular expression sources.

    Returns:
        The patterns, unchanged.

    Raises:
        ValueError: If a pattern is not a valid regular expression.
    """
    for pattern in patterns:
        try:
            regex.compile(pattern, regex.IGNORECASE)
        except regex.error as e:
            raise ValueError(f"Invalid scrubbing pattern {pattern!r}: {e}") from None
    return patterns


def resolve_path(value: Path | str | None) -> Path | None:
    """Resolve relative paths against the current working directory.

    Args:
        value: Path value (can be string, Path or None).

    Returns:
        Resolved Path object, or None when no path is configured.
    """
    if value is None or value == "":
        return None
    path = Path(value) if isinstance(value, str) else value
    return path.expanduser().resolve()
