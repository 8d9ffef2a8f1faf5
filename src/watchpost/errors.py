"""Exception hierarchy for watchpost.

Only programmer errors surface as exceptions:
- InvalidInputError: a required argument is missing or empty
- IllegalStateError: an explicit transition on an already-terminal unit
- InvalidEventIdError: text that is not a 128-bit hex identifier

Filtering, scrub timeouts and enricher failures are normal outcomes and are
recorded in the SDK's structured logs instead of being raised.
"""


class WatchpostError(Exception):
    """Base exception for all watchpost errors."""

    pass


class InvalidInputError(WatchpostError, ValueError):
    """Raised when a required argument is missing, empty or out of range."""

    pass


class IllegalStateError(WatchpostError, RuntimeError):
    """Raised when an operation targets a unit that is already terminal."""

    pass


class InvalidEventIdError(WatchpostError, ValueError):
    """Raised when an event or check-in identifier cannot be parsed."""

    pass


def require_text(value: str | None, name: str) -> str:
    """Validate that a required string argument is present and non-empty.

    Args:
        value: Argument value.
        name: Argument name, used in the error message.

    Returns:
        The value, unchanged.

    Raises:
        InvalidInputError: If value is None or empty.
    """
    if not value:
        raise InvalidInputError(f"{name} must be a non-empty string")
    return value
