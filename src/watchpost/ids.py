"""Event, trace and span identifiers.

Event and check-in identifiers are 128-bit values rendered as 32 lowercase
hexadecimal characters without separators. Span identifiers are 64-bit
(16 hex characters).
"""

import uuid
from dataclasses import dataclass

from watchpost.errors import InvalidEventIdError


@dataclass(frozen=True)
class EventId:
    """Identifier of a captured event.

    Attributes:
        value: The underlying 128-bit UUID.
    """

    value: uuid.UUID

    @classmethod
    def new(cls) -> "EventId":
        """Generate a random identifier."""
        return cls(uuid.uuid4())

    @classmethod
    def empty(cls) -> "EventId":
        """Identifier returned when nothing was captured (filtered or disabled)."""
        return cls(uuid.UUID(int=0))

    @classmethod
    def parse(cls, text: str) -> "EventId":
        """Parse a hex identifier, with or without dashes.

        Args:
            text: Identifier text.

        Returns:
            Parsed EventId.

        Raises:
            InvalidEventIdError: If text is not a valid 128-bit identifier.
        """
        if not text:
            raise InvalidEventIdError("Event ID must not be empty")
        try:
            return cls(uuid.UUID(text))
        except ValueError:
            raise InvalidEventIdError(f"'{text}' is not a valid event ID") from None

    @classmethod
    def try_parse(cls, text: str | None) -> "EventId | None":
        """Parse an identifier, returning None instead of raising."""
        if not text:
            return None
        try:
            return cls.parse(text)
        except InvalidEventIdError:
            return None

    @property
    def is_empty(self) -> bool:
        """Whether this is the all-zero identifier."""
        return self.value.int == 0

    def __str__(self) -> str:
        return self.value.hex


def new_trace_id() -> str:
    """Generate a trace identifier (32 hex chars)."""
    return uuid.uuid4().hex


def new_span_id() -> str:
    """Generate a span identifier (16 hex chars)."""
    return uuid.uuid4().hex[:16]


def new_check_in_id() -> str:
    """Generate a check-in correlation identifier (32 hex chars)."""
    return uuid.uuid4().hex
