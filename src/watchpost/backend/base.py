"""Delivery boundary: the Backend Client protocol and what crosses it.

Everything handed to a BackendClient has already been filtered, enriched
and scrubbed. Transport, serialization and retries are the backend's
concern; ``flush`` may return before the queue is fully drained.
"""

import traceback
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from watchpost.crons.models import CheckInStatus
from watchpost.ids import EventId
from watchpost.scope.models import SeverityLevel

if TYPE_CHECKING:
    from watchpost.scope.scope import Scope
    from watchpost.tracing.span import Span


class ExceptionInfo(BaseModel):
    """Exception details carried by an event."""

    type: str = Field(..., description="Exception class name")
    module: str | None = Field(None, description="Module the exception class is defined in")
    value: str = Field("", description="str() of the exception")
    stacktrace: list[str] = Field(default_factory=list, description="Formatted traceback lines")

    @classmethod
    def from_exception(cls, exc: BaseException, attach_stacktrace: bool = True) -> "ExceptionInfo":
        """Build from a live exception.

        Args:
            exc: The exception.
            attach_stacktrace: Include the formatted traceback.
        """
        stacktrace: list[str] = []
        if attach_stacktrace:
            stacktrace = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return cls(
            type=type(exc).__qualname__,
            module=type(exc).__module__,
            value=str(exc),
            stacktrace=stacktrace,
        )


class Event(BaseModel):
    """A fully prepared error or message event."""

    event_id: str = Field(default_factory=lambda: str(EventId.new()), description="32-char hex ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    level: SeverityLevel = Field(SeverityLevel.ERROR, description="Event severity")
    message: str | None = Field(None, description="Message text, for message events")
    exception: ExceptionInfo | None = Field(None, description="Exception, for error events")
    release: str | None = None
    environment: str | None = None
    server_name: str | None = None
    transaction: str | None = None
    trace_id: str | None = None
    span_id: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)
    contexts: dict[str, Any] = Field(default_factory=dict)
    user: dict[str, Any] | None = None
    breadcrumbs: list[dict[str, Any]] = Field(default_factory=list)
    fingerprint: list[str] = Field(default_factory=list)
    request: dict[str, Any] | None = None

    @classmethod
    def from_scope(
        cls,
        scope: "Scope",
        *,
        level: SeverityLevel,
        message: str | None = None,
        exception: ExceptionInfo | None = None,
        **fields: Any,
    ) -> "Event":
        """Snapshot a prepared scope into an event.

        Args:
            scope: The enriched and scrubbed scope.
            level: Severity; the scope's own level wins if set.
            message: Message text.
            exception: Exception details.
            **fields: Event-level fields (release, environment, server_name).
        """
        data = scope.to_dict()
        span = scope.span or scope.transaction
        return cls(
            level=scope.level or level,
            message=message,
            exception=exception,
            transaction=data.get("transaction"),
            trace_id=span.trace_id if span is not None else None,
            span_id=span.span_id if span is not None else None,
            tags=data["tags"],
            extra=data["extra"],
            contexts=data["contexts"],
            user=data.get("user"),
            breadcrumbs=data["breadcrumbs"],
            fingerprint=data["fingerprint"],
            request=data.get("request"),
            **fields,
        )

    @property
    def id(self) -> EventId:
        """Parsed event identifier."""
        return EventId.parse(self.event_id)


class Feedback(BaseModel):
    """End-user feedback, optionally tied to a captured event."""

    comments: str = Field("", description="What the user reported")
    name: str | None = Field(None, description="Reporter name")
    email: str | None = Field(None, description="Reporter email")
    event_id: str | None = Field(None, description="Event the feedback refers to")
    metadata: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class BackendClient(Protocol):
    """Receives prepared events, finished spans, check-ins and feedback."""

    def capture_event(self, event: Event) -> EventId:
        """Queue an event for delivery and return its ID."""
        ...

    def capture_span(self, unit: "Span") -> None:
        """Queue a finished, sampled span or transaction."""
        ...

    def capture_check_in(
        self,
        slug: str,
        status: CheckInStatus,
        check_in_id: str | None = None,
    ) -> str:
        """Report a check-in and return its correlation ID."""
        ...

    def capture_feedback(self, feedback: Feedback) -> None:
        """Queue user feedback."""
        ...

    def flush(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for queued items; True if drained."""
        ...
