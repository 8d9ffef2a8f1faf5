"""Spans and transactions with finish-once semantics.

A unit moves from active to finished exactly once. ``finish()`` may be
called any number of times (explicitly, from an exception handler, and
again when a ``with`` block exits); only the first call has an effect.
Once finished, a unit's tags, extra data and status are frozen.

Usage:
    with tracer.transaction("GET /orders", Operations.HTTP_SERVER) as tx:
        with tx.start_child(Operations.DB_QUERY, "SELECT orders") as span:
            rows = repo.fetch()
        tx.set_http_status(200)
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from watchpost.errors import IllegalStateError, require_text
from watchpost.ids import new_span_id, new_trace_id
from watchpost.telemetry import SPAN_FINISHED, SPAN_STARTED, get_logger
from watchpost.tracing.status import SpanStatus, status_from_exception, status_from_http

log = get_logger(__name__)

FinishCallback = Callable[["Span"], None]


@dataclass
class TransactionOptions:
    """Options for starting a transaction.

    Attributes:
        description: Free-form description of the transaction.
        bind_to_scope: Make the transaction the current one on the scope.
        sampled: Force the sampling decision, bypassing the sampler.
        tags: Initial tags.
        extra: Initial extra data.
    """

    description: str | None = None
    bind_to_scope: bool = True
    sampled: bool | None = None
    tags: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def with_tag(self, key: str, value: str) -> "TransactionOptions":
        """Add an initial tag."""
        self.tags[key] = value
        return self

    def with_extra(self, key: str, value: Any) -> "TransactionOptions":
        """Add an initial extra value."""
        self.extra[key] = value
        return self


class Span:
    """A timed unit of work within a trace.

    Spans are created through :meth:`Transaction.start_child` or
    :meth:`Span.start_child`; the parent span ID is fixed at creation.

    Args:
        op: Operation name (see :class:`~watchpost.tracing.operations.Operations`).
        description: Optional description.
        trace_id: Trace this span belongs to; a new one is generated if omitted.
        parent_span_id: Span ID of the parent, None for a root.
        sampled: Whether the trace this span belongs to is retained.
    """

    is_transaction = False

    def __init__(
        self,
        op: str,
        description: str | None = None,
        *,
        trace_id: str | None = None,
        parent_span_id: str | None = None,
        sampled: bool = True,
    ) -> None:  # noqa: D107
        require_text(op, "operation")
        self.trace_id = trace_id or new_trace_id()
        self.span_id = new_span_id()
        self._parent_span_id = parent_span_id
        self.op = op
        self.description = description
        self.sampled = sampled
        self.start_timestamp = datetime.now(timezone.utc)
        self.end_timestamp: datetime | None = None
        self._start_ns = time.monotonic_ns()
        self._end_ns: int | None = None
        self._tags: dict[str, str] = {}
        self._extra: dict[str, Any] = {}
        self._status = SpanStatus.UNKNOWN
        self._status_set = False
        self._finished = False
        self._callbacks: list[FinishCallback] = []
        self._transaction: "Transaction | None" = None

    @property
    def parent_span_id(self) -> str | None:
        """Span ID of the parent, None for a root."""
        return self._parent_span_id

    @property
    def transaction(self) -> "Transaction | None":
        """The transaction that owns this span."""
        return self._transaction

    @property
    def tags(self) -> dict[str, str]:
        """Span tags (copy)."""
        return dict(self._tags)

    @property
    def extra(self) -> dict[str, Any]:
        """Span extra data (copy)."""
        return dict(self._extra)

    @property
    def status(self) -> SpanStatus:
        """Current status; UNKNOWN while active unless set explicitly."""
        return self._status

    @property
    def is_finished(self) -> bool:
        """Whether the span has been finished."""
        return self._finished

    @property
    def duration_ms(self) -> float | None:
        """Duration in milliseconds, None while active."""
        if self._end_ns is None:
            return None
        return round((self._end_ns - self._start_ns) / 1_000_000, 2)

    def _ensure_active(self) -> None:
        if self._finished:
            raise IllegalStateError(f"{type(self).__name__} {self.span_id} is already finished")

    def set_tag(self, key: str, value: str) -> "Span":
        """Set a tag.

        Raises:
            IllegalStateError: If the span is finished.
        """
        self._ensure_active()
        require_text(key, "tag key")
        self._tags[key] = str(value)
        return self

    def set_extra(self, key: str, value: Any) -> "Span":
        """Set an extra value.

        Raises:
            IllegalStateError: If the span is finished.
        """
        self._ensure_active()
        require_text(key, "extra key")
        self._extra[key] = value
        return self

    def set_status(self, status: SpanStatus) -> None:
        """Set the status that ``finish()`` will keep.

        Raises:
            IllegalStateError: If the span is finished.
        """
        self._ensure_active()
        self._status = status
        self._status_set = True

    def on_finish(self, callback: FinishCallback) -> None:
        """Register a callback invoked once, right after the span finishes."""
        self._callbacks.append(callback)

    def start_child(self, op: str, description: str | None = None) -> "Span":
        """Start a child span sharing this span's trace.

        Args:
            op: Operation name.
            description: Optional description.

        Returns:
            The new, active child span.

        Raises:
            IllegalStateError: If this span is already finished.
        """
        self._ensure_active()
        child = Span(
            op,
            description,
            trace_id=self.trace_id,
            parent_span_id=self.span_id,
            sampled=self.sampled,
        )
        if self._transaction is not None:
            self._transaction._register(child)
        log.debug(
            SPAN_STARTED,
            op=op,
            span_id=child.span_id,
            parent_span_id=self.span_id,
            trace_id=self.trace_id,
        )
        return child

    def _resolve_status(self, status_or_exception: SpanStatus | BaseException | None) -> SpanStatus:
        if status_or_exception is None:
            return self._status if self._status_set else SpanStatus.OK
        if isinstance(status_or_exception, BaseException):
            return status_from_exception(status_or_exception)
        return SpanStatus(status_or_exception)

    def finish(self, status_or_exception: SpanStatus | BaseException | None = None) -> None:
        """Finish the span. Calls after the first are silent no-ops.

        Args:
            status_or_exception: Terminal status, or the exception that
                ended the work (status is derived from it). When omitted,
                an explicitly set status is kept, otherwise OK.
        """
        if self._finished:
            return
        self._complete(self._resolve_status(status_or_exception))

    def _complete(self, status: SpanStatus) -> None:
        self._status = status
        self._end_ns = time.monotonic_ns()
        self.end_timestamp = datetime.now(timezone.utc)
        self._finished = True
        log.debug(
            SPAN_FINISHED,
            op=self.op,
            span_id=self.span_id,
            status=status.value,
            duration_ms=self.duration_ms,
        )
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)

    def __enter__(self) -> "Span":
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        self.finish(exc)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for delivery."""
        return {
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "parent_span_id": self._parent_span_id,
            "op": self.op,
            "description": self.description,
            "status": self._status.value,
            "tags": dict(self._tags),
            "data": dict(self._extra),
            "start_timestamp": self.start_timestamp.isoformat(),
            "timestamp": self.end_timestamp.isoformat() if self.end_timestamp else None,
            "duration_ms": self.duration_ms,
        }

    def __repr__(self) -> str:  # noqa: D105
        state = "finished" if self._finished else "active"
        return f"{type(self).__name__}(op={self.op!r}, span_id={self.span_id!r}, {state})"


class Transaction(Span):
    """The root span of one logical operation.

    Finishing a transaction first finishes every still-open descendant with
    the transaction's own terminal status, so nothing stays open when the
    enclosing block exits abnormally.

    Args:
        name: Transaction name (e.g. "GET /orders/{id}").
        op: Operation name.
        description: Optional description.
        trace_id: Continue an upstream trace instead of starting a new one.
        parent_span_id: Upstream span, when continuing a trace.
        sampled: Whether the transaction is delivered once finished.
    """

    is_transaction = True

    def __init__(
        self,
        name: str,
        op: str,
        description: str | None = None,
        *,
        trace_id: str | None = None,
        parent_span_id: str | None = None,
        sampled: bool = True,
    ) -> None:  # noqa: D107
        require_text(name, "transaction name")
        super().__init__(
            op,
            description,
            trace_id=trace_id,
            parent_span_id=parent_span_id,
            sampled=sampled,
        )
        self.name = name
        self._transaction = self
        self._children: list[Span] = []

    @property
    def children(self) -> list[Span]:
        """Every span started under this transaction, in creation order."""
        return list(self._children)

    def _register(self, span: Span) -> None:
        span._transaction = self
        self._children.append(span)

    def set_http_status(self, status_code: int) -> "Transaction":
        """Record the HTTP response status and derive the span status from it.

        Raises:
            IllegalStateError: If the transaction is finished.
        """
        self.set_extra("http.status_code", status_code)
        self.set_status(status_from_http(status_code))
        return self

    def finish(self, status_or_exception: SpanStatus | BaseException | None = None) -> None:
        """Finish open descendants, then the transaction itself."""
        if self._finished:
            return
        status = self._resolve_status(status_or_exception)
        # Innermost first so a parent never finishes before its children
        for child in reversed(self._children):
            if not child.is_finished:
                # A status the child set on itself is kept
                child.finish(None if child._status_set else status)
        self._complete(status)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the transaction and its finished spans."""
        result = super().to_dict()
        result["type"] = "transaction"
        result["transaction"] = self.name
        result["spans"] = [child.to_dict() for child in self._children if child.is_finished]
        return result
