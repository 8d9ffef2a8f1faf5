"""Spans, transactions and the tracer that binds them to scopes."""

from watchpost.tracing.operations import Operations
from watchpost.tracing.span import Span, Transaction, TransactionOptions
from watchpost.tracing.status import SpanStatus, status_from_exception, status_from_http
from watchpost.tracing.tracer import Tracer

__all__ = [
    "Operations",
    "Span",
    "SpanStatus",
    "Tracer",
    "Transaction",
    "TransactionOptions",
    "status_from_exception",
    "status_from_http",
]
