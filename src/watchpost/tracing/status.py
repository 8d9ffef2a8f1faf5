"""Terminal outcomes of spans and transactions."""

import asyncio
from enum import Enum


class SpanStatus(str, Enum):
    """Outcome of a unit of work.

    Values follow the canonical gRPC status names used by tracing backends.
    """

    OK = "ok"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL_ERROR = "internal_error"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"


_HTTP_STATUS_MAP: dict[int, SpanStatus] = {
    400: SpanStatus.INVALID_ARGUMENT,
    401: SpanStatus.UNAUTHENTICATED,
    403: SpanStatus.PERMISSION_DENIED,
    404: SpanStatus.NOT_FOUND,
    409: SpanStatus.ALREADY_EXISTS,
    429: SpanStatus.RESOURCE_EXHAUSTED,
    499: SpanStatus.CANCELLED,
    501: SpanStatus.UNIMPLEMENTED,
    503: SpanStatus.UNAVAILABLE,
    504: SpanStatus.DEADLINE_EXCEEDED,
}


def status_from_http(status_code: int) -> SpanStatus:
    """Map an HTTP status code to a span status.

    Args:
        status_code: HTTP response status.

    Returns:
        OK for 2xx, a specific status for well-known client and server
        errors, INTERNAL_ERROR for any other 5xx and UNKNOWN otherwise.
    """
    if 200 <= status_code < 300:
        return SpanStatus.OK
    if status_code in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status_code]
    if 500 <= status_code < 600:
        return SpanStatus.INTERNAL_ERROR
    return SpanStatus.UNKNOWN


def status_from_exception(exc: BaseException) -> SpanStatus:
    """Derive a span status from the exception that ended the unit.

    Args:
        exc: The exception raised inside the unit.

    Returns:
        The closest matching status; INTERNAL_ERROR when nothing more
        specific applies.
    """
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return SpanStatus.DEADLINE_EXCEEDED
    if isinstance(exc, asyncio.CancelledError):
        return SpanStatus.CANCELLED
    if isinstance(exc, PermissionError):
        return SpanStatus.PERMISSION_DENIED
    if isinstance(exc, NotImplementedError):
        return SpanStatus.UNIMPLEMENTED
    if isinstance(exc, (FileNotFoundError, LookupError)):
        return SpanStatus.NOT_FOUND
    if isinstance(exc, (ValueError, TypeError)):
        return SpanStatus.INVALID_ARGUMENT
    return SpanStatus.INTERNAL_ERROR
