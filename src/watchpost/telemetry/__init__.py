"""Telemetry module for the SDK's own structured logging.

This module provides:
- Structured logging via structlog
- Semantic event constants
"""

from watchpost.telemetry.events import (
    BREADCRUMB_DROPPED,
    CAPTURE_DISABLED,
    CHECK_IN_DELIVERED,
    CHECK_IN_ERROR,
    CHECK_IN_FAILED_ON_EXIT,
    CHECK_IN_FALLBACK_ERROR,
    CHECK_IN_OK,
    CHECK_IN_STARTED,
    CONFIG_LOAD_FAILED,
    CONFIG_LOADED,
    CONFIG_LOADING,
    DELIVERY_FAILED,
    ENRICHER_FAILED,
    ENRICHMENT_APPLIED,
    ENV_FILES_LOADED,
    EVENT_CAPTURED,
    EVENT_DELIVERED,
    EVENT_DROPPED_BY_CALLBACK,
    EVENT_FILTERED,
    FEEDBACK_CAPTURED,
    FEEDBACK_DELIVERED,
    FLUSH_CANCELLED,
    FLUSH_COMPLETED,
    FLUSH_STARTED,
    REQUEST_IGNORED,
    SCOPE_POPPED,
    SCOPE_PUSHED,
    SCRUB_PATTERN_TIMEOUT,
    SPAN_DELIVERED,
    SPAN_FINISHED,
    SPAN_NO_PARENT,
    SPAN_STARTED,
    TRANSACTION_FINISHED,
    TRANSACTION_IGNORED,
    TRANSACTION_NOT_SAMPLED,
    TRANSACTION_STARTED,
    USER_CLEARED,
    USER_SET,
)
from watchpost.telemetry.logger import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    # Event constants
    "BREADCRUMB_DROPPED",
    "CAPTURE_DISABLED",
    "CHECK_IN_DELIVERED",
    "CHECK_IN_ERROR",
    "CHECK_IN_FAILED_ON_EXIT",
    "CHECK_IN_FALLBACK_ERROR",
    "CHECK_IN_OK",
    "CHECK_IN_STARTED",
    "CONFIG_LOAD_FAILED",
    "CONFIG_LOADED",
    "CONFIG_LOADING",
    "DELIVERY_FAILED",
    "ENRICHER_FAILED",
    "ENRICHMENT_APPLIED",
    "ENV_FILES_LOADED",
    "EVENT_CAPTURED",
    "EVENT_DELIVERED",
    "EVENT_DROPPED_BY_CALLBACK",
    "EVENT_FILTERED",
    "FEEDBACK_CAPTURED",
    "FEEDBACK_DELIVERED",
    "FLUSH_CANCELLED",
    "FLUSH_COMPLETED",
    "FLUSH_STARTED",
    "REQUEST_IGNORED",
    "SCOPE_POPPED",
    "SCOPE_PUSHED",
    "SCRUB_PATTERN_TIMEOUT",
    "SPAN_DELIVERED",
    "SPAN_FINISHED",
    "SPAN_NO_PARENT",
    "SPAN_STARTED",
    "TRANSACTION_FINISHED",
    "TRANSACTION_IGNORED",
    "TRANSACTION_NOT_SAMPLED",
    "TRANSACTION_STARTED",
    "USER_CLEARED",
    "USER_SET",
]
