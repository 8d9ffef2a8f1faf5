"""watchpost: error and performance instrumentation with an admission pipeline.

Captured exceptions, messages, breadcrumbs, transactions and scheduled-job
check-ins are filtered, enriched and scrubbed before they reach a pluggable
backend.
"""

from watchpost.backend import BackendClient, Event, Feedback, LoggingBackend, RecordingBackend
from watchpost.client import WatchpostClient
from watchpost.config import WatchpostConfig, load_app_config
from watchpost.crons import CheckInStatus, CronJobMonitor, MonitorConfig
from watchpost.errors import IllegalStateError, InvalidEventIdError, InvalidInputError, WatchpostError
from watchpost.ids import EventId
from watchpost.scope import Breadcrumb, BreadcrumbLevel, Scope, SeverityLevel, User
from watchpost.tracing import Operations, Span, SpanStatus, Transaction, TransactionOptions

__version__ = "0.1.0"

__all__ = [
    "BackendClient",
    "Breadcrumb",
    "BreadcrumbLevel",
    "CheckInStatus",
    "CronJobMonitor",
    "Event",
    "EventId",
    "Feedback",
    "IllegalStateError",
    "InvalidEventIdError",
    "InvalidInputError",
    "LoggingBackend",
    "MonitorConfig",
    "Operations",
    "RecordingBackend",
    "Scope",
    "SeverityLevel",
    "Span",
    "SpanStatus",
    "Transaction",
    "TransactionOptions",
    "User",
    "WatchpostClient",
    "WatchpostConfig",
    "WatchpostError",
    "load_app_config",
    "__version__",
]
