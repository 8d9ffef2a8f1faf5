"""Backend Client boundary and bundled implementations."""

from watchpost.backend.base import BackendClient, Event, ExceptionInfo, Feedback
from watchpost.backend.logging_backend import LoggingBackend
from watchpost.backend.memory import RecordedCheckIn, RecordingBackend

__all__ = [
    "BackendClient",
    "Event",
    "ExceptionInfo",
    "Feedback",
    "LoggingBackend",
    "RecordedCheckIn",
    "RecordingBackend",
]
