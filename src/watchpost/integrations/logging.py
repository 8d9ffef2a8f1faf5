"""Stdlib logging integration.

Log records at or above the breadcrumb level become breadcrumbs; records at
or above the event level are captured (as exceptions when they carry
``exc_info``, else as messages). Records from watchpost's own loggers are
ignored so the SDK's diagnostics never feed back into the pipeline.

Usage:
    handler = install(client)
    logging.getLogger("orders").error("payment failed", exc_info=True)
"""

import logging
from typing import TYPE_CHECKING

from watchpost.scope.models import BreadcrumbLevel, SeverityLevel
from watchpost.scope.scope import Scope

if TYPE_CHECKING:
    from watchpost.client import WatchpostClient

_SDK_LOGGER = "watchpost"


def _level_number(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def breadcrumb_level_for(levelno: int) -> BreadcrumbLevel:
    """Map a stdlib level number to a breadcrumb level."""
    if levelno >= logging.CRITICAL:
        return BreadcrumbLevel.CRITICAL
    if levelno >= logging.ERROR:
        return BreadcrumbLevel.ERROR
    if levelno >= logging.WARNING:
        return BreadcrumbLevel.WARNING
    if levelno >= logging.INFO:
        return BreadcrumbLevel.INFO
    return BreadcrumbLevel.DEBUG


def severity_for(levelno: int) -> SeverityLevel:
    """Map a stdlib level number to an event severity."""
    if levelno >= logging.CRITICAL:
        return SeverityLevel.FATAL
    if levelno >= logging.ERROR:
        return SeverityLevel.ERROR
    if levelno >= logging.WARNING:
        return SeverityLevel.WARNING
    if levelno >= logging.INFO:
        return SeverityLevel.INFO
    return SeverityLevel.DEBUG


class WatchpostHandler(logging.Handler):
    """Logging handler that feeds records into a WatchpostClient.

    Args:
        client: Client that receives breadcrumbs and events.
        breadcrumb_level: Lowest level recorded as a breadcrumb; defaults to
            the client's ``minimum_breadcrumb_level``.
        event_level: Lowest level captured as an event; defaults to the
            client's ``minimum_event_level``.
    """

    def __init__(
        self,
        client: "WatchpostClient",
        breadcrumb_level: int | None = None,
        event_level: int | None = None,
    ) -> None:  # noqa: D107
        config = client.config
        self.breadcrumb_level = (
            breadcrumb_level
            if breadcrumb_level is not None
            else _level_number(config.minimum_breadcrumb_level)
        )
        self.event_level = (
            event_level if event_level is not None else _level_number(config.minimum_event_level)
        )
        super().__init__(level=min(self.breadcrumb_level, self.event_level))
        self._client = client

    def emit(self, record: logging.LogRecord) -> None:
        """Capture and/or record the log record. Never raises."""
        if record.name == _SDK_LOGGER or record.name.startswith(f"{_SDK_LOGGER}."):
            return
        try:
            message = record.getMessage()
            if record.levelno >= self.event_level:
                self._capture(record, message)
            if record.levelno >= self.breadcrumb_level:
                self._client.add_breadcrumb(
                    message or record.name,
                    category=record.name,
                    type="log",
                    data={"log_level": record.levelname},
                    level=breadcrumb_level_for(record.levelno),
                )
        except Exception:
            self.handleError(record)

    def _capture(self, record: logging.LogRecord, message: str) -> None:
        def configure(scope: Scope) -> None:
            scope.set_level(severity_for(record.levelno))
            scope.set_extra("logger", record.name)
            scope.set_extra("log_message", message)
            scope.set_extra("log_location", f"{record.pathname}:{record.lineno}")

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            self._client.capture_exception(exc, configure)
        elif message:
            self._client.capture_message(message, severity_for(record.levelno), configure)


def install(client: "WatchpostClient", logger: logging.Logger | None = None) -> WatchpostHandler:
    """Attach a WatchpostHandler to ``logger`` (the root logger by default)."""
    handler = WatchpostHandler(client)
    (logger or logging.getLogger()).addHandler(handler)
    return handler
