"""Error, message and feedback capture.

Every capture runs the same pipeline:

1. FilterEngine admission (and error sample rate)
2. copy of the current scope, handed to the caller's scope mutator
3. EnricherChain
4. ``before_send`` callback (returning False drops the event)
5. Scrubber
6. BackendClient.capture_event

A capture that does not reach the backend returns the empty EventId.
Delivery errors are logged, never raised into the calling code.
"""

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from watchpost.backend.base import Event, ExceptionInfo, Feedback
from watchpost.enrichment.chain import EnricherChain
from watchpost.errors import InvalidInputError, require_text
from watchpost.filtering.engine import FilterEngine, exception_type_name
from watchpost.ids import EventId
from watchpost.scope.models import SeverityLevel
from watchpost.scope.scope import Scope, ScopeStack
from watchpost.scrubbing.scrubber import Scrubber
from watchpost.telemetry import (
    CAPTURE_DISABLED,
    DELIVERY_FAILED,
    EVENT_CAPTURED,
    EVENT_DROPPED_BY_CALLBACK,
    EVENT_FILTERED,
    FEEDBACK_CAPTURED,
    get_logger,
)

if TYPE_CHECKING:
    from watchpost.backend.base import BackendClient
    from watchpost.config.settings import WatchpostConfig

log = get_logger(__name__)

ScopeMutator = Callable[[Scope], None]


@dataclass
class EventInfo:
    """What a ``before_send`` callback sees.

    The scope is the enriched copy prepared for this capture; the callback
    may modify it. It is scrubbed after the callback returns.
    """

    scope: Scope
    level: SeverityLevel
    exception: BaseException | None = None
    message: str | None = None


BeforeSend = Callable[[EventInfo], bool]


class ErrorCapture:
    """Captures exceptions and messages through the admission pipeline.

    Args:
        scopes: Scope stack; its current scope is copied for every capture.
        backend: Receives prepared events.
        config: Client configuration snapshot.
        filter_engine: Admission filter.
        enrichers: Enricher chain run on every admitted capture.
        scrubber: Redacts the prepared scope.
        before_send: Optional callback; returning False drops the event.
        rng: Random source for the error sample rate.
    """

    def __init__(
        self,
        scopes: ScopeStack,
        backend: "BackendClient",
        config: "WatchpostConfig",
        filter_engine: FilterEngine,
        enrichers: EnricherChain,
        scrubber: Scrubber,
        before_send: BeforeSend | None = None,
        rng: Callable[[], float] = random.random,
    ) -> None:  # noqa: D107
        self._scopes = scopes
        self._backend = backend
        self._config = config
        self._filter_engine = filter_engine
        self._enrichers = enrichers
        self._scrubber = scrubber
        self._before_send = before_send
        self._rng = rng
        self._last_event_id = EventId.empty()

    @property
    def last_event_id(self) -> EventId:
        """ID of the most recent event handed to the backend."""
        return self._last_event_id

    def capture_exception(
        self,
        exception: BaseException,
        configure_scope: ScopeMutator | None = None,
        level: SeverityLevel = SeverityLevel.ERROR,
    ) -> EventId:
        """Capture an exception.

        Args:
            exception: The exception to report.
            configure_scope: Mutator applied to this capture's scope copy only.
            level: Event severity.

        Returns:
            The event ID, or the empty ID if the event was not delivered.

        Raises:
            InvalidInputError: If exception is None.
        """
        if exception is None:
            raise InvalidInputError("exception must not be None")
        if not self._config.enabled:
            log.debug(CAPTURE_DISABLED, exception_type=exception_type_name(exception))
            return EventId.empty()
        if not self._filter_engine.should_capture_exception(exception):
            return EventId.empty()
        return self._capture(level, configure_scope, exception=exception)

    def capture_message(
        self,
        message: str,
        level: SeverityLevel = SeverityLevel.INFO,
        configure_scope: ScopeMutator | None = None,
        status_code: int | None = None,
    ) -> EventId:
        """Capture a message.

        Args:
            message: Message text.
            level: Event severity.
            configure_scope: Mutator applied to this capture's scope copy only.
            status_code: HTTP status the message is tied to, checked against
                the ignored status codes.

        Returns:
            The event ID, or the empty ID if the event was not delivered.

        Raises:
            InvalidInputError: If message is empty.
        """
        require_text(message, "message")
        if not self._config.enabled:
            log.debug(CAPTURE_DISABLED)
            return EventId.empty()
        if not self._filter_engine.should_capture_message(message, status_code):
            return EventId.empty()
        return self._capture(level, configure_scope, message=message)

    def _sampled(self) -> bool:
        rate = self._config.sample_rate
        if rate >= 1.0:
            return True
        return self._rng() < rate

    def _capture(
        self,
        level: SeverityLevel,
        configure_scope: ScopeMutator | None,
        exception: BaseException | None = None,
        message: str | None = None,
    ) -> EventId:
        if not self._sampled():
            log.debug(EVENT_FILTERED, reason="sample_rate", sample_rate=self._config.sample_rate)
            return EventId.empty()

        scope = self._scopes.current.copy()
        if configure_scope is not None:
            configure_scope(scope)

        self._enrichers.enrich_scope(scope, exception=exception, message=message, level=level)

        if self._config.send_default_pii and scope.user is not None and not scope.user.ip_address:
            scope.user.with_auto_ip_address()

        if self._before_send is not None:
            info = EventInfo(scope=scope, level=level, exception=exception, message=message)
            if not self._before_send(info):
                log.debug(EVENT_DROPPED_BY_CALLBACK, level=level.value)
                return EventId.empty()

        self._scrubber.scrub_scope(scope)
        event = Event.from_scope(
            scope,
            level=level,
            message=self._scrubber.scrub_string(message),
            exception=self._exception_info(exception),
            release=self._config.release,
            environment=self._config.environment,
            server_name=self._config.server_name,
        )

        try:
            event_id = self._backend.capture_event(event)
        except Exception as e:
            log.warning(
                DELIVERY_FAILED,
                kind="event",
                event_id=event.event_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return EventId.empty()
        self._last_event_id = event_id
        log.debug(EVENT_CAPTURED, event_id=str(event_id), level=event.level.value)
        return event_id

    def _exception_info(self, exception: BaseException | None) -> ExceptionInfo | None:
        if exception is None:
            return None
        info = ExceptionInfo.from_exception(exception, attach_stacktrace=self._config.attach_stacktrace)
        info.value = self._scrubber.scrub_string(info.value) or ""
        info.stacktrace = [self._scrubber.scrub_string(line) or line for line in info.stacktrace]
        return info


class FeedbackCapture:
    """Sends end-user feedback to the backend.

    Args:
        backend: Receives the feedback.
        enabled: When False, feedback is validated but not sent.
    """

    def __init__(self, backend: "BackendClient", enabled: bool = True) -> None:  # noqa: D107
        self._backend = backend
        self._enabled = enabled

    def capture_feedback(self, feedback: Feedback) -> None:
        """Send feedback. Name and email are passed through unchanged.

        Raises:
            InvalidInputError: If the comments are empty.
        """
        require_text(feedback.comments, "feedback comments")
        if not self._enabled:
            return
        try:
            self._backend.capture_feedback(feedback)
        except Exception as e:
            log.warning(DELIVERY_FAILED, kind="feedback", error=str(e), error_type=type(e).__name__)
            return
        log.debug(FEEDBACK_CAPTURED, event_id=feedback.event_id)

    def capture_user_feedback(
        self,
        event_id: EventId | str | None,
        comments: str,
        name: str | None = None,
        email: str | None = None,
    ) -> Feedback:
        """Build and send feedback for an event; returns what was sent."""
        feedback = Feedback(
            comments=comments,
            name=name,
            email=email,
            event_id=str(event_id) if event_id else None,
        )
        self.capture_feedback(feedback)
        return feedback
