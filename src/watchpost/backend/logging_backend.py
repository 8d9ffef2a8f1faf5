"""Backend that writes every delivered item to the structured log.

Pairs with the JSONL file handler configured in
:mod:`watchpost.telemetry.logger`, so a service without a remote backend
still keeps a searchable record of its errors, transactions and check-ins.
"""

from typing import TYPE_CHECKING

from watchpost.backend.base import Event, Feedback
from watchpost.crons.models import CheckInStatus
from watchpost.ids import EventId, new_check_in_id
from watchpost.telemetry import (
    CHECK_IN_DELIVERED,
    EVENT_DELIVERED,
    FEEDBACK_DELIVERED,
    SPAN_DELIVERED,
    get_logger,
)

if TYPE_CHECKING:
    from watchpost.tracing.span import Span

log = get_logger(__name__)


class LoggingBackend:
    """Emit each delivered item as one structlog event.

    Args:
        include_breadcrumbs: Also log the event's breadcrumb trail.
    """

    def __init__(self, include_breadcrumbs: bool = False) -> None:  # noqa: D107
        self.include_breadcrumbs = include_breadcrumbs

    def capture_event(self, event: Event) -> EventId:  # noqa: D102
        payload = event.model_dump(mode="json", exclude_none=True)
        if not self.include_breadcrumbs:
            payload.pop("breadcrumbs", None)
        # "level" and "timestamp" are set by the log processors
        payload["event_level"] = payload.pop("level")
        payload["event_timestamp"] = payload.pop("timestamp")
        log.info(EVENT_DELIVERED, **payload)
        return event.id

    def capture_span(self, unit: "Span") -> None:  # noqa: D102
        data = unit.to_dict()
        log.info(
            SPAN_DELIVERED,
            trace_id=data["trace_id"],
            span_id=data["span_id"],
            op=data["op"],
            transaction=data.get("transaction"),
            status=data["status"],
            duration_ms=data["duration_ms"],
            child_spans=len(data.get("spans", [])),
        )

    def capture_check_in(
        self,
        slug: str,
        status: CheckInStatus,
        check_in_id: str | None = None,
    ) -> str:  # noqa: D102
        check_in_id = check_in_id or new_check_in_id()
        log.info(CHECK_IN_DELIVERED, slug=slug, status=status.value, check_in_id=check_in_id)
        return check_in_id

    def capture_feedback(self, feedback: Feedback) -> None:  # noqa: D102
        log.info(FEEDBACK_DELIVERED, **feedback.model_dump(exclude_none=True))

    def flush(self, timeout: float) -> bool:  # noqa: D102
        # Writes are synchronous; nothing is ever queued
        return True
