"""In-memory backend that records everything it receives."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from watchpost.backend.base import Event, Feedback
from watchpost.crons.models import CheckInStatus
from watchpost.ids import EventId, new_check_in_id

if TYPE_CHECKING:
    from watchpost.tracing.span import Span, Transaction


@dataclass(frozen=True)
class RecordedCheckIn:
    """One check-in as seen by the backend."""

    slug: str
    status: CheckInStatus
    check_in_id: str


class RecordingBackend:
    """Backend that keeps delivered items in lists.

    Useful in tests and in local development where nothing should leave the
    process.
    """

    def __init__(self) -> None:  # noqa: D107
        self.events: list[Event] = []
        self.spans: list["Span"] = []
        self.check_ins: list[RecordedCheckIn] = []
        self.feedback: list[Feedback] = []
        self.flush_calls: list[float] = []

    @property
    def transactions(self) -> list["Transaction"]:
        """Delivered transactions."""
        return [s for s in self.spans if s.is_transaction]  # type: ignore[misc]

    def capture_event(self, event: Event) -> EventId:  # noqa: D102
        self.events.append(event)
        return event.id

    def capture_span(self, unit: "Span") -> None:  # noqa: D102
        self.spans.append(unit)

    def capture_check_in(
        self,
        slug: str,
        status: CheckInStatus,
        check_in_id: str | None = None,
    ) -> str:  # noqa: D102
        check_in_id = check_in_id or new_check_in_id()
        self.check_ins.append(RecordedCheckIn(slug=slug, status=status, check_in_id=check_in_id))
        return check_in_id

    def capture_feedback(self, feedback: Feedback) -> None:  # noqa: D102
        self.feedback.append(feedback)

    def flush(self, timeout: float) -> bool:  # noqa: D102
        self.flush_calls.append(timeout)
        return True

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.events.clear()
        self.spans.clear()
        self.check_ins.clear()
        self.feedback.clear()
        self.flush_calls.clear()
