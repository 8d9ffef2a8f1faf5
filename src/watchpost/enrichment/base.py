"""Enricher protocol and the shared enrichment buffer."""

from typing import Any, Protocol, runtime_checkable

from watchpost.errors import require_text
from watchpost.scope.models import SeverityLevel, User


class EnrichmentContext:
    """Buffer that enrichers write into before it is merged into the Scope.

    Exactly one of ``exception`` or ``message`` describes what is being
    captured; enrichers may inspect either.

    Args:
        exception: The exception being captured, if any.
        message: The message being captured, if any.
        level: Severity of the capture.
    """

    def __init__(
        self,
        exception: BaseException | None = None,
        message: str | None = None,
        level: SeverityLevel = SeverityLevel.ERROR,
    ) -> None:  # noqa: D107
        self.exception = exception
        self.message = message
        self.level = level
        self.user: User | None = None
        self._tags: dict[str, str] = {}
        self._extra: dict[str, Any] = {}
        self._contexts: dict[str, Any] = {}

    @property
    def tags(self) -> dict[str, str]:
        """Buffered tags (copy)."""
        return dict(self._tags)

    @property
    def extra(self) -> dict[str, Any]:
        """Buffered extra values (copy)."""
        return dict(self._extra)

    @property
    def contexts(self) -> dict[str, Any]:
        """Buffered structured contexts (copy)."""
        return dict(self._contexts)

    def set_tag(self, key: str, value: str) -> None:
        """Buffer a tag; a later enricher overwrites an earlier one."""
        require_text(key, "tag key")
        self._tags[key] = str(value)

    def set_extra(self, key: str, value: Any) -> None:
        """Buffer an extra value."""
        require_text(key, "extra key")
        self._extra[key] = value

    def set_context(self, key: str, value: Any) -> None:
        """Buffer a structured context."""
        require_text(key, "context key")
        self._contexts[key] = value


@runtime_checkable
class Enricher(Protocol):
    """A single, independent enrichment step.

    Enrichers run in ascending ``order``; ties keep registration order.
    An enricher must not depend on another enricher having run.
    """

    @property
    def order(self) -> int:
        """Position in the chain (lower runs first)."""
        ...

    def enrich(self, context: EnrichmentContext) -> None:
        """Write tags, extra, contexts or user into the buffer."""
        ...
