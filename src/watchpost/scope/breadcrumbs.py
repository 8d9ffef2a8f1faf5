"""Recording breadcrumbs on the current scope."""

from typing import Callable, Mapping

from watchpost.errors import require_text
from watchpost.scope.models import Breadcrumb, BreadcrumbLevel
from watchpost.scope.scope import ScopeStack
from watchpost.scrubbing.scrubber import Scrubber
from watchpost.telemetry import BREADCRUMB_DROPPED, get_logger

log = get_logger(__name__)

BeforeBreadcrumb = Callable[[Breadcrumb], bool]


class BreadcrumbTracker:
    """Adds scrubbed breadcrumbs to the current scope.

    Args:
        scopes: Scope stack; breadcrumbs go to its current scope.
        scrubber: Redacts message and data before recording.
        before_breadcrumb: Optional callback; returning False drops the breadcrumb.
        enabled: When False, breadcrumbs are discarded.
    """

    def __init__(
        self,
        scopes: ScopeStack,
        scrubber: Scrubber,
        before_breadcrumb: BeforeBreadcrumb | None = None,
        enabled: bool = True,
    ) -> None:  # noqa: D107
        self._scopes = scopes
        self._scrubber = scrubber
        self._before_breadcrumb = before_breadcrumb
        self._enabled = enabled

    def record(self, breadcrumb: Breadcrumb) -> bool:
        """Record a prepared breadcrumb.

        Returns:
            True if it was added to the scope.
        """
        if not self._enabled:
            return False
        if self._before_breadcrumb is not None and not self._before_breadcrumb(breadcrumb):
            log.debug(BREADCRUMB_DROPPED, category=breadcrumb.category)
            return False
        self._scopes.current.add_breadcrumb(self._scrubber.scrub_breadcrumb(breadcrumb))
        return True

    def add_breadcrumb(
        self,
        message: str,
        category: str | None = None,
        type: str | None = None,
        data: Mapping[str, str] | None = None,
        level: BreadcrumbLevel = BreadcrumbLevel.INFO,
    ) -> bool:
        """Add a breadcrumb.

        Raises:
            InvalidInputError: If message is empty.
        """
        require_text(message, "breadcrumb message")
        return self.record(
            Breadcrumb(
                message=message,
                category=category,
                type=type or "default",
                level=level,
                data=dict(data or {}),
            )
        )

    def add_http_breadcrumb(self, method: str, url: str, status_code: int | None = None) -> bool:
        """Record an outgoing or incoming HTTP request."""
        data = {"method": method, "url": url}
        if status_code is not None:
            data["status_code"] = str(status_code)
        return self.add_breadcrumb(f"{method} {url}", category="http", type="http", data=data)

    def add_navigation_breadcrumb(self, from_location: str, to_location: str) -> bool:
        """Record a navigation between two locations."""
        return self.add_breadcrumb(
            f"Navigation: {from_location} -> {to_location}",
            category="navigation",
            type="navigation",
            data={"from": from_location, "to": to_location},
        )

    def add_query_breadcrumb(self, query: str, category: str = "query") -> bool:
        """Record a database query."""
        return self.add_breadcrumb(query, category=category, type="query")
