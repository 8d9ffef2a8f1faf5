"""Mutable per-capture context and the nested scope stack.

A Scope collects everything attached to an event besides the exception or
message itself: tags, extra data, structured contexts, the user,
breadcrumbs, fingerprint and severity. A Scope is not thread-safe; the
stack keeps one chain of scopes per asyncio task or thread so concurrent
operations never share a pushed scope.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from watchpost.errors import IllegalStateError, require_text
from watchpost.scope.models import (
    Attachment,
    Breadcrumb,
    RequestInfo,
    SeverityLevel,
    User,
)
from watchpost.telemetry import SCOPE_POPPED, SCOPE_PUSHED, get_logger

if TYPE_CHECKING:
    from watchpost.tracing.span import Span, Transaction

log = get_logger(__name__)

DEFAULT_MAX_BREADCRUMBS = 100


class Scope:
    """Context attached to captured events.

    Args:
        max_breadcrumbs: Ring buffer size; the oldest breadcrumb is evicted
            once the buffer is full.
    """

    def __init__(self, max_breadcrumbs: int = DEFAULT_MAX_BREADCRUMBS) -> None:  # noqa: D107
        self.tags: dict[str, str] = {}
        self.extra: dict[str, Any] = {}
        self.contexts: dict[str, Any] = {}
        self.user: User | None = None
        self.breadcrumbs: deque[Breadcrumb] = deque(maxlen=max_breadcrumbs)
        self.fingerprint: list[str] = []
        self.level: SeverityLevel | None = None
        self.transaction_name: str | None = None
        self.transaction: "Transaction | None" = None
        self.span: "Span | None" = None
        self.attachments: list[Attachment] = []
        self.request: RequestInfo | None = None

    @property
    def max_breadcrumbs(self) -> int:
        """Breadcrumb ring buffer capacity."""
        return self.breadcrumbs.maxlen or 0

    def set_tag(self, key: str, value: str) -> None:
        """Set a tag (last write wins)."""
        require_text(key, "tag key")
        self.tags[key] = str(value)

    def remove_tag(self, key: str) -> None:
        """Remove a tag if present."""
        self.tags.pop(key, None)

    def set_extra(self, key: str, value: Any) -> None:
        """Set an arbitrary extra value."""
        require_text(key, "extra key")
        self.extra[key] = value

    def set_context(self, key: str, value: Any) -> None:
        """Set a structured context (e.g. "runtime", "request")."""
        require_text(key, "context key")
        self.contexts[key] = value

    def set_user(self, user: User | None) -> None:
        """Set the affected user; None clears it."""
        self.user = user

    def clear_user(self) -> None:
        """Remove the affected user."""
        self.user = None

    def add_breadcrumb(self, breadcrumb: Breadcrumb) -> None:
        """Append a breadcrumb, evicting the oldest when full."""
        if self.breadcrumbs.maxlen == 0:
            return
        self.breadcrumbs.append(breadcrumb)

    def clear_breadcrumbs(self) -> None:
        """Drop every breadcrumb."""
        self.breadcrumbs.clear()

    def set_fingerprint(self, fingerprint: list[str]) -> None:
        """Set the grouping fingerprint."""
        self.fingerprint = list(fingerprint)

    def set_level(self, level: SeverityLevel | None) -> None:
        """Override the severity of events captured with this scope."""
        self.level = level

    def set_transaction_name(self, name: str | None) -> None:
        """Set the transaction name reported on events."""
        self.transaction_name = name

    def add_attachment(self, attachment: Attachment) -> None:
        """Attach a file to events captured with this scope."""
        self.attachments.append(attachment)

    def clear_attachments(self) -> None:
        """Drop every attachment."""
        self.attachments.clear()

    def set_request(self, request: RequestInfo | None) -> None:
        """Set the inbound request context."""
        self.request = request

    def clear(self) -> None:
        """Reset all data, keeping the breadcrumb capacity."""
        self.tags.clear()
        self.extra.clear()
        self.contexts.clear()
        self.user = None
        self.breadcrumbs.clear()
        self.fingerprint = []
        self.level = None
        self.transaction_name = None
        self.transaction = None
        self.span = None
        self.attachments = []
        self.request = None

    def copy(self) -> "Scope":
        """Create an independent copy.

        Containers are copied so writes to the copy never leak back; the
        active transaction and span are shared because a nested scope
        continues the same trace.
        """
        clone = Scope(max_breadcrumbs=self.max_breadcrumbs)
        clone.tags = dict(self.tags)
        clone.extra = dict(self.extra)
        clone.contexts = dict(self.contexts)
        clone.user = self.user.model_copy(deep=True) if self.user is not None else None
        clone.breadcrumbs.extend(self.breadcrumbs)
        clone.fingerprint = list(self.fingerprint)
        clone.level = self.level
        clone.transaction_name = self.transaction_name
        clone.transaction = self.transaction
        clone.span = self.span
        clone.attachments = list(self.attachments)
        if self.request is not None:
            clone.request = replace(
                self.request,
                headers=dict(self.request.headers),
                cookies=dict(self.request.cookies),
            )
        return clone

    def to_dict(self) -> dict[str, Any]:
        """Serialize the scope's event-facing data."""
        result: dict[str, Any] = {
            "tags": dict(self.tags),
            "extra": dict(self.extra),
            "contexts": dict(self.contexts),
            "breadcrumbs": [b.to_dict() for b in self.breadcrumbs],
            "fingerprint": list(self.fingerprint),
        }
        if self.user is not None:
            result["user"] = self.user.model_dump(exclude_none=True)
        if self.level is not None:
            result["level"] = self.level.value
        if self.transaction_name:
            result["transaction"] = self.transaction_name
        if self.request is not None:
            result["request"] = self.request.to_dict()
        return result


class ScopeStack:
    """Stack of nested scopes; the top is the current scope.

    The stack lives in a context variable, so every asyncio task and thread
    sees its own pushes and pops. Tasks start from a snapshot of the stack
    their creator had; threads start from the root.

    Args:
        root: Bottom scope. It can be configured but never popped.
    """

    def __init__(self, root: Scope | None = None) -> None:  # noqa: D107
        self._root = root or Scope()
        self._stack: ContextVar[tuple[Scope, ...]] = ContextVar(
            f"watchpost_scopes_{id(self):x}", default=(self._root,)
        )

    @property
    def current(self) -> Scope:
        """The innermost scope of the calling context."""
        return self._stack.get()[-1]

    @property
    def root(self) -> Scope:
        """The bottom scope shared by every context."""
        return self._root

    @property
    def depth(self) -> int:
        """Number of scopes on the calling context's stack (root included)."""
        return len(self._stack.get())

    def push(self) -> Scope:
        """Push a copy of the current scope and return it."""
        stack = self._stack.get()
        scope = stack[-1].copy()
        self._stack.set((*stack, scope))
        log.debug(SCOPE_PUSHED, depth=len(stack) + 1)
        return scope

    def pop(self) -> Scope:
        """Pop the innermost scope.

        Raises:
            IllegalStateError: If only the root scope is left.
        """
        stack = self._stack.get()
        if len(stack) == 1:
            raise IllegalStateError("Cannot pop the root scope")
        self._stack.set(stack[:-1])
        log.debug(SCOPE_POPPED, depth=len(stack) - 1)
        return stack[-1]

    @contextmanager
    def scoped(self) -> Iterator[Scope]:
        """Push a scope for the duration of the block.

        On exit the calling context's stack is restored to what it was on
        entry, dropping any nested pushes the block leaked.
        """
        stack = self._stack.get()
        scope = stack[-1].copy()
        token = self._stack.set((*stack, scope))
        log.debug(SCOPE_PUSHED, depth=len(stack) + 1)
        try:
            yield scope
        finally:
            self._stack.reset(token)
            log.debug(SCOPE_POPPED, depth=len(stack))
