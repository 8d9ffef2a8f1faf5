"""Performance monitoring: starting transactions and spans on the current scope.

The Tracer binds transactions to the current scope of a ScopeStack, so
events captured while a transaction is active carry its trace and span
IDs. Finished transactions are handed to the backend once, and only when
sampled.
"""

import functools
import inspect
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from watchpost.config.models import TracingOptions
from watchpost.errors import require_text
from watchpost.sampling.sampler import Sampler, SamplingContext
from watchpost.scope.scope import Scope, ScopeStack
from watchpost.telemetry import (
    DELIVERY_FAILED,
    SPAN_NO_PARENT,
    TRANSACTION_FINISHED,
    TRANSACTION_NOT_SAMPLED,
    TRANSACTION_STARTED,
    get_logger,
)
from watchpost.tracing.span import Span, Transaction, TransactionOptions

if TYPE_CHECKING:
    from watchpost.backend.base import BackendClient
    from watchpost.filtering.engine import FilterEngine

log = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class Tracer:
    """Starts transactions and spans and delivers finished transactions.

    Args:
        scopes: Scope stack whose current scope holds the active transaction.
        backend: Receives finished, sampled transactions.
        sampler: Resolves the sampling decision for new transactions.
        options: Tracing options; tracing is off unless ``options.enabled``.
        filter_engine: Used to drop ignored transaction names.
    """

    def __init__(
        self,
        scopes: ScopeStack,
        backend: "BackendClient",
        sampler: Sampler,
        options: TracingOptions | None = None,
        filter_engine: "FilterEngine | None" = None,
    ) -> None:  # noqa: D107
        self._scopes = scopes
        self._backend = backend
        self._sampler = sampler
        self._options = options or TracingOptions()
        self._filter_engine = filter_engine

    @property
    def enabled(self) -> bool:
        """Whether transactions can be sampled at all."""
        return self._options.enabled

    @property
    def current_transaction(self) -> Transaction | None:
        """Transaction bound to the current scope."""
        return self._scopes.current.transaction

    @property
    def current_span(self) -> Span | None:
        """Innermost active span on the current scope."""
        return self._scopes.current.span

    def _decide(
        self,
        name: str,
        op: str,
        options: TransactionOptions,
        parent_sampled: bool | None,
        custom_data: dict[str, Any] | None,
    ) -> bool:
        if not self._options.enabled:
            return False
        if self._filter_engine is not None and self._filter_engine.should_ignore_transaction(name):
            return False
        if options.sampled is not None:
            return options.sampled
        context = SamplingContext(
            transaction_name=name,
            operation=op,
            parent_sampled=parent_sampled,
            custom_data=dict(custom_data or {}),
        )
        return self._sampler.should_sample(context)

    def start_transaction(
        self,
        name: str,
        op: str,
        options: TransactionOptions | None = None,
        parent_sampled: bool | None = None,
        custom_data: dict[str, Any] | None = None,
        trace_id: str | None = None,
        parent_span_id: str | None = None,
    ) -> Transaction:
        """Start a transaction.

        Unsampled transactions behave exactly like sampled ones for the
        caller; they are simply not delivered.

        Args:
            name: Transaction name.
            op: Operation name.
            options: Description, scope binding, forced sampling, initial data.
            parent_sampled: Upstream sampling decision when continuing a trace.
            custom_data: Data passed to the dynamic sampler.
            trace_id: Upstream trace ID when continuing a trace.
            parent_span_id: Upstream span ID when continuing a trace.

        Returns:
            The active transaction.

        Raises:
            InvalidInputError: If name or op is empty, or the dynamic sampler
                returns an out-of-range rate.
        """
        require_text(name, "transaction name")
        require_text(op, "operation")
        options = options or TransactionOptions()
        sampled = self._decide(name, op, options, parent_sampled, custom_data)

        transaction = Transaction(
            name,
            op,
            options.description,
            trace_id=trace_id,
            parent_span_id=parent_span_id,
            sampled=sampled,
        )
        for key, value in options.tags.items():
            transaction.set_tag(key, value)
        for key, value in options.extra.items():
            transaction.set_extra(key, value)

        bound_scope: Scope | None = None
        if options.bind_to_scope:
            bound_scope = self._scopes.current
            bound_scope.transaction = transaction
            bound_scope.span = transaction
            bound_scope.set_transaction_name(name)

        transaction.on_finish(lambda unit: self._on_transaction_finished(unit, bound_scope))
        log.debug(
            TRANSACTION_STARTED,
            name=name,
            op=op,
            trace_id=transaction.trace_id,
            sampled=sampled,
        )
        return transaction

    def _on_transaction_finished(self, unit: Span, scope: Scope | None) -> None:
        if scope is not None and scope.transaction is unit:
            scope.transaction = None
            scope.span = None

        name = unit.name if isinstance(unit, Transaction) else unit.op
        log.debug(
            TRANSACTION_FINISHED,
            name=name,
            status=unit.status.value,
            duration_ms=unit.duration_ms,
            sampled=unit.sampled,
        )
        if not unit.sampled:
            log.debug(TRANSACTION_NOT_SAMPLED, name=name)
            return
        try:
            self._backend.capture_span(unit)
        except Exception as e:
            log.warning(DELIVERY_FAILED, kind="transaction", name=name, error=str(e))

    def start_span(self, op: str, description: str | None = None) -> Span | None:
        """Start a child of the current span and make it current.

        Args:
            op: Operation name.
            description: Optional description.

        Returns:
            The new span, or None when no span is active on the current scope.
        """
        require_text(op, "operation")
        scope = self._scopes.current
        parent = scope.span
        if parent is None or parent.is_finished:
            log.debug(SPAN_NO_PARENT, op=op)
            return None

        child = parent.start_child(op, description)
        scope.span = child

        def restore(unit: Span) -> None:
            if scope.span is unit:
                scope.span = parent

        child.on_finish(restore)
        return child

    @contextmanager
    def transaction(
        self,
        name: str,
        op: str,
        options: TransactionOptions | None = None,
        **kwargs: Any,
    ) -> Iterator[Transaction]:
        """Run a block inside a transaction.

        The transaction finishes when the block exits: with the status derived
        from the exception if one escapes, else OK (or the explicitly set
        status). Exceptions always propagate.

        Yields:
            The active transaction.
        """
        transaction = self.start_transaction(name, op, options, **kwargs)
        with transaction:
            yield transaction

    @contextmanager
    def span(self, op: str, description: str | None = None) -> Iterator[Span | None]:
        """Run a block inside a child span of the current span.

        Yields:
            The span, or None when no span is active.
        """
        child = self.start_span(op, description)
        if child is None:
            yield None
            return
        with child:
            yield child

    @contextmanager
    def _unit(self, op: str, name: str) -> Iterator[Span]:
        child = self.start_span(op, name)
        if child is None:
            with self.transaction(name, op) as transaction:
                yield transaction
            return
        with child:
            yield child

    def traced(self, op: str, name: str | None = None) -> Callable[[F], F]:
        """Decorator that runs a function in a span.

        Inside an active span the function becomes a child span; otherwise it
        starts its own transaction. Works with sync and async functions.

        Args:
            op: Operation name.
            name: Span description or transaction name; defaults to the
                function's qualified name.
        """

        def decorator(fn: F) -> F:
            unit_name = name or fn.__qualname__

            @functools.wraps(fn)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                with self._unit(op, unit_name):
                    return fn(*args, **kwargs)

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with self._unit(op, unit_name):
                    return await fn(*args, **kwargs)

            if inspect.iscoroutinefunction(fn):
                return async_wrapper  # type: ignore[return-value]
            return sync_wrapper  # type: ignore[return-value]

        return decorator
