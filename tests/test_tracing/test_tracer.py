"""Tests for the tracer."""

import pytest

from watchpost.backend.memory import RecordingBackend
from watchpost.config.models import FilterRules, TracingOptions
from watchpost.filtering.engine import FilterEngine
from watchpost.sampling.sampler import Sampler, SamplingContext
from watchpost.scope.scope import ScopeStack
from watchpost.tracing.operations import Operations
from watchpost.tracing.span import Span, TransactionOptions
from watchpost.tracing.status import SpanStatus
from watchpost.tracing.tracer import Tracer


def _tracer(
    rate: float = 1.0,
    enabled: bool = True,
    backend: RecordingBackend | None = None,
    **sampler_kwargs: object,
) -> tuple[Tracer, RecordingBackend, ScopeStack]:
    backend = backend or RecordingBackend()
    scopes = ScopeStack()
    options = TracingOptions(enabled=enabled, sample_rate=rate)
    tracer = Tracer(
        scopes,
        backend,
        Sampler(rate, **sampler_kwargs),  # type: ignore[arg-type]
        options,
        FilterEngine(FilterRules(), options),
    )
    return tracer, backend, scopes


class ExplodingBackend(RecordingBackend):
    """Backend whose span delivery always fails."""

    def capture_span(self, unit: Span) -> None:
        raise ConnectionError("collector unreachable")


class TestStartTransaction:
    """Test transaction start, binding and delivery."""

    def test_transaction_is_bound_then_delivered(self) -> None:
        """Test that a transaction is current while active and delivered once finished."""
        tracer, backend, scopes = _tracer()
        tx = tracer.start_transaction("GET /orders", Operations.HTTP_SERVER)

        assert tx.sampled is True
        assert scopes.current.transaction is tx
        assert scopes.current.span is tx
        assert scopes.current.transaction_name == "GET /orders"

        tx.finish()
        tx.finish()

        assert scopes.current.transaction is None
        assert backend.transactions == [tx]

    def test_unsampled_transaction_is_not_delivered(self) -> None:
        """Test that an unsampled transaction works but is never delivered."""
        tracer, backend, _ = _tracer(rate=0.0)
        tx = tracer.start_transaction("GET /orders", Operations.HTTP_SERVER)
        child = tx.start_child(Operations.DB_QUERY)
        child.finish()
        tx.finish()
        assert tx.sampled is False
        assert tx.is_finished
        assert backend.spans == []

    def test_disabled_tracing_never_samples(self) -> None:
        """Test that disabled tracing returns unsampled transactions."""
        tracer, backend, _ = _tracer(enabled=False)
        with tracer.transaction("GET /orders", Operations.HTTP_SERVER) as tx:
            pass
        assert tx.sampled is False
        assert backend.spans == []

    def test_forced_sampling_overrides_sampler(self) -> None:
        """Test that options.sampled bypasses the sampler."""
        tracer, backend, _ = _tracer(rate=0.0)
        options = TransactionOptions(sampled=True).with_tag("queue", "emails")
        with tracer.transaction("send-emails", Operations.QUEUE_PROCESS, options) as tx:
            pass
        assert backend.transactions == [tx]
        assert tx.tags == {"queue": "emails"}

    def test_ignored_transaction_is_not_sampled(self) -> None:
        """Test that health check transactions are never sampled."""
        tracer, backend, _ = _tracer()
        with tracer.transaction("/health/live", Operations.HTTP_SERVER) as tx:
            pass
        assert tx.sampled is False
        assert backend.spans == []

    def test_sampler_receives_parent_decision(self) -> None:
        """Test that the upstream decision and custom data reach the sampler."""
        seen: list[SamplingContext] = []

        def sampler_fn(ctx: SamplingContext) -> float | None:
            seen.append(ctx)
            return None

        tracer, _, _ = _tracer(rate=1.0, traces_sampler=sampler_fn)
        tracer.start_transaction(
            "GET /orders",
            Operations.HTTP_SERVER,
            parent_sampled=True,
            custom_data={"tenant": "acme"},
            trace_id="a" * 32,
        ).finish()
        assert seen[0].parent_sampled is True
        assert seen[0].custom_data == {"tenant": "acme"}

    def test_continued_trace_keeps_trace_id(self) -> None:
        """Test that an upstream trace ID is reused."""
        tracer, _, _ = _tracer()
        tx = tracer.start_transaction(
            "GET /orders", Operations.HTTP_SERVER, trace_id="b" * 32, parent_span_id="c" * 16
        )
        assert tx.trace_id == "b" * 32
        assert tx.parent_span_id == "c" * 16

    def test_delivery_failure_is_not_raised(self) -> None:
        """Test that a failing backend does not break the caller."""
        tracer, _, scopes = _tracer(backend=ExplodingBackend())
        with tracer.transaction("GET /orders", Operations.HTTP_SERVER):
            pass
        assert scopes.current.transaction is None

    def test_raising_block_delivers_transaction_once(self) -> None:
        """Test that open children are finished and the transaction delivered once."""
        tracer, backend, _ = _tracer()
        with pytest.raises(ValueError):
            with tracer.transaction("import", Operations.TASK_BACKGROUND) as tx:
                first = tx.start_child(Operations.FILE_READ)
                second = tx.start_child(Operations.DB_SQL)
                raise ValueError("bad row")

        assert backend.transactions == [tx]
        assert tx.status == SpanStatus.INVALID_ARGUMENT
        assert first.is_finished and second.is_finished
        assert len(tx.to_dict()["spans"]) == 2


class TestStartSpan:
    """Test child spans on the current scope."""

    def test_no_active_span_returns_none(self) -> None:
        """Test that a span needs an active parent."""
        tracer, _, _ = _tracer()
        assert tracer.start_span(Operations.DB_QUERY) is None
        with tracer.span(Operations.DB_QUERY) as span:
            assert span is None

    def test_child_becomes_current_until_finished(self) -> None:
        """Test that the scope's span follows the innermost active span."""
        tracer, _, scopes = _tracer()
        with tracer.transaction("GET /orders", Operations.HTTP_SERVER) as tx:
            with tracer.span(Operations.DB_QUERY, "SELECT") as span:
                assert span is not None
                assert scopes.current.span is span
                assert span.parent_span_id == tx.span_id
            assert scopes.current.span is tx


class TestTraced:
    """Test the tracing decorator."""

    def test_sync_function_starts_transaction(self) -> None:
        """Test that a top-level call becomes a transaction."""
        tracer, backend, _ = _tracer()

        @tracer.traced(Operations.TASK_FUNCTION)
        def rebuild_index() -> int:
            return 3

        assert rebuild_index() == 3
        assert len(backend.transactions) == 1
        assert backend.transactions[0].name.endswith("rebuild_index")

    def test_nested_call_becomes_child_span(self) -> None:
        """Test that a call inside an active span becomes its child."""
        tracer, backend, _ = _tracer()

        @tracer.traced(Operations.DB_QUERY, name="load orders")
        def load() -> list[int]:
            return [1]

        with tracer.transaction("GET /orders", Operations.HTTP_SERVER) as tx:
            load()

        assert backend.transactions == [tx]
        assert [c.description for c in tx.children] == ["load orders"]

    def test_call_after_transaction_starts_its_own(self) -> None:
        """Test that a call after the enclosing transaction ended is not attached to it."""
        tracer, backend, _ = _tracer()

        @tracer.traced(Operations.DB_QUERY, name="load orders")
        def load() -> list[int]:
            return [1]

        with tracer.transaction("GET /orders", Operations.HTTP_SERVER) as tx:
            pass
        load()

        assert tx.children == []
        assert [t.name for t in backend.transactions] == ["GET /orders", "load orders"]

    @pytest.mark.asyncio
    async def test_async_function_records_error_status(self) -> None:
        """Test that an async function's exception sets the status and propagates."""
        tracer, backend, _ = _tracer()

        @tracer.traced(Operations.HTTP_CLIENT, name="fetch rates")
        async def fetch() -> None:
            raise TimeoutError()

        with pytest.raises(TimeoutError):
            await fetch()

        assert backend.transactions[0].status == SpanStatus.DEADLINE_EXCEEDED
