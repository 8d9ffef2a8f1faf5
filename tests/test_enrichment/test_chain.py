"""Tests for the enricher chain."""

from watchpost.enrichment.base import EnrichmentContext, Enricher
from watchpost.enrichment.chain import EnricherChain
from watchpost.scope.models import User
from watchpost.scope.scope import Scope


class RecordingEnricher:
    """Enricher that records its invocation and sets one tag."""

    def __init__(self, order: int, name: str, calls: list[str]) -> None:
        self.order = order
        self.name = name
        self.calls = calls

    def enrich(self, context: EnrichmentContext) -> None:
        self.calls.append(self.name)
        context.set_tag("last", self.name)


class FailingEnricher:
    """Enricher that always raises."""

    order = 20

    def enrich(self, context: EnrichmentContext) -> None:
        raise RuntimeError("provider unavailable")


class TestEnricherChain:
    """Test ordering, isolation and merging."""

    def test_enrichers_satisfy_protocol(self) -> None:
        """Test that plain classes with order and enrich are Enrichers."""
        assert isinstance(RecordingEnricher(1, "a", []), Enricher)

    def test_runs_in_ascending_order(self) -> None:
        """Test that lower orders run first regardless of registration order."""
        calls: list[str] = []
        chain = EnricherChain(
            [RecordingEnricher(30, "c", calls), RecordingEnricher(10, "a", calls)]
        )
        chain.run(EnrichmentContext())
        assert calls == ["a", "c"]

    def test_equal_orders_keep_registration_order(self) -> None:
        """Test that ties run in the order they were registered."""
        calls: list[str] = []
        chain = EnricherChain(
            [RecordingEnricher(5, "first", calls), RecordingEnricher(5, "second", calls)]
        )
        context = chain.run(EnrichmentContext())
        assert calls == ["first", "second"]
        assert context.tags["last"] == "second"

    def test_failing_enricher_does_not_block_siblings(self) -> None:
        """Test that a raising enricher is skipped and the rest still run."""
        calls: list[str] = []
        chain = EnricherChain(
            [
                RecordingEnricher(10, "before", calls),
                FailingEnricher(),
                RecordingEnricher(30, "after", calls),
            ]
        )
        chain.run(EnrichmentContext())
        assert calls == ["before", "after"]

    def test_enrich_scope_merges_buffer(self) -> None:
        """Test that buffered values are merged into the scope, winning per key."""

        class UserTagger:
            order = 1

            def enrich(self, context: EnrichmentContext) -> None:
                context.set_tag("team", "payments")
                context.set_extra("attempt", 2)
                context.set_context("job", {"id": "j1"})
                context.user = User(id="7")

        scope = Scope()
        scope.set_tag("team", "unknown")
        scope.set_tag("region", "eu")

        EnricherChain([UserTagger()]).enrich_scope(scope, message="hello")

        assert scope.tags == {"team": "payments", "region": "eu"}
        assert scope.extra == {"attempt": 2}
        assert scope.contexts == {"job": {"id": "j1"}}
        assert scope.user is not None and scope.user.id == "7"

    def test_empty_chain_leaves_scope_untouched(self) -> None:
        """Test that an empty chain is a no-op."""
        scope = Scope()
        chain = EnricherChain()
        assert len(chain) == 0
        assert chain.enrich_scope(scope) is scope
        assert scope.tags == {}

    def test_context_exposes_capture(self) -> None:
        """Test that enrichers can inspect what is being captured."""
        seen: list[BaseException | None] = []

        class Inspector:
            order = 1

            def enrich(self, context: EnrichmentContext) -> None:
                seen.append(context.exception)

        error = ValueError("bad")
        EnricherChain([Inspector()]).enrich_scope(Scope(), exception=error)
        assert seen == [error]
