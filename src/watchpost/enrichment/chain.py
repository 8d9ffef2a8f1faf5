"""Ordered, failure-isolated execution of enrichers."""

from collections.abc import Iterable

from watchpost.enrichment.base import EnrichmentContext, Enricher
from watchpost.scope.models import SeverityLevel
from watchpost.scope.scope import Scope
from watchpost.telemetry import ENRICHER_FAILED, ENRICHMENT_APPLIED, get_logger

log = get_logger(__name__)


class EnricherChain:
    """Runs enrichers in ascending order and merges their output into a Scope.

    One enricher raising never blocks its siblings or the capture: the
    failure is logged and the chain moves on.

    Args:
        enrichers: Enrichers in registration order.
    """

    def __init__(self, enrichers: Iterable[Enricher] = ()) -> None:  # noqa: D107
        # sorted() is stable, so equal orders keep registration order
        self._enrichers: list[Enricher] = sorted(enrichers, key=lambda e: e.order)

    @property
    def enrichers(self) -> list[Enricher]:
        """Enrichers in execution order."""
        return list(self._enrichers)

    def __len__(self) -> int:
        return len(self._enrichers)

    def run(self, context: EnrichmentContext) -> EnrichmentContext:
        """Invoke every enricher against the shared buffer.

        Args:
            context: Enrichment buffer.

        Returns:
            The same buffer, after every enricher has had its turn.
        """
        for enricher in self._enrichers:
            try:
                enricher.enrich(context)
            except Exception as e:
                log.warning(
                    ENRICHER_FAILED,
                    enricher=type(enricher).__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return context

    @staticmethod
    def apply(scope: Scope, context: EnrichmentContext) -> Scope:
        """Merge a filled buffer into a scope, buffer values winning per key."""
        for key, value in context.tags.items():
            scope.set_tag(key, value)
        for key, value in context.extra.items():
            scope.set_extra(key, value)
        for key, value in context.contexts.items():
            scope.set_context(key, value)
        if context.user is not None:
            scope.set_user(context.user)
        return scope

    def enrich_scope(
        self,
        scope: Scope,
        exception: BaseException | None = None,
        message: str | None = None,
        level: SeverityLevel = SeverityLevel.ERROR,
    ) -> Scope:
        """Run the chain for one capture and merge the result into ``scope``."""
        if not self._enrichers:
            return scope
        context = self.run(EnrichmentContext(exception=exception, message=message, level=level))
        self.apply(scope, context)
        log.debug(
            ENRICHMENT_APPLIED,
            enrichers=len(self._enrichers),
            tags=len(context.tags),
            contexts=len(context.contexts),
        )
        return scope
