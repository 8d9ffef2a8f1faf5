"""Ordered, best-effort event enrichment."""

from watchpost.enrichment.base import EnrichmentContext, Enricher
from watchpost.enrichment.chain import EnricherChain
from watchpost.enrichment.enrichers import (
    EnvironmentEnricher,
    ReleaseEnricher,
    RequestEnricher,
    RequestProvider,
    UserEnricher,
    UserProvider,
)

__all__ = [
    "EnricherChain",
    "Enricher",
    "EnrichmentContext",
    "EnvironmentEnricher",
    "ReleaseEnricher",
    "RequestEnricher",
    "RequestProvider",
    "UserEnricher",
    "UserProvider",
]
