"""Tests for the built-in enrichers."""

import platform

from watchpost.enrichment.base import EnrichmentContext
from watchpost.enrichment.enrichers import (
    EnvironmentEnricher,
    ReleaseEnricher,
    RequestEnricher,
    UserEnricher,
)
from watchpost.scope.models import RequestInfo, User


class TestReleaseEnricher:
    """Test release tagging."""

    def test_sets_release_environment_and_commit(self) -> None:
        """Test that all configured release fields become tags."""
        context = EnrichmentContext()
        ReleaseEnricher("2.4.1", "staging", "abc123").enrich(context)
        assert context.tags == {"release": "2.4.1", "environment": "staging", "commit": "abc123"}

    def test_skips_missing_values(self) -> None:
        """Test that unset fields add nothing."""
        context = EnrichmentContext()
        ReleaseEnricher(None).enrich(context)
        assert context.tags == {}


class TestEnvironmentEnricher:
    """Test runtime and host details."""

    def test_sets_runtime_and_app_contexts(self) -> None:
        """Test that runtime and app contexts and tags are populated."""
        context = EnrichmentContext()
        EnvironmentEnricher(app_name="billing", app_version="1.0").enrich(context)

        runtime = context.contexts["runtime"]
        app = context.contexts["app"]
        assert runtime["name"] == platform.python_implementation()
        assert runtime["version"] == platform.python_version()
        assert app["name"] == "billing"
        assert app["version"] == "1.0"
        assert isinstance(app["process_id"], int)
        assert context.tags["runtime"].startswith(platform.python_implementation())
        assert "os" in context.tags


class TestRequestEnricher:
    """Test request details."""

    def test_adds_request_tags_and_context(self) -> None:
        """Test that method, URL, query and status are recorded."""
        request = RequestInfo(
            method="GET", url="/orders/7", query_string="expand=items", status_code=500
        )
        context = EnrichmentContext()
        RequestEnricher(lambda: request).enrich(context)

        assert context.tags["http.method"] == "GET"
        assert context.tags["http.url"] == "/orders/7"
        assert context.tags["http.status_code"] == "500"
        assert context.extra["http.query_string"] == "expand=items"
        assert context.contexts["request"]["method"] == "GET"

    def test_no_request_adds_nothing(self) -> None:
        """Test that a provider returning None leaves the buffer empty."""
        context = EnrichmentContext()
        RequestEnricher(lambda: None).enrich(context)
        assert context.tags == {}
        assert context.contexts == {}


class TestUserEnricher:
    """Test user attribution."""

    def test_sets_authenticated_user(self) -> None:
        """Test that a known user is attached."""
        context = EnrichmentContext()
        UserEnricher(lambda: User(id="42", email="a@example.com")).enrich(context)
        assert context.user is not None
        assert context.user.id == "42"

    def test_anonymous_user_is_skipped(self) -> None:
        """Test that an empty or missing user is not attached."""
        context = EnrichmentContext()
        UserEnricher(lambda: User()).enrich(context)
        UserEnricher(lambda: None).enrich(context)
        assert context.user is None

    def test_builtin_orders(self) -> None:
        """Test that built-ins run release, environment, request, user."""
        orders = [
            ReleaseEnricher.order,
            EnvironmentEnricher.order,
            RequestEnricher.order,
            UserEnricher.order,
        ]
        assert orders == sorted(orders)
