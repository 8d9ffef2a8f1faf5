"""Built-in enrichers.

Request and user data are read through provider callables so the enrichers
stay independent of any web framework. A provider returning None means
"nothing to add" for the current capture.
"""

import getpass
import os
import platform
import sys
from typing import Callable

from watchpost.enrichment.base import EnrichmentContext
from watchpost.scope.models import RequestInfo, User

RequestProvider = Callable[[], RequestInfo | None]
UserProvider = Callable[[], User | None]


def _current_user_name() -> str | None:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No passwd entry, as in some minimal containers
        return None


class ReleaseEnricher:
    """Tags every event with the release, environment and commit."""

    order = 10

    def __init__(
        self,
        release: str | None,
        environment: str | None = None,
        commit_sha: str | None = None,
    ) -> None:  # noqa: D107
        self.release = release
        self.environment = environment
        self.commit_sha = commit_sha

    def enrich(self, context: EnrichmentContext) -> None:  # noqa: D102
        if self.release:
            context.set_tag("release", self.release)
        if self.environment:
            context.set_tag("environment", self.environment)
        if self.commit_sha:
            context.set_tag("commit", self.commit_sha)


class EnvironmentEnricher:
    """Adds runtime, OS and process details.

    Sets the ``runtime`` and ``app`` contexts and the ``runtime`` and ``os``
    tags.
    """

    order = 50

    def __init__(self, app_name: str | None = None, app_version: str | None = None) -> None:  # noqa: D107
        self.app_name = app_name
        self.app_version = app_version

    def enrich(self, context: EnrichmentContext) -> None:  # noqa: D102
        runtime = f"{platform.python_implementation()} {platform.python_version()}"
        os_description = f"{platform.system()} {platform.release()}".strip()
        app_name = self.app_name
        if app_name is None and sys.argv and sys.argv[0]:
            app_name = os.path.basename(sys.argv[0])

        context.set_context(
            "runtime",
            {
                "name": platform.python_implementation(),
                "version": platform.python_version(),
                "build": sys.version,
                "os": os_description,
                "os_architecture": platform.machine(),
            },
        )
        context.set_context(
            "app",
            {
                "name": app_name,
                "version": self.app_version,
                "process_id": os.getpid(),
                "machine_name": platform.node(),
                "user_name": _current_user_name(),
                "current_directory": os.getcwd(),
            },
        )
        context.set_tag("runtime", runtime)
        context.set_tag("os", os_description)


class RequestEnricher:
    """Adds HTTP request tags, query string and the ``request`` context.

    Args:
        provider: Returns the request being served, or None outside a request.
    """

    order = 100

    def __init__(self, provider: RequestProvider) -> None:  # noqa: D107
        self._provider = provider

    def enrich(self, context: EnrichmentContext) -> None:  # noqa: D102
        request = self._provider()
        if request is None:
            return

        if request.method:
            context.set_tag("http.method", request.method)
        if request.url:
            context.set_tag("http.url", request.url)
        if request.query_string:
            context.set_extra("http.query_string", request.query_string)

        context.set_context(
            "request",
            {
                "method": request.method,
                "url": request.url,
                "query_string": request.query_string or None,
                "content_type": request.content_type,
                "content_length": request.content_length,
            },
        )

        if request.status_code is not None:
            context.set_tag("http.status_code", str(request.status_code))


class UserEnricher:
    """Sets the event user from the current authenticated identity.

    Args:
        provider: Returns the authenticated user, or None when anonymous.
    """

    order = 200

    def __init__(self, provider: UserProvider) -> None:  # noqa: D107
        self._provider = provider

    def enrich(self, context: EnrichmentContext) -> None:  # noqa: D102
        user = self._provider()
        if user is None or user.is_empty:
            return
        context.user = user
