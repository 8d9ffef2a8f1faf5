"""Release and deployment markers on the current scope."""

from datetime import datetime, timezone

from watchpost.errors import require_text
from watchpost.scope.scope import ScopeStack


class ReleaseTracker:
    """Tags events with the running release and the deployment that shipped it.

    Args:
        scopes: Scope stack; markers are written to its current scope.
    """

    def __init__(self, scopes: ScopeStack) -> None:  # noqa: D107
        self._scopes = scopes

    def set_release(
        self,
        version: str,
        environment: str | None = None,
        commit_sha: str | None = None,
    ) -> None:
        """Set the ``release`` tag, plus ``environment`` and ``commit`` when given.

        Raises:
            InvalidInputError: If version is empty.
        """
        require_text(version, "release version")
        scope = self._scopes.current
        scope.set_tag("release", version)
        if environment:
            scope.set_tag("environment", environment)
        if commit_sha:
            scope.set_tag("commit", commit_sha)

    def set_deployment(
        self,
        deployment_id: str,
        deployed_by: str | None = None,
        deployed_at: datetime | None = None,
    ) -> None:
        """Set the ``deployment`` context; ``deployed_at`` defaults to now (UTC).

        Raises:
            InvalidInputError: If deployment_id is empty.
        """
        require_text(deployment_id, "deployment_id")
        self._scopes.current.set_context(
            "deployment",
            {
                "id": deployment_id,
                "deployed_by": deployed_by,
                "deployed_at": (deployed_at or datetime.now(timezone.utc)).isoformat(),
            },
        )
