"""The affected user on the current scope."""

from watchpost.errors import require_text
from watchpost.scope.models import User
from watchpost.scope.scope import ScopeStack
from watchpost.telemetry import USER_CLEARED, USER_SET, get_logger

log = get_logger(__name__)


class UserContext:
    """Sets and clears the user attached to captured events.

    Args:
        scopes: Scope stack; the user is stored on its current scope.
    """

    def __init__(self, scopes: ScopeStack) -> None:  # noqa: D107
        self._scopes = scopes

    @property
    def current_user(self) -> User | None:
        """User on the current scope."""
        return self._scopes.current.user

    def set_user(self, user: User) -> None:
        """Attach a user to subsequent events."""
        self._scopes.current.set_user(user)
        log.debug(USER_SET, user_id=user.id)

    def set_user_id(self, user_id: str) -> None:
        """Attach a user known only by ID.

        Raises:
            InvalidInputError: If user_id is empty.
        """
        require_text(user_id, "user_id")
        self.set_user(User(id=user_id))

    def clear_user(self) -> None:
        """Detach the user."""
        self._scopes.current.clear_user()
        log.debug(USER_CLEARED)
