"""Authentication state shared with the mutation entry points.

Credential checks happen outside this package; it only tracks who is
signed in. Any non-null identity may call mutation entry points.
"""

from typing import Any, Callable, List, Optional

from defense_index.exceptions import NotAuthenticatedError
from defense_index.logging_config import create_logger

logger = create_logger(__name__)

AuthListener = Callable[[Optional[Any]], None]


class AuthState:
    """Holds the current identity and pushes changes to subscribers."""

    def __init__(self, current_user: Optional[Any] = None):
        self._current_user = current_user
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[Any]:
        return self._current_user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Push the current identity now and on every change.

        Returns:
            Disposer that stops further notifications
        """
        self._listeners.append(listener)
        listener(self._current_user)

        def _dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _dispose

    def sign_in(self, identity: Any) -> None:
        if identity is None:
            raise ValueError("identity must not be None, use sign_out()")
        self._set(identity)
        logger.info(f"Admin signed in: {identity}")

    def sign_out(self) -> None:
        self._set(None)
        logger.info("Admin signed out")

    def require_user(self, action: str) -> Any:
        """Return the current identity or refuse ``action``.

        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        if self._current_user is None:
            raise NotAuthenticatedError(f"Sign in required to {action}")
        return self._current_user

    def _set(self, identity: Optional[Any]) -> None:
        self._current_user = identity
        for listener in list(self._listeners):
            listener(identity)
