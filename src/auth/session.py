"""
Session Context

Holds who is signed in. Screens get the context passed in explicitly and
subscribe to it instead of reading a global.

Listeners receive the current profile (or None) immediately on subscribe
and again after every change.
"""

from collections.abc import Callable
from typing import Optional

import structlog

from src.auth.gateway import AuthGateway
from src.models.user import AuthSession, UserProfile


logger = structlog.get_logger(__name__)

Listener = Callable[[Optional[UserProfile]], None]


class NotAuthenticatedError(Exception):
    """An operation needed a signed-in user and there is none."""
    pass


class SessionContext:
    """Current session, profile and loading flag, with change notification."""

    def __init__(self, gateway: AuthGateway):
        self._gateway = gateway
        self._session: Optional[AuthSession] = None
        self._profile: Optional[UserProfile] = None
        self._listeners: list[Listener] = []
        self.loading = False

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def user_id(self) -> Optional[str]:
        return self._session.uid if self._session else None

    def require_user_id(self) -> str:
        """
        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        if self._session is None:
            raise NotAuthenticatedError("You must be logged in")
        return self._session.uid

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)
        listener(self._profile)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._profile)
            except Exception as e:
                # One broken listener must not block the others
                logger.error("session_listener_failed", error=str(e))

    def _set(self, session: Optional[AuthSession], profile: Optional[UserProfile]) -> None:
        self._session = session
        self._profile = profile
        self._notify()

    async def sign_up(self, name: str, email: str, password: str) -> UserProfile:
        self.loading = True
        try:
            session, profile = await self._gateway.sign_up(name, email, password)
        finally:
            self.loading = False
        self._set(session, profile)
        return profile

    async def sign_in(self, email: str, password: str) -> UserProfile:
        self.loading = True
        try:
            session, profile = await self._gateway.sign_in(email, password)
        finally:
            self.loading = False
        self._set(session, profile)
        return profile

    async def sign_out(self) -> None:
        session = self._session
        self._set(None, None)
        await self._gateway.sign_out(session)

    async def refresh_profile(self) -> Optional[UserProfile]:
        """Reload the profile document of the signed-in user."""
        if self._session is None:
            return None
        self.loading = True
        try:
            profile = await self._gateway.get_profile(self._session.uid)
        finally:
            self.loading = False
        self._set(self._session, profile or self._profile)
        return self._profile
