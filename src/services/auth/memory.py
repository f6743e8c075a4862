"""
In-Memory Authentication Provider

Keeps accounts in a dict and applies the same rules and error codes as
Firebase Authentication. Used by tests and offline runs.
"""

import hashlib
from typing import Optional
from uuid import uuid4

from src.models.user import AuthSession
from src.services.auth.interface import (
    AuthProviderInterface,
    auth_error_from_code,
)


MIN_PROVIDER_PASSWORD_LENGTH = 6


class InMemoryAuthProvider(AuthProviderInterface):
    """Dict-backed email/password accounts. Passwords are stored hashed."""

    def __init__(self):
        # email -> (uid, password_hash, display_name)
        self._accounts: dict[str, tuple[str, str, Optional[str]]] = {}

    @staticmethod
    def _hash(password: str) -> str:
        return hashlib.sha256(password.encode()).hexdigest()

    @staticmethod
    def _new_session(uid: str, email: str, display_name: Optional[str]) -> AuthSession:
        return AuthSession(
            uid=uid,
            email=email,
            display_name=display_name,
            id_token=uuid4().hex,
            refresh_token=uuid4().hex,
        )

    async def create_account(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        if "@" not in email:
            raise auth_error_from_code("INVALID_EMAIL")
        if email in self._accounts:
            raise auth_error_from_code("EMAIL_EXISTS")
        if len(password) < MIN_PROVIDER_PASSWORD_LENGTH:
            raise auth_error_from_code("WEAK_PASSWORD")

        uid = uuid4().hex
        self._accounts[email] = (uid, self._hash(password), None)
        return self._new_session(uid, email, None)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        account = self._accounts.get(email)
        if account is None:
            raise auth_error_from_code("EMAIL_NOT_FOUND")
        uid, password_hash, display_name = account
        if password_hash != self._hash(password):
            raise auth_error_from_code("INVALID_PASSWORD")
        return self._new_session(uid, email, display_name)

    async def update_display_name(self, session: AuthSession, name: str) -> AuthSession:
        email = session.email.strip().lower()
        account = self._accounts.get(email)
        if account is None:
            raise auth_error_from_code("EMAIL_NOT_FOUND")
        uid, password_hash, _ = account
        self._accounts[email] = (uid, password_hash, name)
        return session.model_copy(update={"display_name": name})

    async def lookup_account(self, session: AuthSession) -> AuthSession:
        account = self._accounts.get(session.email.strip().lower())
        if account is None or account[0] != session.uid:
            raise auth_error_from_code("USER_NOT_FOUND", fallback="Your session has expired. Please sign in again.")
        return session.model_copy(update={"display_name": account[2]})
