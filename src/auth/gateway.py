"""
Authentication Gateway

Wraps the auth provider and the profile collection:
- sign_up creates the account, sets the display name and writes users/{uid}
- sign_in verifies credentials and loads (or backfills) the profile
- sign_out just records the event; sessions live in SessionContext

DESIGN DECISION: Every failure leaves as AuthError with a message the
screen can show as-is. Storage failures during sign-up/sign-in are
translated too, since the user only cares that they are not signed in.
"""

from typing import Optional

import structlog

from src.audit import AuditLogger
from src.models.user import AuthSession, UserProfile
from src.services.auth import AuthError, AuthProviderInterface
from src.services.storage import ProfileStorageInterface, StorageError


logger = structlog.get_logger(__name__)

DEFAULT_PROFILE_NAME = "User"
NETWORK_ERROR_CODE = "NETWORK_ERROR"


class AuthGateway:
    """Account operations used by the sign-in and sign-up screens."""

    def __init__(
        self,
        provider: AuthProviderInterface,
        profiles: ProfileStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._provider = provider
        self._profiles = profiles
        self._audit = audit_logger or AuditLogger()

    async def _log_auth_failure(self, action: str, email: str, error: AuthError) -> None:
        await self._audit.log_auth_failed(action, email, error.code, error.message)
        if error.code == NETWORK_ERROR_CODE:
            await self._audit.log_external_service_error("firebase_auth", error.message)

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
    ) -> tuple[AuthSession, UserProfile]:
        """
        Create an account and its profile document.

        Raises:
            AuthError: If the provider rejects the account or the profile
                cannot be written
        """
        email = email.strip()
        name = name.strip()
        try:
            session = await self._provider.create_account(email, password)
            session = await self._provider.update_display_name(session, name)
            profile = UserProfile(uid=session.uid, name=name, email=email)
            await self._profiles.save_profile(profile)
        except AuthError as e:
            await self._log_auth_failure("sign_up", email, e)
            raise
        except StorageError as e:
            await self._audit.log_storage_error("save_profile", str(e))
            raise AuthError("PROFILE_WRITE_FAILED", "Failed to create account. Please try again.") from e

        await self._audit.log_signed_up(session.uid, email)
        await self._audit.log_profile_created(session.uid, name)
        return session, profile

    async def sign_in(self, email: str, password: str) -> tuple[AuthSession, UserProfile]:
        """
        Sign in and load the profile.

        Accounts created outside this app may have no profile document;
        one is created from the display name (or "User").

        Raises:
            AuthError: If the credentials are rejected
        """
        email = email.strip()
        try:
            session = await self._provider.sign_in_with_password(email, password)
        except AuthError as e:
            await self._log_auth_failure("sign_in", email, e)
            raise

        profile = await self.get_profile(session.uid)
        if profile is None:
            profile = UserProfile(
                uid=session.uid,
                name=session.display_name or DEFAULT_PROFILE_NAME,
                email=session.email or email,
            )
            try:
                await self._profiles.save_profile(profile)
                await self._audit.log_profile_created(session.uid, profile.name)
            except StorageError as e:
                # Still signed in; the profile is rebuilt next time
                logger.warning("default_profile_not_saved", uid=session.uid, error=str(e))
                await self._audit.log_storage_error("save_profile", str(e), user_id=session.uid)

        await self._audit.log_signed_in(session.uid, email)
        return session, profile

    async def sign_out(self, session: Optional[AuthSession]) -> None:
        await self._audit.log_signed_out(session.uid if session else None)

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        """The stored profile, or None when missing or unreadable."""
        try:
            return await self._profiles.get_profile(uid)
        except StorageError as e:
            logger.error("profile_lookup_failed", uid=uid, error=str(e))
            return None

    async def verify_session(self, session: AuthSession) -> AuthSession:
        """
        Confirm the session's token is still accepted by the provider.

        Raises:
            AuthError: If the token was revoked or has expired
        """
        return await self._provider.lookup_account(session)
