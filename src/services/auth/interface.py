"""
Abstract Authentication Interface

The managed auth provider owns accounts and passwords; this app only asks it
to create an account, verify a password and set a display name. Provider
error codes are translated into messages a user can act on.
"""

from abc import ABC, abstractmethod

from src.models.user import AuthSession


# Provider error codes -> what the user is told
AUTH_ERROR_MESSAGES = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "WEAK_PASSWORD": "Password is too weak. Please choose a stronger password.",
    "INVALID_EMAIL": "Invalid email address.",
    "EMAIL_NOT_FOUND": "No account found with this email address.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many failed attempts. Please try again later.",
    "NETWORK_ERROR": "Could not reach the sign-in service. Please check your connection.",
}


class AuthError(Exception):
    """
    Authentication failed.

    `code` is the provider's error code, str(error) is the human-readable
    message to show.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


def auth_error_from_code(code: str, fallback: str = "") -> AuthError:
    """
    Build an AuthError from a provider code.

    Provider messages look like "WEAK_PASSWORD : Password should be at
    least 6 characters"; only the part before " : " is the code.
    """
    normalized = code.split(" : ")[0].strip().upper()
    message = AUTH_ERROR_MESSAGES.get(normalized) or fallback or code
    return AuthError(normalized, message)


class AuthProviderInterface(ABC):
    """Abstract interface for the email/password auth provider."""

    @abstractmethod
    async def create_account(self, email: str, password: str) -> AuthSession:
        """
        Create an email/password account and sign it in.

        Raises:
            AuthError: If the provider rejects the account
        """
        pass

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """
        Verify credentials and return a session.

        Raises:
            AuthError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def update_display_name(self, session: AuthSession, name: str) -> AuthSession:
        """Set the account's display name; returns the updated session."""
        pass

    @abstractmethod
    async def lookup_account(self, session: AuthSession) -> AuthSession:
        """
        Re-read the account behind a session's token.

        Raises:
            AuthError: If the token is no longer valid
        """
        pass
