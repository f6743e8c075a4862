"""Authentication provider package."""

from src.services.auth.interface import (
    AUTH_ERROR_MESSAGES,
    AuthError,
    AuthProviderInterface,
    auth_error_from_code,
)
from src.services.auth.firebase_auth import FirebaseAuthProvider
from src.services.auth.memory import InMemoryAuthProvider

__all__ = [
    "AUTH_ERROR_MESSAGES",
    "AuthError",
    "AuthProviderInterface",
    "FirebaseAuthProvider",
    "InMemoryAuthProvider",
    "auth_error_from_code",
]
