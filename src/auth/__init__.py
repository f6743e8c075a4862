"""Authentication gateway and session context."""

from src.auth.gateway import AuthGateway
from src.auth.session import NotAuthenticatedError, SessionContext

__all__ = ["AuthGateway", "NotAuthenticatedError", "SessionContext"]
