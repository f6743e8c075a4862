"""
Firebase Authentication over the Identity Toolkit REST API

DESIGN DECISION: The Admin SDK cannot verify passwords, so email/password
sign-in goes through the same REST endpoints the Firebase client SDKs use:
- accounts:signUp
- accounts:signInWithPassword
- accounts:update

Requests are made with httpx. Nothing is retried: a failed call surfaces
once to the user.
"""

from typing import Any, Optional

import httpx
import structlog

from src.config import get_settings
from src.models.user import AuthSession
from src.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    auth_error_from_code,
)


logger = structlog.get_logger(__name__)


class FirebaseAuthProvider(AuthProviderInterface):
    """
    Email/password provider backed by Firebase Authentication.

    api_key/base_url/timeout default to FirebaseSettings. A transport can
    be injected (e.g. httpx.MockTransport) to run without the network.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if api_key is None or base_url is None or timeout is None:
            settings = get_settings().firebase
            api_key = api_key or settings.api_key
            base_url = base_url or settings.auth_base_url
            timeout = timeout or settings.request_timeout_seconds
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to accounts:{endpoint} and return the JSON body or raise AuthError."""
        url = f"{self._base_url}/accounts:{endpoint}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.warning("auth_request_failed", endpoint=endpoint, error=str(e))
            raise auth_error_from_code("NETWORK_ERROR") from e

        if resp.status_code >= 400:
            raise self._error_from_response(resp)
        return resp.json()

    @staticmethod
    def _error_from_response(resp: httpx.Response) -> AuthError:
        try:
            error = resp.json().get("error", {})
            code = error.get("message") or f"HTTP_{resp.status_code}"
        except ValueError:
            code = f"HTTP_{resp.status_code}"
        logger.info("auth_rejected", status=resp.status_code, code=code)
        return auth_error_from_code(code, fallback="Authentication failed. Please try again.")

    @staticmethod
    def _session_from(data: dict[str, Any], fallback: Optional[AuthSession] = None) -> AuthSession:
        return AuthSession(
            uid=data.get("localId") or (fallback.uid if fallback else ""),
            email=data.get("email") or (fallback.email if fallback else ""),
            display_name=data.get("displayName") or (fallback.display_name if fallback else None),
            id_token=data.get("idToken") or (fallback.id_token if fallback else ""),
            refresh_token=data.get("refreshToken") or (fallback.refresh_token if fallback else ""),
            expires_in_seconds=int(data.get("expiresIn") or 3600),
        )

    async def create_account(self, email: str, password: str) -> AuthSession:
        data = await self._post("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return self._session_from(data)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = await self._post("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return self._session_from(data)

    async def update_display_name(self, session: AuthSession, name: str) -> AuthSession:
        data = await self._post("update", {
            "idToken": session.id_token,
            "displayName": name,
            "returnSecureToken": True,
        })
        return self._session_from(data, fallback=session)

    async def lookup_account(self, session: AuthSession) -> AuthSession:
        data = await self._post("lookup", {"idToken": session.id_token})
        users = data.get("users") or []
        if not users:
            raise auth_error_from_code("USER_NOT_FOUND", fallback="Your session has expired. Please sign in again.")
        account = users[0]
        return session.model_copy(update={
            "email": account.get("email", session.email),
            "display_name": account.get("displayName", session.display_name),
        })
