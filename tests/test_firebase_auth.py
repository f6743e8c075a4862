"""Tests for the Firebase Authentication REST client (httpx.MockTransport, no network)."""

import json

import httpx
import pytest

from src.models.user import AuthSession
from src.services.auth import AuthError, FirebaseAuthProvider, auth_error_from_code


def make_provider(handler) -> FirebaseAuthProvider:
    return FirebaseAuthProvider(
        api_key="test-key",
        base_url="https://auth.test/v1",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def error_response(message: str, status: int = 400) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class TestErrorMapping:

    def test_known_codes(self):
        assert auth_error_from_code("EMAIL_EXISTS").message == "An account with this email already exists."
        assert auth_error_from_code("INVALID_PASSWORD").message == "Incorrect password."

    def test_code_with_detail_suffix(self):
        error = auth_error_from_code("WEAK_PASSWORD : Password should be at least 6 characters")
        assert error.code == "WEAK_PASSWORD"
        assert error.message == "Password is too weak. Please choose a stronger password."

    def test_unknown_code_uses_fallback(self):
        error = auth_error_from_code("SOMETHING_ODD", fallback="Authentication failed.")
        assert error.code == "SOMETHING_ODD"
        assert str(error) == "Authentication failed."


class TestFirebaseAuthProvider:

    @pytest.mark.asyncio
    async def test_sign_in_posts_credentials(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "localId": "uid-1",
                "email": "ana@example.com",
                "displayName": "Ana",
                "idToken": "id-token",
                "refreshToken": "refresh-token",
                "expiresIn": "3600",
            })

        session = await make_provider(handler).sign_in_with_password("ana@example.com", "secret1")

        assert seen["url"].startswith("https://auth.test/v1/accounts")
        assert seen["url"].endswith("signInWithPassword?key=test-key")
        assert seen["body"] == {
            "email": "ana@example.com",
            "password": "secret1",
            "returnSecureToken": True,
        }
        assert session.uid == "uid-1"
        assert session.display_name == "Ana"
        assert session.id_token == "id-token"
        assert session.expires_in_seconds == 3600

    @pytest.mark.asyncio
    async def test_sign_up_error_is_mapped(self):
        provider = make_provider(lambda request: error_response("EMAIL_EXISTS"))

        with pytest.raises(AuthError) as exc_info:
            await provider.create_account("ana@example.com", "secret1")

        assert exc_info.value.code == "EMAIL_EXISTS"
        assert exc_info.value.message == "An account with this email already exists."

    @pytest.mark.asyncio
    async def test_invalid_login_credentials(self):
        provider = make_provider(lambda request: error_response("INVALID_LOGIN_CREDENTIALS"))

        with pytest.raises(AuthError, match="Incorrect email or password."):
            await provider.sign_in_with_password("ana@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        provider = make_provider(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in_with_password("ana@example.com", "secret1")

        assert exc_info.value.code == "HTTP_503"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AuthError) as exc_info:
            await make_provider(handler).sign_in_with_password("ana@example.com", "secret1")

        assert exc_info.value.code == "NETWORK_ERROR"

    @pytest.mark.asyncio
    async def test_update_display_name_keeps_tokens(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert request.url.path.endswith("accounts:update")
            assert body["idToken"] == "id-token"
            return httpx.Response(200, json={
                "localId": "uid-1",
                "email": "ana@example.com",
                "displayName": body["displayName"],
            })

        session = AuthSession(uid="uid-1", email="ana@example.com", id_token="id-token", refresh_token="r")
        updated = await make_provider(handler).update_display_name(session, "Ana")

        assert updated.display_name == "Ana"
        assert updated.id_token == "id-token"
        assert updated.refresh_token == "r"

    @pytest.mark.asyncio
    async def test_lookup_without_users_fails(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"users": []}))
        session = AuthSession(uid="uid-1", email="ana@example.com", id_token="stale")

        with pytest.raises(AuthError):
            await provider.lookup_account(session)
