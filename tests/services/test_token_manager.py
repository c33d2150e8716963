"""Tests for token endpoint operations.

High-impact tests covering:
- Authorization code to token exchange with PKCE verifier
- Token refresh request shape
- Revocation and its error wrapping
- Basic client authentication and form encoding
"""

import base64
from urllib.parse import parse_qs

import httpx
import pytest

from xoauth.models.config import ClientConfig
from xoauth.models.errors import ProviderHttpError, RevocationError, TokenError
from xoauth.models.tokens import (
    RefreshTokenRequest,
    RevokeTokenRequest,
    TokenPair,
    TokenRequest,
)
from xoauth.services.http import RequestExecutor
from xoauth.services.tokens import OAuth2TokenManager


class TokenEndpointTestBase:
    def setup_method(self):
        # Arrange
        self.config = ClientConfig(
            client_id="client-456",
            client_secret="secret-789",
            redirect_uri="http://localhost:3000/callback",
        )
        self.sent: list[httpx.Request] = []
        self.response = httpx.Response(
            200,
            json={
                "access_token": "access-token-xyz",
                "refresh_token": "refresh-token-abc",
                "token_type": "bearer",
                "expires_in": 7200,
                "scope": "tweet.read users.read offline.access",
            },
        )

        def handler(request: httpx.Request) -> httpx.Response:
            self.sent.append(request)
            return self.response

        executor = RequestExecutor(
            httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        self.token_manager = OAuth2TokenManager(self.config, executor)

    def sent_form(self, index: int = 0) -> dict[str, list[str]]:
        return parse_qs(self.sent[index].content.decode())


class TestTokenExchange(TokenEndpointTestBase):
    async def test_successful_token_exchange(self):
        # Arrange
        token_request = TokenRequest(
            code="auth-code-123",
            redirect_uri=self.config.redirect_uri,
            client_id=self.config.client_id,
            code_verifier="dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk",
        )

        # Act
        tokens = await self.token_manager.exchange_code_for_token(token_request)

        # Assert
        assert tokens == TokenPair("access-token-xyz", "refresh-token-abc")

        request = self.sent[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.x.com/2/oauth2/token"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

        expected_basic = base64.b64encode(b"client-456:secret-789").decode()
        assert request.headers["Authorization"] == f"Basic {expected_basic}"

        assert self.sent_form() == {
            "code": ["auth-code-123"],
            "grant_type": ["authorization_code"],
            "client_id": ["client-456"],
            "redirect_uri": ["http://localhost:3000/callback"],
            "code_verifier": ["dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"],
        }

    async def test_error_status_raises_provider_error(self):
        # Arrange
        self.response = httpx.Response(
            400,
            json={
                "error": "invalid_request",
                "error_description": "Value passed for the authorization code was invalid.",
            },
        )
        token_request = TokenRequest(
            code="bad", redirect_uri="r", client_id="c", code_verifier="v"
        )

        # Act / Assert
        with pytest.raises(ProviderHttpError) as exc_info:
            await self.token_manager.exchange_code_for_token(token_request)

        assert exc_info.value.status_code == 400
        assert "authorization code was invalid" in str(exc_info.value)

    async def test_success_without_access_token_raises_token_error(self):
        self.response = httpx.Response(200, json={"token_type": "bearer"})
        token_request = TokenRequest(
            code="c", redirect_uri="r", client_id="c", code_verifier="v"
        )

        with pytest.raises(TokenError):
            await self.token_manager.exchange_code_for_token(token_request)

    async def test_non_object_body_raises_token_error(self):
        self.response = httpx.Response(200, json=["not", "an", "object"])
        token_request = TokenRequest(
            code="c", redirect_uri="r", client_id="c", code_verifier="v"
        )

        with pytest.raises(TokenError):
            await self.token_manager.exchange_code_for_token(token_request)


class TestTokenRefresh(TokenEndpointTestBase):
    async def test_refresh_sends_refresh_grant(self):
        # Act
        tokens = await self.token_manager.refresh_access_token(
            RefreshTokenRequest(refresh_token="old_refresh_token")
        )

        # Assert
        assert tokens.access_token == "access-token-xyz"
        assert str(self.sent[0].url) == "https://api.x.com/2/oauth2/token"
        assert self.sent[0].headers["Authorization"].startswith("Basic ")
        assert self.sent_form() == {
            "grant_type": ["refresh_token"],
            "refresh_token": ["old_refresh_token"],
        }

    async def test_refresh_without_rotated_token_returns_none_refresh(self):
        self.response = httpx.Response(200, json={"access_token": "only-access"})

        tokens = await self.token_manager.refresh_access_token(
            RefreshTokenRequest(refresh_token="rt")
        )

        assert tokens == TokenPair("only-access", None)


class TestTokenRevocation(TokenEndpointTestBase):
    async def test_revoke_posts_token_and_hint(self):
        # Arrange
        self.response = httpx.Response(200, json={"revoked": True})

        # Act
        await self.token_manager.revoke_token(RevokeTokenRequest(token="AT"))

        # Assert
        assert str(self.sent[0].url) == "https://api.x.com/2/oauth2/revoke"
        assert self.sent[0].headers["Authorization"].startswith("Basic ")
        assert self.sent_form() == {
            "token": ["AT"],
            "token_type_hint": ["access_token"],
        }

    async def test_revoke_failure_is_wrapped(self):
        self.response = httpx.Response(503, json={"error": "unavailable"})

        with pytest.raises(RevocationError) as exc_info:
            await self.token_manager.revoke_token(RevokeTokenRequest(token="AT"))

        assert isinstance(exc_info.value.__cause__, ProviderHttpError)
