"""Token models for the X OAuth 2.0 client.

Contains the token pair kept on the session's user record, the token
endpoint response model and the form-encoded requests sent to the token
and revoke endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token, always replaced together."""

    access_token: str
    refresh_token: str | None = None


class TokenResponse(BaseModel):
    """OAuth 2.0 token response (RFC 6749 Section 5).

    Represents the JSON body of a token endpoint response, including both
    successful responses (Section 5.1) and error responses (Section 5.2).
    """

    # Success response fields (RFC 6749 Section 5.1)
    access_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None

    # Error response fields (RFC 6749 Section 5.2)
    error: str | None = None
    error_description: str | None = None

    def is_success(self) -> bool:
        """Check if token response indicates success."""
        return self.error is None and self.access_token is not None

    def to_token_pair(self) -> TokenPair:
        """Convert a successful token response to a TokenPair.

        Raises:
            ValueError: If response is not successful
        """
        if not self.is_success():
            raise ValueError("Cannot convert error response to TokenPair")

        return TokenPair(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
        )


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code exchange parameters (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636).
    """

    code: str
    redirect_uri: str
    client_id: str
    code_verifier: str
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for an application/x-www-form-urlencoded request."""
        return {
            "code": self.code,
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }


@dataclass(frozen=True)
class RefreshTokenRequest:
    """Refresh token request parameters (RFC 6749 Section 6)."""

    refresh_token: str
    grant_type: str = "refresh_token"

    def to_form_data(self) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "refresh_token": self.refresh_token,
        }


@dataclass(frozen=True)
class RevokeTokenRequest:
    """Token revocation request parameters (RFC 7009 Section 2.1)."""

    token: str
    token_type_hint: str = "access_token"

    def to_form_data(self) -> dict[str, str]:
        return {
            "token": self.token,
            "token_type_hint": self.token_type_hint,
        }
