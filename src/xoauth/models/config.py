"""Client configuration for the X OAuth 2.0 client."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass

from xoauth.models.errors import InvalidRequestError

API_BASE_URL = "https://api.x.com/2/"
AUTH_URL = "https://x.com/i/oauth2/authorize"
SCOPES = ("tweet.read", "users.read", "offline.access")
USER_FIELDS = "profile_image_url,profile_banner_url"

TOKEN_ENDPOINT = "oauth2/token"
REVOKE_ENDPOINT = "oauth2/revoke"
USER_ENDPOINT = "users/me"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client registration and provider endpoints."""

    client_id: str
    client_secret: str
    redirect_uri: str
    api_base_url: str = API_BASE_URL
    auth_url: str = AUTH_URL
    scopes: tuple[str, ...] = SCOPES
    user_fields: str = USER_FIELDS
    timeout: float = 30.0

    @property
    def scope(self) -> str:
        """Space-joined scope string sent to the authorize endpoint."""
        return " ".join(self.scopes)

    def basic_auth_header(self) -> str:
        """Build the HTTP Basic credential for the token and revoke endpoints."""
        credentials = f"{self.client_id}:{self.client_secret}".encode()
        return f"Basic {base64.b64encode(credentials).decode('ascii')}"

    @classmethod
    def from_env(cls, prefix: str = "X_") -> ClientConfig:
        """Build configuration from ``X_CLIENT_ID``, ``X_CLIENT_SECRET``,
        ``X_REDIRECT_URI`` and the optional ``X_HTTP_TIMEOUT``.

        Raises:
            InvalidRequestError: If a required variable is missing
        """
        values = {}
        for name in ("CLIENT_ID", "CLIENT_SECRET", "REDIRECT_URI"):
            value = os.getenv(f"{prefix}{name}")
            if not value:
                raise InvalidRequestError(
                    f"Environment variable {prefix}{name} is not set"
                )
            values[name.lower()] = value

        timeout = os.getenv(f"{prefix}HTTP_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise InvalidRequestError(
                    f"Environment variable {prefix}HTTP_TIMEOUT must be a number"
                ) from e

        return cls(**values)
