"""Exception hierarchy for the X OAuth 2.0 client.

Low-level failures (transport errors, non-2xx responses, local precondition
violations) are raised by the services. The public client catches them at
its boundary and re-raises one of the coarse, deliberately opaque kinds
(AuthenticationFailedError, TokenRefreshError) so provider error text never
reaches the caller as the user-visible message.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 related errors."""

    pass


class InvalidRequestError(OAuth2Error):
    """Raised when a local precondition fails before any network call."""

    pass


class NetworkError(OAuth2Error):
    """Raised when the HTTP transport fails to deliver a request."""

    pass


class ProviderHttpError(OAuth2Error):
    """Raised when the provider answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class RateLimitedError(ProviderHttpError):
    """Raised when the provider answers 429 Too Many Requests."""

    def __init__(self, status_code: int = 429):
        super().__init__(status_code, f"Rate limit exceeded. Status: {status_code}")


class TokenError(OAuth2Error):
    """Raised when the token endpoint returns an unusable response."""

    pass


class InvalidResponseError(OAuth2Error):
    """Raised when a successful response body cannot be understood."""

    pass


class AuthenticationFailedError(OAuth2Error):
    """Raised when the code exchange or a refresh-and-retry cannot complete.

    The message is always generic. The underlying cause is available as
    ``__cause__`` and is logged where it happens.
    """

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class TokenRefreshError(OAuth2Error):
    """Raised when an access token cannot be refreshed."""

    def __init__(self, message: str = "Token refresh failed"):
        super().__init__(message)


class RevocationError(OAuth2Error):
    """Raised when token revocation fails. Never escapes logout."""

    pass


class PKCEError(OAuth2Error):
    """Raised when PKCE parameter generation fails."""

    pass


class StateValidationError(OAuth2Error):
    """Raised when the echoed OAuth state parameter does not match.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack.
    """

    pass
