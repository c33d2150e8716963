"""PKCE (Proof Key for Code Exchange) primitives.

Implements RFC 7636 S256 parameter generation to prevent authorization
code interception attacks, plus the anti-CSRF state token sent alongside.
Values generated here are never logged.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from xoauth.models.errors import PKCEError
from xoauth.models.security import PKCEParameters

_VERIFIER_BYTES = 32
_STATE_BYTES = 16


def _base64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    """Generate a cryptographically secure code verifier.

    32 random bytes, base64url-encoded without padding, gives a
    43-character string from the RFC 7636 unreserved alphabet.
    """
    return _base64url(secrets.token_bytes(_VERIFIER_BYTES))


def generate_code_challenge(code_verifier: str) -> str:
    """Generate code challenge from code verifier using S256 method.

    RFC 7636 Section 4.2: For S256, the code challenge is:
    BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))

    Args:
        code_verifier: The code verifier to hash

    Returns:
        Base64url-encoded SHA256 hash of the code verifier (43 characters)
    """
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return _base64url(digest)


def generate_state() -> str:
    """Generate an opaque 22-character URL-safe state parameter."""
    return secrets.token_urlsafe(_STATE_BYTES)


class PKCEManager:
    """Generates fresh PKCE parameters for every authorization attempt.

    Nothing is cached: each call allocates a new verifier, challenge and
    state.
    """

    def generate_parameters(self) -> PKCEParameters:
        """Generate new PKCE parameters for an authorization flow.

        Returns:
            PKCEParameters: Immutable parameters for the authorization flow

        Raises:
            PKCEError: If parameter generation fails
        """
        try:
            code_verifier = generate_code_verifier()
            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=generate_code_challenge(code_verifier),
                state=generate_state(),
            )
        except Exception as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e
