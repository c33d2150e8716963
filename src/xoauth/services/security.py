"""State echo-check helpers for callers handling the provider redirect."""

from __future__ import annotations

import secrets
from urllib.parse import parse_qs, urlparse

from xoauth.models.errors import StateValidationError


def validate_state(expected: str, actual: str | None) -> None:
    """Validate state parameter matches expected value.

    Args:
        expected: State parameter from original authorization request
        actual: State parameter from callback URL

    Raises:
        StateValidationError: If state parameters don't match
    """
    if not actual:
        raise StateValidationError("Callback missing required state parameter")
    if not secrets.compare_digest(expected, actual):
        raise StateValidationError("State parameter mismatch - possible CSRF attack")


def parse_callback_url(callback_url: str) -> dict[str, str | None]:
    """Extract ``code``, ``state``, ``error`` and ``error_description``
    from the redirect the provider sent back."""
    query_params = parse_qs(urlparse(callback_url).query)

    def get_single_param(key: str) -> str | None:
        values = query_params.get(key, [])
        return values[0] if values else None

    return {
        key: get_single_param(key)
        for key in ("code", "state", "error", "error_description")
    }
