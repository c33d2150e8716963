"""Request model for the HTTP executor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class BodyEncoding(Enum):
    """How ``HttpRequest.data`` is put on the wire."""

    NONE = "none"  # GET: no body, data travels in ``params``
    JSON = "json"
    FORM = "form"


@dataclass(frozen=True)
class HttpRequest:
    """A single fully resolved outbound request.

    ``url`` is kept apart from ``params`` so that query parameters are
    merged into any query the endpoint already carries.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    encoding: BodyEncoding = BodyEncoding.NONE

    def with_bearer(self, access_token: str) -> HttpRequest:
        """Return an identical request carrying a new bearer token."""
        headers = {
            name: value
            for name, value in self.headers.items()
            if name.lower() != "authorization"
        }
        headers["Authorization"] = f"Bearer {access_token}"
        return replace(self, headers=headers)
