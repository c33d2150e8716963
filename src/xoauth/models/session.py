"""Session collaborator contract.

The session is owned by the caller (a web framework's session store, for
instance). The client only reads and writes the fields below and calls
``destroy`` on logout.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Protocol

from xoauth.models.user import UserRecord


class Session(Protocol):
    """Minimal session shape the client relies on."""

    id: str
    user: UserRecord | None
    code_verifier: str | None

    def destroy(self) -> Awaitable[None] | None:
        """Discard the session. May return an awaitable."""
        ...


@dataclass
class InMemorySession:
    """Plain in-process session, handy for scripts and tests."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    user: UserRecord | None = None
    code_verifier: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    destroyed: bool = False

    def destroy(self) -> None:
        self.user = None
        self.code_verifier = None
        self.data.clear()
        self.destroyed = True
