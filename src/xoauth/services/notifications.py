"""Session notification slot.

One optional callback, invoked whenever the authenticated identity of a
session changes (login, refresh, logout).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

SessionUpdateCallback = Callable[[Any, Any, Any], "Awaitable[None] | None"]


class SessionNotifier:
    """Holds at most one session update callback."""

    def __init__(self, callback: SessionUpdateCallback | None = None):
        self.session_update_handler: SessionUpdateCallback | None = callback

    def on_session_update(self, callback: SessionUpdateCallback | None) -> None:
        """Register the callback, replacing any previous one. ``None`` clears it."""
        self.session_update_handler = callback

    async def notify(self, old_data: Any, new_data: Any, session_id: Any) -> None:
        """Invoke the callback with (old_data, new_data, session_id).

        A missing callback is a no-op. Callback failures are logged and
        never propagate to the caller.
        """
        if self.session_update_handler is None:
            return

        try:
            result = self.session_update_handler(old_data, new_data, session_id)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Session update callback failed: {e}")
