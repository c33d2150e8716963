"""Authenticated request layer with a single transparent refresh-and-retry.

A request that comes back 401 for a session holding a refresh token
triggers one refresh, then the identical request is sent again with the
new bearer token. The retry budget is an explicit state machine:

    INITIAL --401 + refreshable--> REFRESHED_ONCE --any response--> done
    INITIAL --401, not refreshable--> GIVE_UP

Concurrent requests on one session that hit 401 together each run their
own refresh; refreshes are not deduplicated.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from xoauth.models.config import ClientConfig
from xoauth.models.errors import AuthenticationFailedError, OAuth2Error
from xoauth.models.session import Session
from xoauth.models.tokens import TokenPair
from xoauth.services.http import RequestExecutor, build_request

logger = logging.getLogger(__name__)

RefreshFn = Callable[[Session], Awaitable[TokenPair]]


class RetryState(Enum):
    INITIAL = "initial"
    REFRESHED_ONCE = "refreshed_once"
    GIVE_UP = "give_up"


def can_refresh(session: Session | None) -> bool:
    """Check if the session carries a refresh token."""
    user = getattr(session, "user", None) if session is not None else None
    return bool(user is not None and getattr(user, "refresh_token", None))


class AuthenticatedRequester:
    """Sends API requests, refreshing the session's tokens once on 401."""

    def __init__(
        self,
        config: ClientConfig,
        executor: RequestExecutor,
        refresh: RefreshFn,
    ):
        self.config = config
        self._executor = executor
        self._refresh = refresh

    async def send_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        """Send a request and return its parsed JSON body.

        Raises:
            AuthenticationFailedError: If a 401-triggered refresh fails
            RateLimitedError: On 429
            ProviderHttpError: On any other non-2xx response
            NetworkError: On transport failure
        """
        request = build_request(
            method, endpoint, self.config.api_base_url, data or {}, headers or {}
        )

        state = RetryState.INITIAL
        response = await self._executor.send(request)

        while response.status_code == 401 and state is RetryState.INITIAL:
            if not can_refresh(session):
                state = RetryState.GIVE_UP
                break

            try:
                tokens = await self._refresh(session)
            except OAuth2Error as e:
                logger.error(f"Token refresh failed: {e}")
                raise AuthenticationFailedError() from e

            request = request.with_bearer(tokens.access_token)
            state = RetryState.REFRESHED_ONCE
            logger.debug(f"Retrying {request.method} {request.url} after refresh")
            response = await self._executor.send(request)

        return self._executor.parse(response)

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.send_request(
            "GET", endpoint, params or {}, headers or {}, session
        )

    async def post(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.send_request(
            "POST", endpoint, data or {}, headers or {}, session
        )

    async def put(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.send_request(
            "PUT", endpoint, data or {}, headers or {}, session
        )

    async def patch(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.send_request(
            "PATCH", endpoint, data or {}, headers or {}, session
        )

    async def delete(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.send_request(
            "DELETE", endpoint, data or {}, headers or {}, session
        )
