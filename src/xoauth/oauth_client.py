"""OAuth 2.0 Authorization Code + PKCE client for X.

Coordinates authorization URL construction, code exchange, refresh,
revocation and authenticated API calls, writing the results into the
caller's session and announcing identity changes through a single
session update callback.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import fields
from typing import Any

import httpx

from xoauth.models.config import ClientConfig
from xoauth.models.errors import (
    AuthenticationFailedError,
    InvalidRequestError,
    OAuth2Error,
    TokenRefreshError,
)
from xoauth.models.security import PKCEParameters
from xoauth.models.session import Session
from xoauth.models.tokens import (
    RefreshTokenRequest,
    RevokeTokenRequest,
    TokenPair,
    TokenRequest,
)
from xoauth.models.user import UserRecord
from xoauth.primitives.profile import ImageUrlNormalizer, strip_normal_suffix
from xoauth.services.authenticated import AuthenticatedRequester
from xoauth.services.flow import OAuth2FlowManager
from xoauth.services.http import RequestExecutor
from xoauth.services.notifications import SessionNotifier, SessionUpdateCallback
from xoauth.services.tokens import OAuth2TokenManager
from xoauth.services.users import UserProfileService

logger = logging.getLogger(__name__)


class XOAuth2Client:
    """Complete OAuth 2.0 client for a single X application.

    The client holds no per-user state: everything about a user lives in
    the session object passed to each call, so one client can serve many
    sessions concurrently.

    Example::

        async with XOAuth2Client(client_id, client_secret, redirect_uri) as x:
            url = x.get_authorization_url(session)
            ...
            user = await x.handle_callback(code, session)
            me = await x.get("users/me", headers=bearer, session=session)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        session_update_callback: SessionUpdateCallback | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        profile_image_normalizer: ImageUrlNormalizer | None = strip_normal_suffix,
        **config_options: Any,
    ):
        """Initialize the client.

        Args:
            client_id: OAuth 2.0 client ID of the X app
            client_secret: OAuth 2.0 client secret of the X app
            redirect_uri: Callback URL registered with the app
            session_update_callback: Called with (old, new, session_id)
                whenever a session's identity changes
            http_client: Optional shared httpx client. When omitted the
                client creates and owns one.
            profile_image_normalizer: Rule applied to the profile image
                URL, or None to keep it as returned
            **config_options: Extra ClientConfig fields (timeout, api_base_url...)
        """
        self.config = ClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            **config_options,
        )
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout
        )
        self._normalize_image_url = profile_image_normalizer

        # Initialize service components
        self.notifier = SessionNotifier(session_update_callback)
        self.executor = RequestExecutor(self._http_client)
        self.flow_manager = OAuth2FlowManager(self.config)
        self.token_manager = OAuth2TokenManager(self.config, self.executor)
        self.users = UserProfileService(self.config, self.executor)
        self.requester = AuthenticatedRequester(
            self.config, self.executor, lambda session: self.refresh_token(session)
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        session_update_callback: SessionUpdateCallback | None = None,
        **kwargs: Any,
    ) -> XOAuth2Client:
        """Build a client from an existing ClientConfig."""
        options = {
            f.name: getattr(config, f.name)
            for f in fields(config)
            if f.name not in ("client_id", "client_secret", "redirect_uri")
        }
        return cls(
            config.client_id,
            config.client_secret,
            config.redirect_uri,
            session_update_callback,
            **kwargs,
            **options,
        )

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri

    # ------------------------------------------------------------------ #
    # Session notification
    # ------------------------------------------------------------------ #

    def on_session_update(self, callback: SessionUpdateCallback | None) -> None:
        """Register the session update callback, replacing any previous one."""
        self.notifier.on_session_update(callback)

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    def start_authorization(self, session: Session) -> tuple[str, PKCEParameters]:
        """Begin an authorization attempt.

        Stores a fresh code verifier on the session and returns the
        authorization URL together with the generated parameters. The
        caller keeps ``parameters.state`` to check the echoed state.
        """
        return self.flow_manager.start_authorization_flow(session)

    def get_authorization_url(self, session: Session) -> str:
        """Return the URL the user should be redirected to."""
        authorization_url, _ = self.start_authorization(session)
        return authorization_url

    async def handle_callback(self, code: str, session: Session) -> UserRecord:
        """Complete the authorization code flow.

        Performs:
        1. Exchange the code (with the session's PKCE verifier) for tokens
        2. Fetch the user's profile
        3. Build the user record and store it on the session
        4. Notify the session update callback

        Args:
            code: Authorization code from the provider redirect
            session: Session that started the authorization attempt

        Returns:
            UserRecord: The authenticated user, also stored on ``session.user``

        Raises:
            AuthenticationFailedError: On any failure. The provider's error
                detail is logged, not surfaced.
        """
        try:
            code_verifier = getattr(session, "code_verifier", None)
            if not code_verifier:
                raise InvalidRequestError("Code verifier is missing from session")

            tokens = await self.token_manager.exchange_code_for_token(
                TokenRequest(
                    code=code,
                    redirect_uri=self.config.redirect_uri,
                    client_id=self.config.client_id,
                    code_verifier=code_verifier,
                )
            )
            profile = await self.users.fetch_me(tokens.access_token)
            user = UserRecord.from_profile(profile, tokens, self._normalize_image_url)
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            raise AuthenticationFailedError() from e
        finally:
            session.code_verifier = None

        session.user = user
        await self.notifier.notify(None, user, getattr(session, "id", None))

        logger.info(f"Authenticated user {user.id}")
        return user

    async def refresh_token(self, session: Session) -> TokenPair:
        """Replace the session user's token pair using the refresh token.

        Returns:
            TokenPair: The new tokens, also written to ``session.user``

        Raises:
            TokenRefreshError: If the refresh token is missing or the
                provider refuses. No network call is made in the first case.
        """
        user: UserRecord | None = getattr(session, "user", None)

        try:
            if user is None or not user.refresh_token:
                raise InvalidRequestError("Refresh token is missing")

            new_tokens = await self.token_manager.refresh_access_token(
                RefreshTokenRequest(refresh_token=user.refresh_token)
            )
        except OAuth2Error as e:
            logger.error(f"Error refreshing token: {e}")
            raise TokenRefreshError() from e

        old_tokens = user.token_pair
        if new_tokens.refresh_token is None:
            new_tokens = TokenPair(
                access_token=new_tokens.access_token,
                refresh_token=old_tokens.refresh_token,
            )
        user.apply_tokens(new_tokens)

        await self.notifier.notify(old_tokens, new_tokens, getattr(session, "id", None))
        return new_tokens

    async def logout(self, session: Session) -> None:
        """Revoke the access token (best effort) and destroy the session.

        Never raises because of revocation. The session update callback
        and ``session.destroy()`` run even when there is no user.
        """
        user: UserRecord | None = getattr(session, "user", None)

        if user is not None and user.access_token:
            try:
                await self.token_manager.revoke_token(
                    RevokeTokenRequest(token=user.access_token)
                )
                logger.info("Token revoked successfully")
            except OAuth2Error as e:
                logger.error(f"Error revoking token: {e}")

        if user is not None:
            session.user = None

        await self.notifier.notify(user, None, getattr(session, "id", None))

        result = session.destroy()
        if inspect.isawaitable(result):
            await result

    # ------------------------------------------------------------------ #
    # Authenticated requests
    # ------------------------------------------------------------------ #

    async def send_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        """Send an API request, refreshing and retrying once on 401."""
        return await self.requester.send_request(
            method, endpoint, data, headers, session
        )

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.requester.get(endpoint, params, headers, session)

    async def post(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.requester.post(endpoint, data, headers, session)

    async def put(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.requester.put(endpoint, data, headers, session)

    async def patch(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.requester.patch(endpoint, data, headers, session)

    async def delete(
        self,
        endpoint: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        session: Session | None = None,
    ) -> Any:
        return await self.requester.delete(endpoint, data, headers, session)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> XOAuth2Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
