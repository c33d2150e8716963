"""OAuth 2.0 token endpoint operations.

Implements the RFC 6749 token endpoint interactions (code exchange with
the PKCE verifier, refresh) and RFC 7009 revocation against X. Every call
is a confidential-client request: form-encoded body plus an HTTP Basic
header carrying the client credentials.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from xoauth.models.config import REVOKE_ENDPOINT, TOKEN_ENDPOINT, ClientConfig
from xoauth.models.errors import (
    InvalidResponseError,
    NetworkError,
    ProviderHttpError,
    RevocationError,
    TokenError,
)
from xoauth.models.http import FORM_CONTENT_TYPE
from xoauth.models.tokens import (
    RefreshTokenRequest,
    RevokeTokenRequest,
    TokenPair,
    TokenRequest,
    TokenResponse,
)
from xoauth.services.http import RequestExecutor, build_request

logger = logging.getLogger(__name__)


class OAuth2TokenManager:
    """Manages token exchange, refresh and revocation.

    Handles the token endpoint interactions including:
    - Authorization code to access token exchange (RFC 6749 Section 4.1.3)
    - Access token refresh (RFC 6749 Section 6)
    - PKCE code verification (RFC 7636)
    - Token revocation (RFC 7009)

    Requests go straight through the executor, never through the
    authenticated layer, so a 401 here cannot trigger another refresh.
    """

    def __init__(self, config: ClientConfig, executor: RequestExecutor):
        self.config = config
        self._executor = executor

    async def exchange_code_for_token(self, token_request: TokenRequest) -> TokenPair:
        """Exchange an authorization code for a token pair.

        Raises:
            NetworkError: On transport failure
            ProviderHttpError: On a non-2xx response
            InvalidResponseError: If a 2xx body is not valid JSON
            TokenError: If the response carries no usable token
        """
        logger.debug(
            f"Exchanging authorization code for client {self.config.client_id}"
        )
        response = await self._post_form(TOKEN_ENDPOINT, token_request.to_form_data())
        tokens = self._parse_token_response(response)
        logger.info("Token exchange successful")
        return tokens

    async def refresh_access_token(
        self, refresh_request: RefreshTokenRequest
    ) -> TokenPair:
        """Mint a new token pair from a refresh token.

        Raises:
            NetworkError: On transport failure
            ProviderHttpError: On a non-2xx response
            InvalidResponseError: If a 2xx body is not valid JSON
            TokenError: If the response carries no usable token
        """
        logger.debug("Refreshing access token")
        response = await self._post_form(
            TOKEN_ENDPOINT, refresh_request.to_form_data()
        )
        tokens = self._parse_token_response(response)
        logger.info("Token refresh successful")
        return tokens

    async def revoke_token(self, revoke_request: RevokeTokenRequest) -> None:
        """Revoke an access or refresh token.

        Raises:
            RevocationError: If the provider cannot be reached or refuses
        """
        try:
            await self._post_form(REVOKE_ENDPOINT, revoke_request.to_form_data())
        except (NetworkError, ProviderHttpError, InvalidResponseError) as e:
            raise RevocationError(str(e)) from e

    async def _post_form(self, endpoint: str, form_data: dict[str, str]) -> object:
        request = build_request(
            "POST",
            endpoint,
            self.config.api_base_url,
            data=form_data,
            headers={
                "Content-Type": FORM_CONTENT_TYPE,
                "Authorization": self.config.basic_auth_header(),
            },
        )
        return await self._executor.execute(request)

    def _parse_token_response(self, response_data: object) -> TokenPair:
        """Validate a token endpoint body and extract the token pair.

        Raises:
            TokenError: If the body is malformed or reports an error
        """
        if not isinstance(response_data, dict):
            raise TokenError("Invalid token response format")

        try:
            token_response = TokenResponse(**response_data)
        except ValidationError as e:
            raise TokenError(f"Invalid token response format: {e}") from e

        if not token_response.is_success():
            logger.warning(
                f"Token endpoint returned error: {token_response.error} - "
                f"{token_response.error_description}"
            )
            raise TokenError(
                f"Token response missing access_token ({token_response.error})"
            )

        return token_response.to_token_pair()
