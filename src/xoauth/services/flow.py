"""Authorization URL construction for the authorization code flow."""

from __future__ import annotations

import logging

from xoauth.models.config import ClientConfig
from xoauth.models.errors import AuthenticationFailedError, PKCEError
from xoauth.models.flow import AuthorizationRequest
from xoauth.models.security import PKCEParameters
from xoauth.models.session import Session
from xoauth.primitives.pkce import PKCEManager

logger = logging.getLogger(__name__)


class OAuth2FlowManager:
    """Starts authorization attempts.

    Each attempt gets fresh PKCE parameters and state. The verifier is
    parked on the session until the callback is handled.
    """

    def __init__(self, config: ClientConfig, pkce_manager: PKCEManager | None = None):
        self.config = config
        self._pkce_manager = pkce_manager or PKCEManager()

    def start_authorization_flow(self, session: Session) -> tuple[str, PKCEParameters]:
        """Start an authorization attempt for ``session``.

        Returns:
            Tuple of (authorization_url, pkce_parameters). The caller keeps
            ``pkce_parameters.state`` to check the echoed value on callback.

        Raises:
            AuthenticationFailedError: If PKCE parameters cannot be generated
        """
        try:
            pkce_params = self._pkce_manager.generate_parameters()
        except PKCEError as e:
            logger.error(f"Failed to start authorization flow: {e}")
            raise AuthenticationFailedError() from e

        session.code_verifier = pkce_params.code_verifier

        auth_request = AuthorizationRequest(
            authorization_endpoint=self.config.auth_url,
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            scope=self.config.scope,
            state=pkce_params.state,
            code_challenge=pkce_params.code_challenge,
            code_challenge_method=pkce_params.code_challenge_method,
        )
        authorization_url = auth_request.build_authorization_url()

        logger.info(
            f"Generated authorization URL for client {self.config.client_id}"
        )
        return authorization_url, pkce_params
