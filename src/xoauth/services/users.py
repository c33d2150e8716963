"""Profile lookup for the user who just authorized the client."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from xoauth.models.config import USER_ENDPOINT, ClientConfig
from xoauth.models.errors import InvalidResponseError
from xoauth.models.user import UserProfile
from xoauth.services.http import RequestExecutor, build_request

logger = logging.getLogger(__name__)


class UserProfileService:
    """Fetches ``users/me`` with a freshly issued access token."""

    def __init__(self, config: ClientConfig, executor: RequestExecutor):
        self.config = config
        self._executor = executor

    async def fetch_me(self, access_token: str) -> UserProfile:
        """Return the authenticated user's profile.

        Raises:
            NetworkError: On transport failure
            ProviderHttpError: On a non-2xx response
            InvalidResponseError: If the body is not a user profile
        """
        request = build_request(
            "GET",
            USER_ENDPOINT,
            self.config.api_base_url,
            data={"user.fields": self.config.user_fields},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response_data = await self._executor.execute(request)

        try:
            return UserProfile.model_validate(response_data)
        except ValidationError as e:
            raise InvalidResponseError(f"Invalid profile response: {e}") from e
