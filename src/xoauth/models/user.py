"""User models: the provider's profile payload and the session's user record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel

from xoauth.models.tokens import TokenPair


class ProfileData(BaseModel):
    """Fields of the authenticated user returned by ``users/me``."""

    id: str
    username: str
    profile_image_url: str | None = None
    profile_banner_url: str | None = None


class UserProfile(BaseModel):
    """Envelope of the ``users/me`` response."""

    data: ProfileData


@dataclass
class UserRecord:
    """Authenticated user kept inside the caller's session.

    Mutable so that a refresh can swap the token pair in place.
    """

    id: str
    username: str
    profile_image_url: str | None
    profile_banner_url: str | None
    access_token: str
    refresh_token: str | None

    @property
    def token_pair(self) -> TokenPair:
        return TokenPair(
            access_token=self.access_token, refresh_token=self.refresh_token
        )

    def apply_tokens(self, tokens: TokenPair) -> None:
        """Replace both tokens at once."""
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token

    @classmethod
    def from_profile(
        cls,
        profile: UserProfile,
        tokens: TokenPair,
        normalize_image_url: Callable[[str], str] | None = None,
    ) -> UserRecord:
        """Merge provider profile data with a freshly issued token pair."""
        image_url = profile.data.profile_image_url
        if image_url and normalize_image_url is not None:
            image_url = normalize_image_url(image_url)

        return cls(
            id=profile.data.id,
            username=profile.data.username,
            profile_image_url=image_url,
            profile_banner_url=profile.data.profile_banner_url,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
