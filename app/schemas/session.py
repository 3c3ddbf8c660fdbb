"""Session schemas for the hosted auth service."""

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DISPLAY_NAME = "Spotify user"


class UserMetadata(BaseModel):
    """Profile fields the provider hands to Supabase. Everything else is dropped."""
    name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: UserMetadata = Field(default_factory=UserMetadata)

    model_config = ConfigDict(extra="ignore")


class AuthSession(BaseModel):
    """A Supabase session plus the Spotify token it was created with."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: Optional[int] = None
    provider_token: Optional[str] = None
    user: SessionUser

    model_config = ConfigDict(extra="ignore")

    def is_expired(self, leeway: int = 60) -> bool:
        """Check whether the access token expires within `leeway` seconds."""
        if self.expires_at is None:
            return False
        return self.expires_at - leeway <= int(time.time())

    @property
    def display_name(self) -> str:
        metadata = self.user.user_metadata
        return metadata.name or metadata.full_name or DEFAULT_DISPLAY_NAME


class SessionUserResponse(BaseModel):
    """Response schema for the signed-in user."""
    id: str
    email: Optional[str] = None
    display_name: str
    avatar_url: Optional[str] = None
    has_provider_token: bool
