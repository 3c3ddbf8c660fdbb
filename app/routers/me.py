"""Signed-in user endpoints."""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from app.dependencies import CurrentSession, ProviderToken
from app.schemas.music import TopItemsResponse
from app.schemas.session import SessionUserResponse
from app.services.spotify_service import spotify_service

router = APIRouter()

TimeRange = Literal["short_term", "medium_term", "long_term"]


@router.get("", response_model=SessionUserResponse)
async def get_me(session: CurrentSession):
    """Get the signed-in user."""
    return SessionUserResponse(
        id=session.user.id,
        email=session.user.email,
        display_name=session.display_name,
        avatar_url=session.user.user_metadata.avatar_url,
        has_provider_token=bool(session.provider_token),
    )


@router.get("/top", response_model=TopItemsResponse)
async def get_my_top_items(
    provider_token: ProviderToken,
    limit: Optional[int] = Query(None, ge=1, le=50),
    time_range: Optional[TimeRange] = Query(None),
):
    """Get the signed-in user's top artists and tracks from Spotify."""
    return await spotify_service.get_top_items(
        provider_token,
        limit=limit,
        time_range=time_range,
    )
