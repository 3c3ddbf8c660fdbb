import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from app.config import get_settings
from app.core.exceptions import (
    SpotifyAPIError,
    SpotifyRateLimitError,
    SpotifyTokenExpiredError,
)
from app.schemas.music import Artist, Track, TopItemsResponse
from app.services.http_client import get_http_client

logger = logging.getLogger(__name__)

settings = get_settings()

UNKNOWN_ARTIST = "Unknown artist"


def _unexpected_items(path: str, error: Exception) -> SpotifyAPIError:
    logger.error(f"Spotify returned malformed items for {path}: {type(error).__name__}: {error}")
    return SpotifyAPIError("Spotify returned an unexpected response")


class SpotifyService:
    """Service for reading a signed-in user's data from the Spotify Web API."""

    API_BASE_URL = "https://api.spotify.com/v1"
    TIME_RANGES = ("short_term", "medium_term", "long_term")
    MAX_LIMIT = 50

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_http_client()

    def _validate(self, limit: int, time_range: str) -> int:
        if time_range not in self.TIME_RANGES:
            raise ValueError(f"Unknown time range: {time_range}")
        return max(1, min(limit, self.MAX_LIMIT))

    async def _get(self, path: str, access_token: str, params: Optional[dict] = None) -> dict:
        """GET a Spotify endpoint with the user's bearer token."""
        try:
            response = await self.client.get(
                f"{self.API_BASE_URL}{path}",
                headers={"Authorization": f"Bearer {access_token}"},
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"Spotify request to {path} failed: {type(e).__name__}: {e}")
            raise SpotifyAPIError("Could not reach Spotify") from e

        if response.status_code == 401:
            raise SpotifyTokenExpiredError()

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"Spotify rate limited {path}, retry after {retry_after}s")
            raise SpotifyRateLimitError(
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if response.status_code >= 400:
            message = f"Spotify returned {response.status_code}"
            try:
                message = response.json().get("error", {}).get("message") or message
            except (ValueError, AttributeError):
                pass
            logger.warning(f"Spotify error on {path}: {message}")
            raise SpotifyAPIError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Spotify returned a non-JSON body for {path}")
            raise SpotifyAPIError("Spotify returned an unreadable response") from e

        if not isinstance(data, dict):
            raise SpotifyAPIError("Spotify returned an unreadable response")

        return data

    async def get_top_artists(
        self,
        access_token: str,
        limit: int = 10,
        time_range: str = "medium_term",
    ) -> list[Artist]:
        """
        Get the user's top artists.

        Args:
            access_token: Spotify provider token from the session
            limit: Number of artists to return (max 50)
            time_range: 'short_term' (4 weeks), 'medium_term' (6 months), 'long_term' (years)

        Returns:
            Artists in Spotify's ranking order
        """
        limit = self._validate(limit, time_range)
        data = await self._get(
            "/me/top/artists",
            access_token,
            params={"limit": limit, "time_range": time_range},
        )

        try:
            return [
                Artist(id=item["id"], name=item["name"])
                for item in data.get("items") or []
            ]
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise _unexpected_items("/me/top/artists", e) from e

    async def get_top_tracks(
        self,
        access_token: str,
        limit: int = 10,
        time_range: str = "medium_term",
    ) -> list[Track]:
        """
        Get the user's top tracks.

        Each track keeps only its first listed artist and the first (largest)
        album image.
        """
        limit = self._validate(limit, time_range)
        data = await self._get(
            "/me/top/tracks",
            access_token,
            params={"limit": limit, "time_range": time_range},
        )

        tracks = []
        try:
            for item in data.get("items") or []:
                artists = item.get("artists") or []
                images = (item.get("album") or {}).get("images") or []
                tracks.append(
                    Track(
                        id=item["id"],
                        name=item["name"],
                        artist=artists[0]["name"] if artists else UNKNOWN_ARTIST,
                        album_image=images[0].get("url") if images else None,
                    )
                )
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise _unexpected_items("/me/top/tracks", e) from e

        return tracks

    async def get_top_items(
        self,
        access_token: str,
        limit: Optional[int] = None,
        time_range: Optional[str] = None,
    ) -> TopItemsResponse:
        """Fetch top artists and top tracks together."""
        limit = limit or settings.spotify_top_items_limit
        time_range = time_range or settings.spotify_time_range

        artists, tracks = await asyncio.gather(
            self.get_top_artists(access_token, limit=limit, time_range=time_range),
            self.get_top_tracks(access_token, limit=limit, time_range=time_range),
        )
        logger.info(f"Fetched {len(artists)} top artists and {len(tracks)} top tracks")

        return TopItemsResponse(artists=artists, tracks=tracks)


# Singleton instance
spotify_service = SpotifyService()
