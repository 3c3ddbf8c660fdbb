"""Music schemas for top artists and tracks."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Artist(BaseModel):
    """A top artist as shown on the result page."""
    id: str
    name: str


class Track(BaseModel):
    """A top track with its primary artist and optional album cover."""
    id: str
    name: str
    artist: str
    album_image: Optional[str] = Field(default=None, alias="albumImage")

    model_config = ConfigDict(populate_by_name=True)


class TopItemsResponse(BaseModel):
    """Response schema for a user's top artists and tracks."""
    artists: list[Artist] = []
    tracks: list[Track] = []
