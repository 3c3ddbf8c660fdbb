"""Pydantic schemas for the personality endpoint."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.music import Artist, Track


class PersonalityRequest(BaseModel):
    """Schema for requesting a music personality description."""
    top_artists: list[Artist] = Field(default_factory=list, alias="topArtists")
    top_tracks: list[Track] = Field(default_factory=list, alias="topTracks")

    model_config = ConfigDict(populate_by_name=True)


class PersonalityResponse(BaseModel):
    """Schema for a generated description."""
    text: str


class PersonalityError(BaseModel):
    error: str
