"""Personality router - describes a listener from their top music."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.schemas.personality import (
    PersonalityError,
    PersonalityRequest,
    PersonalityResponse,
)
from app.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=PersonalityResponse,
    responses={500: {"model": PersonalityError}},
    summary="Generate a music personality description",
)
async def generate_personality(payload: PersonalityRequest):
    """
    Describe a listener from their top artists and tracks.

    Only the artist names and the "track - artist" pairs reach the model.
    """
    try:
        text = await gemini_service.describe_personality(payload.top_artists, payload.top_tracks)
    except Exception as e:
        logger.error(f"Personality generation failed: {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=500,
            content=PersonalityError(error=str(e) or "Server error").model_dump(),
        )

    return PersonalityResponse(text=text)
