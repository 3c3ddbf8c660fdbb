"""HTML pages: login, the loading view and the music personality result."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.exceptions import (
    GeminiNotConfiguredError,
    MissingProviderTokenException,
    SpotifyAPIError,
)
from app.dependencies import OptionalSession
from app.schemas.music import TopItemsResponse
from app.services.gemini_service import gemini_service
from app.services.spotify_service import spotify_service
from app.templating import render_error, render_login, templates

logger = logging.getLogger(__name__)

router = APIRouter()

ANALYSIS_PATH = "/result/analysis"
NOT_AVAILABLE_MESSAGE = "Couldn't generate personality analysis at this time."


async def _describe(top_items: TopItemsResponse) -> str:
    """Get the personality text, or a line explaining why there is none."""
    if not top_items.artists or not top_items.tracks:
        return ""

    try:
        return await gemini_service.describe_personality(top_items.artists, top_items.tracks)
    except GeminiNotConfiguredError:
        logger.error("Personality requested but GOOGLE_API_KEY is not set")
        return NOT_AVAILABLE_MESSAGE
    except Exception as e:
        logger.error(f"Error generating personality analysis: {type(e).__name__}: {e}")
        return NOT_AVAILABLE_MESSAGE


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, session: OptionalSession, error: str | None = None):
    """Login page. Signed-in users go straight to their results."""
    if session is not None:
        return RedirectResponse(url="/result", status_code=302)
    return render_login(request, error=error)


@router.get("/result", response_class=HTMLResponse)
async def result(request: Request, session: OptionalSession):
    """
    Show the loading view, which then loads the analysis page.

    The browser keeps this view on screen while the analysis request runs.
    """
    if session is None:
        return RedirectResponse(url="/", status_code=302)

    if not session.provider_token:
        return render_error(request, MissingProviderTokenException())

    return templates.TemplateResponse(
        request,
        "loading.html",
        {"analysis_url": ANALYSIS_PATH},
    )


@router.get(ANALYSIS_PATH, response_class=HTMLResponse)
async def result_analysis(request: Request, session: OptionalSession):
    """Fetch top artists and tracks, describe them, render everything."""
    if session is None:
        return RedirectResponse(url="/", status_code=302)

    if not session.provider_token:
        return render_error(request, MissingProviderTokenException())

    try:
        top_items = await spotify_service.get_top_items(session.provider_token)
    except SpotifyAPIError as e:
        return render_error(request, e)

    description = await _describe(top_items)

    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "display_name": session.display_name,
            "artists": top_items.artists,
            "tracks": top_items.tracks,
            "description": description,
        },
    )
