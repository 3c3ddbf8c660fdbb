"""Auth router for Spotify sign-in through Supabase."""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from app.config import get_settings
from app.core.exceptions import AuthServiceError, user_facing_message
from app.core.security import generate_pkce_pair
from app.dependencies import (
    PKCE_VERIFIER_KEY,
    clear_session,
    read_session,
    store_session,
)
from app.services.auth_service import auth_service
from app.templating import render_login

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


@router.get("/login")
async def login(request: Request):
    """Start the Spotify OAuth flow."""
    if not auth_service.is_configured():
        logger.error("Login attempted but SUPABASE_URL / SUPABASE_ANON_KEY are not set")
        return render_login(request, error="Spotify login is not configured", status_code=503)

    code_verifier, code_challenge = generate_pkce_pair()
    request.session[PKCE_VERIFIER_KEY] = code_verifier

    url = auth_service.build_authorize_url(settings.auth_callback_url, code_challenge)
    return RedirectResponse(url=url, status_code=302)


@router.get("/auth/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
):
    """Exchange the authorization code for a session, then go to the results."""
    if error:
        logger.info(f"OAuth provider returned an error: {error}")
        return render_login(request, error=error_description or error, status_code=400)

    if code:
        code_verifier = request.session.pop(PKCE_VERIFIER_KEY, None)
        if not code_verifier:
            return render_login(request, error="Login session expired. Please try again", status_code=400)

        try:
            session = await auth_service.exchange_code_for_session(code, code_verifier)
        except AuthServiceError as e:
            return render_login(request, error=user_facing_message(e), status_code=400)

        store_session(request, session)

    return RedirectResponse(url="/result", status_code=302)


@router.post("/logout")
async def logout(request: Request):
    """Sign out upstream and forget the session."""
    session = read_session(request)
    if session is not None:
        await auth_service.sign_out(session)

    clear_session(request)
    return RedirectResponse(url="/", status_code=303)
