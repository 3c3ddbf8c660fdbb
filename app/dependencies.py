import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from pydantic import ValidationError

from app.core.exceptions import (
    AuthServiceError,
    MissingProviderTokenException,
    UnauthorizedException,
)
from app.schemas.session import AuthSession
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

# Keys inside the signed session cookie
SESSION_KEY = "auth_session"
PKCE_VERIFIER_KEY = "pkce_verifier"


def read_session(request: Request) -> Optional[AuthSession]:
    """Load the auth session from the cookie, dropping it if it no longer parses."""
    data = request.session.get(SESSION_KEY)
    if not data:
        return None

    try:
        return AuthSession.model_validate(data)
    except ValidationError:
        logger.warning("Discarding malformed session cookie")
        request.session.pop(SESSION_KEY, None)
        return None


def store_session(request: Request, session: AuthSession) -> None:
    request.session[SESSION_KEY] = session.model_dump(mode="json", exclude_none=True)


def clear_session(request: Request) -> None:
    request.session.pop(SESSION_KEY, None)
    request.session.pop(PKCE_VERIFIER_KEY, None)


async def get_optional_session(request: Request) -> Optional[AuthSession]:
    """
    Dependency that returns the current session, or None when signed out.

    An expired session is refreshed through Supabase. If the refresh is
    rejected the session is cleared and the user counts as signed out.

    Usage:
        @app.get("/page")
        async def page(session: OptionalSession):
            if session is None:
                ...
    """
    session = read_session(request)
    if session is None or not session.is_expired():
        return session

    try:
        session = await auth_service.refresh_session(session)
    except AuthServiceError as e:
        logger.info(f"Session refresh failed, signing out: {e.message}")
        clear_session(request)
        return None

    store_session(request, session)
    return session


async def get_current_session(
    session: Annotated[Optional[AuthSession], Depends(get_optional_session)]
) -> AuthSession:
    """Dependency that requires a signed-in user."""
    if session is None:
        raise UnauthorizedException("Not signed in")
    return session


async def get_provider_token(
    session: Annotated[AuthSession, Depends(get_current_session)]
) -> str:
    """Dependency that returns the Spotify access token from the session."""
    if not session.provider_token:
        raise MissingProviderTokenException()
    return session.provider_token


# Type aliases for cleaner dependency injection
OptionalSession = Annotated[Optional[AuthSession], Depends(get_optional_session)]
CurrentSession = Annotated[AuthSession, Depends(get_current_session)]
ProviderToken = Annotated[str, Depends(get_provider_token)]
