"""Application exceptions and the messages shown to users."""

from typing import Optional

from fastapi import HTTPException, status


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class MissingProviderTokenException(UnauthorizedException):
    def __init__(self):
        super().__init__("Missing Spotify access token. Please log in again")


# ============= Upstream errors =============

class UpstreamError(Exception):
    """An error reported by (or while reaching) a hosted service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthServiceError(UpstreamError):
    """Supabase Auth rejected a request."""


class SpotifyAPIError(UpstreamError):
    """Spotify Web API request failed."""


class SpotifyTokenExpiredError(SpotifyAPIError):
    def __init__(self, message: str = "The access token expired"):
        super().__init__(message, status_code=401)


class SpotifyRateLimitError(SpotifyAPIError):
    def __init__(self, retry_after: Optional[int] = None):
        if retry_after is not None:
            message = f"API rate limit exceeded, retry after {retry_after} seconds"
        else:
            message = "API rate limit exceeded"
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class GeminiNotConfiguredError(ValueError):
    def __init__(self):
        super().__init__("GOOGLE_API_KEY not configured")


# ============= User-facing messages =============

RATE_LIMIT_MESSAGE = "Please wait a minute before trying again"
SPOTIFY_EXPIRED_MESSAGE = "Your Spotify session has expired. Please log in again"
SPOTIFY_FETCH_MESSAGE = "Failed to fetch your Spotify Data"
UNEXPECTED_MESSAGE = "Unexpected error"


def _is_rate_limited(message: str) -> bool:
    lowered = message.lower()
    return "rate limit" in lowered or "seconds" in lowered


def status_for(exc: BaseException) -> int:
    """HTTP status to answer with when `exc` ends a request."""
    if isinstance(exc, HTTPException):
        return exc.status_code
    if isinstance(exc, UpstreamError):
        if exc.status_code in (401, 429):
            return exc.status_code
        return 502
    return 500


def user_facing_message(exc: BaseException) -> str:
    """Turn any error raised while building a page into a readable message."""
    if isinstance(exc, HTTPException):
        message = str(exc.detail)
    else:
        message = str(exc)

    if message and _is_rate_limited(message):
        return RATE_LIMIT_MESSAGE

    if isinstance(exc, SpotifyTokenExpiredError):
        return SPOTIFY_EXPIRED_MESSAGE

    if isinstance(exc, SpotifyAPIError):
        return SPOTIFY_FETCH_MESSAGE

    return message or UNEXPECTED_MESSAGE
