"""Supabase Auth service for Spotify sign-in and session handling."""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from app.config import get_settings
from app.core.exceptions import AuthServiceError
from app.core.security import token_expiry
from app.schemas.session import AuthSession
from app.services.http_client import get_http_client

logger = logging.getLogger(__name__)

settings = get_settings()

OAUTH_PROVIDER = "spotify"


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a GoTrue error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"Auth service returned {response.status_code}"

    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            if data.get(key):
                return str(data[key])
    return f"Auth service returned {response.status_code}"


class AuthService:
    """Service for interacting with the hosted Supabase Auth API."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_http_client()

    @property
    def base_url(self) -> str:
        return f"{(settings.supabase_url or '').rstrip('/')}/auth/v1"

    def is_configured(self) -> bool:
        """Check if Supabase Auth is properly configured."""
        return settings.auth_configured

    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {
            "apikey": settings.supabase_anon_key or "",
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def build_authorize_url(self, redirect_to: str, code_challenge: str) -> str:
        """
        Build the URL that starts the Spotify OAuth flow through Supabase.

        Args:
            redirect_to: Where Supabase sends the browser back with `?code=`
            code_challenge: PKCE S256 challenge for the stored verifier

        Returns:
            Authorization URL to redirect the browser to
        """
        params = {
            "provider": OAUTH_PROVIDER,
            "redirect_to": redirect_to,
            "scopes": settings.spotify_scopes,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        }
        return f"{self.base_url}/authorize?{urlencode(params)}"

    async def _token_request(self, grant_type: str, payload: dict) -> dict:
        try:
            response = await self.client.post(
                f"{self.base_url}/token",
                params={"grant_type": grant_type},
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error(f"[AuthService] {grant_type} request failed: {type(e).__name__}: {e}")
            raise AuthServiceError("Could not reach the sign-in service") from e

        if response.status_code != 200:
            message = _error_message(response)
            logger.warning(f"[AuthService] {grant_type} grant rejected ({response.status_code}): {message}")
            raise AuthServiceError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"[AuthService] {grant_type} grant returned a non-JSON body")
            raise AuthServiceError("Sign-in service returned an unreadable response") from e

        if not isinstance(data, dict):
            raise AuthServiceError("Sign-in service returned an unreadable response")

        return data

    @staticmethod
    def _to_session(data: dict, provider_token: Optional[str] = None) -> AuthSession:
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("access_token"):
            expires_at = token_expiry(data["access_token"])

        try:
            return AuthSession(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                token_type=data.get("token_type", "bearer"),
                expires_at=expires_at,
                provider_token=data.get("provider_token") or provider_token,
                user=data["user"],
            )
        except (KeyError, ValidationError) as e:
            logger.error(f"[AuthService] Incomplete session payload: {e}")
            raise AuthServiceError("Sign-in service returned an incomplete session") from e

    async def exchange_code_for_session(self, auth_code: str, code_verifier: str) -> AuthSession:
        """
        Exchange an authorization code for a session.

        Args:
            auth_code: The `code` query parameter from the callback
            code_verifier: PKCE verifier stored when the flow started

        Returns:
            The new session, including the Spotify provider token
        """
        data = await self._token_request(
            "pkce",
            {"auth_code": auth_code, "code_verifier": code_verifier},
        )
        session = self._to_session(data)
        logger.info(f"[AuthService] Session created for user {session.user.id}")
        return session

    async def refresh_session(self, session: AuthSession) -> AuthSession:
        """
        Refresh an expired session.

        The refresh grant does not return the provider token, so the one
        from the original sign-in is carried over.
        """
        data = await self._token_request(
            "refresh_token",
            {"refresh_token": session.refresh_token},
        )
        return self._to_session(data, provider_token=session.provider_token)

    async def sign_out(self, session: AuthSession) -> None:
        """Revoke the session upstream. Failures are logged, never raised."""
        try:
            response = await self.client.post(
                f"{self.base_url}/logout",
                headers=self._headers(session.access_token),
            )
        except httpx.HTTPError as e:
            logger.warning(f"[AuthService] Sign-out request failed: {type(e).__name__}: {e}")
            return

        if response.status_code not in (200, 204):
            logger.warning(
                f"[AuthService] Sign-out returned {response.status_code}: {_error_message(response)}"
            )


# Singleton instance
auth_service = AuthService()
