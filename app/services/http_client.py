"""
Shared outbound HTTP client.

Supabase Auth and the Spotify Web API are both called through one pooled
httpx.AsyncClient. Timeouts and pool size come from settings. Every
upstream error response is logged once here, by host and status, so the
services only log what they do about it.
"""
import logging
from typing import Optional

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


async def _log_upstream_error(response: httpx.Response) -> None:
    """Response hook: note 4xx/5xx answers without leaking query strings."""
    if response.status_code >= 400:
        request = response.request
        logger.warning(
            f"[HTTP] {request.method} {request.url.host}{request.url.path} -> {response.status_code}"
        )


def build_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create a client configured for the hosted services we talk to."""
    return httpx.AsyncClient(
        transport=transport,
        headers={"User-Agent": f"{settings.app_name.replace(' ', '')}/1.0"},
        limits=httpx.Limits(
            max_keepalive_connections=settings.http_max_connections // 2,
            max_connections=settings.http_max_connections,
            keepalive_expiry=30.0,
        ),
        # The result page waits on these calls
        timeout=httpx.Timeout(
            settings.http_read_timeout,
            connect=settings.http_connect_timeout,
        ),
        event_hooks={"response": [_log_upstream_error]},
        http2=True,
        follow_redirects=False,
    )


class HTTPClientManager:
    """Owns the process-wide client for the app lifespan."""

    _client: Optional[httpx.AsyncClient] = None

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        if cls._client is None or cls._client.is_closed:
            cls._client = build_client()
        return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the client on app shutdown."""
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None

    @classmethod
    async def warmup(cls) -> None:
        cls.get_client()
        logger.info("[HTTP] Shared client ready")


def get_http_client() -> httpx.AsyncClient:
    return HTTPClientManager.get_client()
