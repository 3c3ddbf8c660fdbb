import os
import time

# Settings are cached on first import, so the environment must be ready first
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["GOOGLE_API_KEY"] = "test-google-key"
os.environ["BACKEND_URL"] = "http://testserver"
os.environ.pop("SUPABASE_JWT_SECRET", None)

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.music import Artist, Track, TopItemsResponse
from app.schemas.session import AuthSession
from app.services.auth_service import auth_service
from app.services.gemini_service import gemini_service
from app.services.spotify_service import spotify_service


def build_session(
    provider_token: str | None = "spotify-token",
    expires_at: int | None = None,
    name: str | None = "Ada",
) -> AuthSession:
    return AuthSession(
        access_token="supabase-access",
        refresh_token="supabase-refresh",
        expires_at=expires_at if expires_at is not None else int(time.time()) + 3600,
        provider_token=provider_token,
        user={
            "id": "user-1",
            "email": "ada@example.com",
            "user_metadata": {"name": name} if name else {},
        },
    )


def build_top_items(n_artists: int = 3, n_tracks: int = 2) -> TopItemsResponse:
    return TopItemsResponse(
        artists=[Artist(id=f"a{i}", name=f"Artist {i}") for i in range(n_artists)],
        tracks=[
            Track(
                id=f"t{i}",
                name=f"Song {i}",
                artist=f"Artist {i}",
                album_image=f"https://i.scdn.co/image/cover{i}",
            )
            for i in range(n_tracks)
        ],
    )


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def signed_out(monkeypatch):
    """Record upstream sign-outs instead of calling Supabase."""
    calls = []

    async def fake_sign_out(session):
        calls.append(session)

    monkeypatch.setattr(auth_service, "sign_out", fake_sign_out)
    return calls


@pytest.fixture
def sign_in(client, monkeypatch, signed_out):
    """Return a helper that walks the login and callback routes with a given session."""

    def _sign_in(session: AuthSession | None = None) -> TestClient:
        session = session or build_session()

        async def fake_exchange(auth_code, code_verifier):
            assert auth_code == "auth-code"
            assert code_verifier
            return session

        monkeypatch.setattr(auth_service, "exchange_code_for_session", fake_exchange)

        client.get("/login", follow_redirects=False)
        response = client.get("/auth/callback", params={"code": "auth-code"}, follow_redirects=False)
        assert response.status_code == 302
        return client

    return _sign_in


@pytest.fixture
def fake_top_items(monkeypatch):
    """Serve canned top items and record the provider tokens used."""
    state = {"items": build_top_items(), "tokens": [], "error": None}

    async def fake_get_top_items(access_token, limit=None, time_range=None):
        state["tokens"].append(access_token)
        if state["error"] is not None:
            raise state["error"]
        return state["items"]

    monkeypatch.setattr(spotify_service, "get_top_items", fake_get_top_items)
    return state


@pytest.fixture
def fake_personality(monkeypatch):
    """Answer personality requests with a canned description."""
    state = {"text": "You are a moody night owl.", "calls": [], "error": None}

    async def fake_describe(artists, tracks):
        state["calls"].append((artists, tracks))
        if state["error"] is not None:
            raise state["error"]
        return state["text"]

    monkeypatch.setattr(gemini_service, "describe_personality", fake_describe)
    return state
