import time

from app.core.exceptions import (
    AuthServiceError,
    GeminiNotConfiguredError,
    SpotifyAPIError,
    SpotifyRateLimitError,
    SpotifyTokenExpiredError,
)
from app.services.auth_service import auth_service

from tests.conftest import build_session, build_top_items


def test_index_shows_login_when_signed_out(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Login with Spotify" in response.text
    assert 'href="/login"' in response.text


def test_index_shows_error_banner(client):
    response = client.get("/", params={"error": "Login failed"})

    assert "Login failed" in response.text


def test_index_redirects_signed_in_user(sign_in):
    client = sign_in()

    response = client.get("/", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/result"


def test_result_redirects_without_session(client):
    response = client.get("/result", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_result_shows_loading_view_first(sign_in, fake_top_items, fake_personality):
    client = sign_in()

    response = client.get("/result")

    assert response.status_code == 200
    assert "Analyzing your music taste..." in response.text
    assert "Fetching your Spotify data..." in response.text
    assert '<meta http-equiv="refresh" content="0;url=/result/analysis">' in response.text
    assert fake_top_items["tokens"] == []
    assert fake_personality["calls"] == []


def test_result_missing_provider_token_skips_loading_view(sign_in, fake_top_items):
    client = sign_in(build_session(provider_token=None))

    response = client.get("/result")

    assert response.status_code == 401
    assert "Missing Spotify access token. Please log in again" in response.text
    assert "Analyzing your music taste..." not in response.text


def test_analysis_redirects_without_session(client):
    response = client.get("/result/analysis", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_result_renders_artists_tracks_and_description(sign_in, fake_top_items, fake_personality):
    fake_top_items["items"] = build_top_items(n_artists=4, n_tracks=3)
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 200
    body = response.text
    assert "Signed in as <span class=\"name\">Ada</span>" in body
    assert "You are a moody night owl." in body
    assert body.count("<li>Artist ") == 4
    for i in range(4):
        assert f"<li>Artist {i}</li>" in body
    for i in range(3):
        assert f"<li>Song {i} — Artist {i}</li>" in body
    assert 'src="https://i.scdn.co/image/cover0"' in body
    assert fake_top_items["tokens"] == ["spotify-token"]


def test_result_sends_fetched_items_to_personality(sign_in, fake_top_items, fake_personality):
    client = sign_in()

    client.get("/result/analysis")

    [(artists, tracks)] = fake_personality["calls"]
    assert [a.name for a in artists] == ["Artist 0", "Artist 1", "Artist 2"]
    assert [t.name for t in tracks] == ["Song 0", "Song 1"]


def test_result_default_name_and_placeholder_cover(sign_in, fake_top_items, fake_personality):
    items = build_top_items(n_tracks=1)
    items.tracks[0].album_image = "https://evil.example.com/cover.png"
    fake_top_items["items"] = items
    client = sign_in(build_session(name=None))

    body = client.get("/result/analysis").text

    assert "Spotify user" in body
    assert "evil.example.com" not in body
    assert "🎧" in body


def test_result_skips_personality_when_a_list_is_empty(sign_in, fake_top_items, fake_personality):
    fake_top_items["items"] = build_top_items(n_artists=2, n_tracks=0)
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 200
    assert fake_personality["calls"] == []
    assert "<li>Artist 1</li>" in response.text


def test_result_missing_provider_token_shows_error(sign_in, fake_top_items):
    client = sign_in(build_session(provider_token=None))

    response = client.get("/result/analysis")

    assert response.status_code == 401
    assert "Oops! Something went wrong" in response.text
    assert "Missing Spotify access token. Please log in again" in response.text
    assert "Go Back" in response.text
    assert fake_top_items["tokens"] == []


def test_result_spotify_failure_shows_error(sign_in, fake_top_items, fake_personality):
    fake_top_items["error"] = SpotifyAPIError("Insufficient client scope", status_code=403)
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 502
    assert "Failed to fetch your Spotify Data" in response.text
    assert fake_personality["calls"] == []


def test_result_rate_limit_asks_to_wait(sign_in, fake_top_items):
    fake_top_items["error"] = SpotifyRateLimitError(retry_after=30)
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 429
    assert "Please wait a minute before trying again" in response.text


def test_result_expired_spotify_token_asks_to_log_in(sign_in, fake_top_items):
    fake_top_items["error"] = SpotifyTokenExpiredError()
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 401
    assert "Your Spotify session has expired. Please log in again" in response.text


def test_result_personality_not_configured(sign_in, fake_top_items, fake_personality):
    fake_personality["error"] = GeminiNotConfiguredError()
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 200
    assert "Couldn&#39;t generate personality analysis at this time." in response.text


def test_result_personality_failure(sign_in, fake_top_items, fake_personality):
    fake_personality["error"] = RuntimeError("429 Resource has been exhausted")
    client = sign_in()

    response = client.get("/result/analysis")

    assert response.status_code == 200
    assert "Couldn&#39;t generate personality analysis at this time." in response.text
    assert "Error generating" not in response.text
    assert "<li>Artist 0</li>" in response.text


def test_result_refreshes_expired_session(sign_in, fake_top_items, fake_personality, monkeypatch):
    client = sign_in(build_session(expires_at=int(time.time()) - 10, provider_token="old-spotify"))
    refreshed = []

    async def fake_refresh(session):
        refreshed.append(session)
        return build_session(provider_token=session.provider_token)

    monkeypatch.setattr(auth_service, "refresh_session", fake_refresh)

    response = client.get("/result/analysis")

    assert response.status_code == 200
    assert len(refreshed) == 1
    assert fake_top_items["tokens"] == ["old-spotify"]

    # The refreshed session was stored, so no second refresh is needed
    client.get("/result/analysis")
    assert len(refreshed) == 1


def test_result_failed_refresh_signs_user_out(sign_in, fake_top_items, monkeypatch):
    client = sign_in(build_session(expires_at=int(time.time()) - 10))

    async def fake_refresh(session):
        raise AuthServiceError("Invalid Refresh Token: Refresh Token Not Found", status_code=400)

    monkeypatch.setattr(auth_service, "refresh_session", fake_refresh)

    response = client.get("/result/analysis", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert client.get("/", follow_redirects=False).status_code == 200
