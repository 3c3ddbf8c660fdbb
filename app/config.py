from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Music Persona"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Public URL of this service (for OAuth callbacks)
    backend_url: str = "http://localhost:8000"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Browser session cookie
    session_secret_key: str
    session_cookie_name: str = "music_persona_session"
    session_https_only: bool = False
    session_max_age: Optional[int] = None  # None = expires with the browser session

    # Supabase Auth (hosted session service, Spotify configured as provider)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None  # Enables signature checks on access tokens

    # Spotify Web API
    spotify_scopes: str = "user-top-read"
    spotify_top_items_limit: int = 10
    spotify_time_range: str = "medium_term"

    # Google Gemini API
    google_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("google_api_key", "google_genai_api_key"),
    )
    gemini_model: str = "gemini-2.0-flash"

    # Outbound HTTP (Supabase Auth, Spotify)
    http_connect_timeout: float = 5.0
    http_read_timeout: float = 15.0
    http_max_connections: int = 20

    # Remote cover images we are willing to render
    allowed_image_hosts: list[str] = ["i.scdn.co", "*.scdn.co", "*.spotifycdn.com"]

    @property
    def auth_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def auth_callback_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}/auth/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
