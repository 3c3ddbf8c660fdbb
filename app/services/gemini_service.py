"""Gemini AI service for music personality descriptions."""

import logging
from typing import Optional

import google.generativeai as genai

from app.config import get_settings
from app.core.exceptions import GeminiNotConfiguredError
from app.schemas.music import Artist, Track

logger = logging.getLogger(__name__)

settings = get_settings()

PERSONALITY_PROMPT = (
    "You are a playful Gen Z/Alpha personality explainer. "
    "Use at least 5 full sentences. No formatting. "
    "Don't recommend new artists—only interpret what's given. "
    "Top artists: {artists} Top tracks: {tracks} "
)

FALLBACK_DESCRIPTION = "Couldn't generate a description right now."


class GeminiService:
    """Service for interacting with Google's Gemini AI."""

    def __init__(self):
        self._configured = False
        self._model: Optional[genai.GenerativeModel] = None

    def _ensure_configured(self):
        """Configure Gemini API if not already configured."""
        if not self._configured:
            if not settings.google_api_key:
                raise GeminiNotConfiguredError()
            genai.configure(api_key=settings.google_api_key)
            self._model = genai.GenerativeModel(settings.gemini_model)
            self._configured = True

    @staticmethod
    def build_personality_prompt(artists: list[Artist], tracks: list[Track]) -> str:
        artist_list = ", ".join(a.name for a in artists)
        track_list = ", ".join(f"{t.name} - {t.artist}" for t in tracks)
        return PERSONALITY_PROMPT.format(artists=artist_list, tracks=track_list)

    async def describe_personality(self, artists: list[Artist], tracks: list[Track]) -> str:
        """
        Describe a listener's personality from their top artists and tracks.

        Args:
            artists: Top artists, in ranking order
            tracks: Top tracks, in ranking order

        Returns:
            Generated prose, or a fallback line when the model returns nothing
        """
        self._ensure_configured()

        prompt = self.build_personality_prompt(artists, tracks)
        response = await self._model.generate_content_async(prompt)

        try:
            text = response.text
        except ValueError:
            # Raised when the candidate was blocked or is empty
            text = None

        if not text or not text.strip():
            logger.warning("Gemini returned an empty personality description")
            return FALLBACK_DESCRIPTION

        return text.strip()


# Singleton instance
gemini_service = GeminiService()
