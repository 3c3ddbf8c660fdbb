"""Jinja2 templates shared by the HTML routes."""

from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.config import get_settings
from app.core.exceptions import status_for, user_facing_message
from app.utils.images import is_allowed_image_url

settings = get_settings()

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.globals["app_name"] = settings.app_name
templates.env.globals["is_allowed_image"] = lambda url: is_allowed_image_url(
    url, settings.allowed_image_hosts
)


def render_login(request: Request, error: Optional[str] = None, status_code: int = 200):
    """Render the login page, optionally with an error banner."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"error": error},
        status_code=status_code,
    )


def render_error(request: Request, exc: BaseException):
    """Render the error view for a failure on the result page."""
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": user_facing_message(exc)},
        status_code=status_for(exc),
    )
