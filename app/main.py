import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from app.config import get_settings
from app.core.exceptions import UpstreamError, status_for, user_facing_message
from app.routers import auth, me, pages, personality
from app.services.http_client import HTTPClientManager
from app.templating import BASE_DIR

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    await HTTPClientManager.warmup()
    yield
    # Shutdown
    await HTTPClientManager.close()
    logger.info(f"Shutting down {settings.app_name}...")


app = FastAPI(
    title=settings.app_name,
    description="Discover who you are by your music taste",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins,
    allow_credentials=not settings.debug,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Signed cookie holding the Supabase session for the life of the browser session
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.session_https_only,
)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    """Report hosted-service failures from JSON routes as readable errors."""
    logger.warning(f"Upstream error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": user_facing_message(exc)},
    )


app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

# Pages and sign-in
app.include_router(pages.router, tags=["Pages"])
app.include_router(auth.router, tags=["Authentication"])

# JSON API
app.include_router(
    me.router,
    prefix=f"{settings.api_v1_prefix}/me",
    tags=["Me"]
)
app.include_router(
    personality.router,
    prefix=f"{settings.api_v1_prefix}/personality",
    tags=["Personality"]
)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
