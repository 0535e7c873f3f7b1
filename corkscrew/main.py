"""Corkscrew - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .config import get_settings
from .errors import RedirectRequired
from .logging_config import get_logger, setup_logging
from .rate_limit import limiter
from .session import persist_rotated_session
from .routes import (
    auth_router,
    dashboard_router,
    home_router,
    jobs_router,
    messages_router,
    profile_router,
)

logger = get_logger("corkscrew.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(
        f"Starting Corkscrew (debug={settings.debug}, "
        f"backend_configured={settings.backend_configured})"
    )
    yield
    logger.info("Shutting down Corkscrew")


app = FastAPI(
    title="Corkscrew",
    description="Event staffing marketplace connecting organizers with hospitality workers",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RedirectRequired)
async def redirect_required_handler(request: Request, exc: RedirectRequired):
    """Missing configuration or session: send the browser where it needs to go."""
    return RedirectResponse(url=exc.location, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Generic failure page for anything a route did not handle itself."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong"},
    )


@app.middleware("http")
async def rotated_session_cookies(request: Request, call_next):
    """Carry refreshed session cookies on every response, redirects and form errors included."""
    response = await call_next(request)
    persist_rotated_session(request, response, get_settings())
    return response


# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(home_router)
app.include_router(auth_router)
app.include_router(jobs_router)
app.include_router(dashboard_router)
app.include_router(profile_router)
app.include_router(messages_router)


@app.get("/health")
async def health():
    """Liveness check with configuration status."""
    settings = get_settings()
    return {
        "service": "corkscrew",
        "version": __version__,
        "status": "ok" if settings.backend_configured else "unconfigured",
    }
