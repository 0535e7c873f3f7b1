"""Page and form routes."""

from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .home import router as home_router
from .jobs import router as jobs_router
from .messages import router as messages_router
from .profile import router as profile_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "home_router",
    "jobs_router",
    "messages_router",
    "profile_router",
]
