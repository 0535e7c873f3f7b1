"""Server-side session store.

The session lives in two httpOnly cookies holding the backend's access and
refresh tokens. Each request restores it once, against its own backend
client, so that data queries run under the viewer's identity.
"""

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from supabase import AuthError, Client

from .config import Settings, get_settings
from .database import Backend
from .errors import SetupRequired, SignInRequired
from .logging_config import get_logger

logger = get_logger("corkscrew.session")

ACCESS_COOKIE_NAME = "corkscrew-access-token"
REFRESH_COOKIE_NAME = "corkscrew-refresh-token"


@dataclass(frozen=True)
class Session:
    """The authenticated identity and tokens for one browser."""

    user_id: str
    access_token: str
    refresh_token: str
    expires_at: int | None = None

    @classmethod
    def from_backend(cls, session: Any) -> "Session":
        """Build from a supabase auth ``Session`` object."""
        return cls(
            user_id=session.user.id,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
        )


# =============================================================================
# Cookie Helpers
# =============================================================================

def set_session_cookies(response: Response, session: Session, settings: Settings) -> None:
    """Write the token pair to httpOnly cookies."""
    for key, value in (
        (ACCESS_COOKIE_NAME, session.access_token),
        (REFRESH_COOKIE_NAME, session.refresh_token),
    ):
        response.set_cookie(
            key=key,
            value=value,
            max_age=settings.cookie_max_age,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
            path="/",
        )


def clear_session_cookies(response: Response, settings: Settings) -> None:
    for key in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        response.delete_cookie(
            key=key,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


# =============================================================================
# Restore
# =============================================================================

def verify_access_token(token: str, settings: Settings) -> dict | None:
    """Verify an access token locally with the project's JWT secret.

    Returns the claims, or None when no secret is configured or the token is
    invalid or expired.
    """
    if not settings.supabase_jwt_secret:
        return None
    try:
        claims = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except JWTError as e:
        logger.debug(f"Local token verification failed: {e}")
        return None
    if not claims.get("sub"):
        return None
    return claims


async def restore_session(
    db: Client,
    access_token: str | None,
    refresh_token: str | None,
    settings: Settings,
) -> Session | None:
    """Turn a cookie token pair into a live session on ``db``.

    A locally verified token skips the backend entirely. Anything else goes
    through ``auth.set_session``, which validates the token and refreshes it
    when expired. Backend auth errors mean there is no session.
    """
    if not access_token:
        return None

    claims = verify_access_token(access_token, settings)
    if claims:
        db.postgrest.auth(access_token)
        return Session(
            user_id=claims["sub"],
            access_token=access_token,
            refresh_token=refresh_token or "",
            expires_at=claims.get("exp"),
        )

    if not refresh_token:
        return None

    try:
        response = db.auth.set_session(access_token, refresh_token)
    except AuthError as e:
        logger.info(f"Session restore rejected: {e.message}")
        return None

    if not response.session:
        return None
    return Session.from_backend(response.session)


async def get_optional_session(
    request: Request,
    db: Backend,
    settings: Annotated[Settings, Depends(get_settings)],
) -> Session | None:
    """FastAPI dependency: the viewer's session, or None."""
    access_token = request.cookies.get(ACCESS_COOKIE_NAME)
    refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)
    session = await restore_session(db, access_token, refresh_token, settings)
    if session and session.access_token != access_token:
        # the backend rotated the pair; the old refresh token is spent
        request.state.rotated_session = session
    return session


def sets_session_cookies(response: Response) -> bool:
    prefix = f"{ACCESS_COOKIE_NAME}=".encode()
    return any(
        name == b"set-cookie" and value.startswith(prefix)
        for name, value in response.raw_headers
    )


def persist_rotated_session(request: Request, response: Response, settings: Settings) -> None:
    """Write a token pair rotated during this request onto the outgoing response.

    Routes that already set or cleared the session cookies (sign-in, sign-out,
    callback) keep theirs.
    """
    session = getattr(request.state, "rotated_session", None)
    if session is None or sets_session_cookies(response):
        return
    set_session_cookies(response, session, settings)


async def get_current_session(
    session: Annotated[Session | None, Depends(get_optional_session)],
) -> Session:
    """FastAPI dependency: the viewer's session, redirecting to sign-in without one."""
    if session is None:
        raise SignInRequired()
    return session


def require_backend(settings: Annotated[Settings, Depends(get_settings)]) -> Settings:
    """FastAPI dependency: redirect to the setup page when credentials are absent."""
    if not settings.backend_configured:
        raise SetupRequired()
    return settings


# Type aliases for dependency injection
OptionalSession = Annotated[Session | None, Depends(get_optional_session)]
CurrentSession = Annotated[Session, Depends(get_current_session)]
ConfiguredSettings = Annotated[Settings, Depends(require_backend)]
