"""Authentication routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel
from supabase import AuthError

from ..config import Settings, get_settings
from ..database import Backend, upsert_profile
from ..errors import RecordAccessError
from ..logging_config import get_logger, log_auth_event
from ..models import AuthCallbackPayload, SignInRequest, SignUpRequest
from ..pages import FORM_ERROR_RESPONSES, Page, build_layout, form_error
from ..rate_limit import callback_limit, limiter, sign_in_limit, sign_up_limit
from ..session import (
    ConfiguredSettings,
    OptionalSession,
    Session,
    clear_session_cookies,
    set_session_cookies,
)

logger = get_logger("corkscrew.auth")
router = APIRouter(prefix="/auth", tags=["auth"])


class AuthPage(Page):
    form: str
    fields: list[str]
    alternate_href: str


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(url=location, status_code=status.HTTP_303_SEE_OTHER)


# =============================================================================
# Pages
# =============================================================================

@router.get("/sign-in", response_model=AuthPage)
async def sign_in_page(settings: ConfiguredSettings, session: OptionalSession):
    return AuthPage(
        layout=build_layout(session),
        form="sign-in",
        fields=["email", "password"],
        alternate_href="/auth/sign-up",
    )


@router.get("/sign-up", response_model=AuthPage)
async def sign_up_page(settings: ConfiguredSettings, session: OptionalSession):
    return AuthPage(
        layout=build_layout(session),
        form="sign-up",
        fields=["full_name", "email", "password", "confirm_password", "role", "terms"],
        alternate_href="/auth/sign-in",
    )


# =============================================================================
# Forms
# =============================================================================

@router.post("/sign-in", responses=FORM_ERROR_RESPONSES)
@limiter.limit(sign_in_limit)
async def sign_in(
    request: Request,
    credentials: SignInRequest,
    db: Backend,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Sign in with email and password, then go to the dashboard."""
    try:
        response = db.auth.sign_in_with_password(
            {"email": credentials.email, "password": credentials.password}
        )
    except AuthError as e:
        log_auth_event("sign_in", None, False, e.message)
        return form_error(e.message)

    if not response.session:
        log_auth_event("sign_in", None, False, "no session returned")
        return form_error("Sign in failed. Please try again.")

    session = Session.from_backend(response.session)
    log_auth_event("sign_in", session.user_id, True)
    redirect = _redirect("/dashboard")
    set_session_cookies(redirect, session, settings)
    return redirect


@router.post("/sign-up", responses=FORM_ERROR_RESPONSES)
@limiter.limit(sign_up_limit)
async def sign_up(
    request: Request,
    form: SignUpRequest,
    db: Backend,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Create an account and its profile.

    The profile row is keyed by the new user's id and carries the chosen
    role, so the rest of the app can branch on hire/work immediately.
    """
    try:
        response = db.auth.sign_up(
            {
                "email": form.email,
                "password": form.password,
                "options": {"data": {"full_name": form.full_name, "role": form.role}},
            }
        )
    except AuthError as e:
        log_auth_event("sign_up", None, False, e.message)
        return form_error(e.message)

    user = response.user
    if user:
        try:
            await upsert_profile(db, {"id": user.id, "full_name": form.full_name, "role": form.role})
        except RecordAccessError as e:
            log_auth_event("sign_up", user.id, False, e.message)
            return form_error(e.message)

    log_auth_event("sign_up", user.id if user else None, True)
    redirect = _redirect("/dashboard")
    # No session yet when email confirmation is required
    if response.session:
        set_session_cookies(redirect, Session.from_backend(response.session), settings)
    return redirect


@router.post("/sign-out")
async def sign_out(
    session: OptionalSession,
    db: Backend,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Sign out and go home. Cookies are cleared even if the backend call fails."""
    try:
        db.auth.sign_out()
    except AuthError as e:
        logger.warning(f"Backend sign out failed: {e.message}")

    log_auth_event("sign_out", session.user_id if session else None, True)
    redirect = _redirect("/")
    clear_session_cookies(redirect, settings)
    return redirect


# =============================================================================
# Session Callback
# =============================================================================

class CallbackResponse(BaseModel):
    success: bool = True


@router.post("/callback", response_model=CallbackResponse)
@limiter.limit(callback_limit)
async def session_callback(
    request: Request,
    payload: AuthCallbackPayload,
    db: Backend,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Apply a client-side session transition to the cookie session.

    SIGNED_IN with a session stores the token pair, SIGNED_OUT clears it;
    other events are acknowledged and ignored. Failures to apply are logged,
    never reported: the caller does not read the outcome.
    """
    response = JSONResponse(content=CallbackResponse().model_dump())

    if payload.event == "SIGNED_IN" and payload.session:
        try:
            result = db.auth.set_session(
                payload.session.access_token, payload.session.refresh_token
            )
        except AuthError as e:
            log_auth_event("callback", None, False, e.message)
            return response
        if result.session:
            session = Session.from_backend(result.session)
            set_session_cookies(response, session, settings)
            log_auth_event("callback", session.user_id, True)
    elif payload.event == "SIGNED_OUT":
        try:
            db.auth.sign_out()
        except AuthError as e:
            logger.warning(f"Backend sign out failed during callback: {e.message}")
        clear_session_cookies(response, settings)
        log_auth_event("callback_sign_out", None, True)
    else:
        logger.debug(f"Ignoring session callback event {payload.event}")

    return response
