"""Shared page payload pieces."""

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .models import FormError
from .session import Session


class NavLink(BaseModel):
    label: str
    href: str
    method: str = "GET"


class Layout(BaseModel):
    """Chrome every page carries.

    ``server_access_token`` is the token this render used; the client's
    session bridge compares its live session against it.
    """

    authenticated: bool
    nav: list[NavLink]
    server_access_token: str | None = None


class Page(BaseModel):
    layout: Layout


def build_layout(session: Session | None) -> Layout:
    nav = [NavLink(label="Browse Jobs", href="/jobs")]
    if session:
        nav += [
            NavLink(label="Dashboard", href="/dashboard"),
            NavLink(label="Messages", href="/messages"),
            NavLink(label="Profile", href="/profile"),
            NavLink(label="Sign out", href="/auth/sign-out", method="POST"),
        ]
    else:
        nav += [
            NavLink(label="Sign in", href="/auth/sign-in"),
            NavLink(label="Join now", href="/auth/sign-up"),
        ]
    return Layout(
        authenticated=session is not None,
        nav=nav,
        server_access_token=session.access_token if session else None,
    )


FORM_ERROR_RESPONSES = {status.HTTP_400_BAD_REQUEST: {"model": FormError}}


def form_error(message: str) -> JSONResponse:
    """Inline error for a form the backend rejected."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=FormError(error=message).model_dump(),
    )
