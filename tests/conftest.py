"""Pytest configuration and fixtures."""

import os
import secrets
import sys
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# Unique signing secret per run so tokens minted here never verify elsewhere
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

if not os.environ.get("RUN_INTEGRATION"):
    os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
    os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
    os.environ["SUPABASE_JWT_SECRET"] = _TEST_JWT_SECRET
    os.environ.setdefault("COOKIE_SECURE", "false")
else:
    from pathlib import Path

    from dotenv import load_dotenv

    env_path = Path(__file__).parent.parent / ".env"

    if not os.environ.get("CONFIRM_INTEGRATION_CREDENTIALS"):
        print(
            "\nIntegration tests use REAL Supabase credentials from .env.\n"
            "Set CONFIRM_INTEGRATION_CREDENTIALS=yes to proceed.\n",
            file=sys.stderr,
        )
        pytest.exit(
            "Integration tests require CONFIRM_INTEGRATION_CREDENTIALS=yes",
            returncode=1,
        )
    load_dotenv(env_path, override=True)

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from corkscrew.config import get_settings  # noqa: E402
from corkscrew.database import get_backend  # noqa: E402
from corkscrew.main import app  # noqa: E402
from corkscrew.rate_limit import limiter  # noqa: E402
from corkscrew.session import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME  # noqa: E402

WORKER_ID = "usr_worker_0001"
CLIENT_ID = "usr_client_0001"


def make_token(user_id: str, expires_in: int = 3600) -> str:
    """Mint an access token the test settings will verify locally."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, get_settings().supabase_jwt_secret, algorithm="HS256")


def backend_session(user_id: str, access_token: str = "at-new", refresh_token: str = "rt-new"):
    """Shape of a supabase auth Session, as far as the app reads it."""
    return SimpleNamespace(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=int(time.time()) + 3600,
        user=SimpleNamespace(id=user_id),
    )


@pytest.fixture
def db():
    """Stand-in for the request-scoped Supabase client."""
    return MagicMock()


@pytest.fixture
def client(db):
    """Test client whose routes all receive the ``db`` fake."""
    app.dependency_overrides[get_backend] = lambda: db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


def _sign_in(client, user_id: str) -> str:
    token = make_token(user_id)
    client.cookies.set(ACCESS_COOKIE_NAME, token)
    client.cookies.set(REFRESH_COOKIE_NAME, "refresh-token")
    return token


@pytest.fixture
def as_worker(client):
    """Sign the test client in as a worker; returns the access token."""
    return _sign_in(client, WORKER_ID)


@pytest.fixture
def as_client(client):
    """Sign the test client in as a hiring client; returns the access token."""
    return _sign_in(client, CLIENT_ID)


@pytest.fixture
def mint_token():
    """Factory for locally verifiable access tokens."""
    return make_token


@pytest.fixture
def auth_session():
    """Factory for supabase-like auth sessions."""
    return backend_session
