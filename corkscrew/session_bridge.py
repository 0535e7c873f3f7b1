"""Keeps a client's live auth state and the server-rendered state aligned.

A page is rendered with the access token the server saw at the time. The
client's backend session can move on afterwards (sign-in in another tab,
sign-out, token refresh). The bridge watches those transitions, asks for a
fresh render whenever the tokens no longer match, and forwards each
transition to ``POST /auth/callback`` so the server's cookie session follows.

The forward is a notification, not a guarantee: it is sent at most once, in
the background, and its outcome is discarded.
"""

from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable

import httpx

from .config import Settings, get_settings
from .database import get_supabase_client
from .logging_config import get_logger

logger = get_logger("corkscrew.session_bridge")

CALLBACK_PATH = "/auth/callback"
DEFAULT_TIMEOUT = 5.0


class SyncState(str, Enum):
    IN_SYNC = "in_sync"
    DIVERGED = "diverged"


def _access_token(session: Any) -> str | None:
    if session is None:
        return None
    if isinstance(session, dict):
        return session.get("access_token")
    return getattr(session, "access_token", None)


def compare_session(server_access_token: str | None, session: Any) -> SyncState:
    """Compare the token a page was rendered with to the client's current session.

    A session appearing where there was none, or disappearing, counts as
    diverged just like a changed token.
    """
    if _access_token(session) == server_access_token:
        return SyncState.IN_SYNC
    return SyncState.DIVERGED


def callback_payload(event: str, session: Any) -> dict:
    """Body for ``POST /auth/callback``."""
    if session is None:
        return {"event": event, "session": None}
    if isinstance(session, dict):
        tokens = {
            "access_token": session.get("access_token"),
            "refresh_token": session.get("refresh_token"),
        }
    else:
        tokens = {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
        }
    return {"event": event, "session": tokens}


class CallbackNotifier:
    """Fire-and-forget poster for session transitions.

    Posts go through ``http``, whose cookie jar is the browser-side session
    store: the cookies ``/auth/callback`` sets or clears are the ones later
    renders fetched through the same client carry.
    """

    def __init__(self, http: httpx.Client, url: str = CALLBACK_PATH, owns_client: bool = False):
        self.http = http
        self.url = url
        self._owns_client = owns_client
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="session-callback")

    @classmethod
    def for_app(cls, app_url: str, timeout: float = DEFAULT_TIMEOUT) -> "CallbackNotifier":
        http = httpx.Client(base_url=app_url.rstrip("/"), timeout=timeout)
        return cls(http, owns_client=True)

    def dispatch(self, event: str, session: Any) -> None:
        """Queue one notification and return immediately."""
        payload = callback_payload(event, session)
        try:
            self._executor.submit(self.send, payload)
        except RuntimeError:
            # executor already shut down
            logger.debug(f"Dropped {event} notification after shutdown")

    def send(self, payload: dict) -> None:
        """POST the payload; any transport or HTTP error is logged and dropped."""
        try:
            response = self.http.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug(f"Session callback failed ({payload.get('event')}): {e}")

    def shutdown(self) -> None:
        """Drop queued notifications, let an in-flight one finish, then release the client."""
        self._executor.shutdown(wait=True, cancel_futures=True)
        if self._owns_client:
            self.http.close()


class SessionBridge:
    """Background observer of backend auth transitions for one mounted page.

    Args:
        auth: The backend auth client (``supabase.Client.auth``). It must be
            the shared instance so re-renders reuse one subscription.
        server_access_token: Token the server rendered the page with.
        on_diverged: Called once per notification whose session no longer
            matches the rendered one; re-fetches the current route.
        notifier: Forwards every transition to the server.
    """

    def __init__(
        self,
        auth: Any,
        server_access_token: str | None,
        on_diverged: Callable[[], None],
        notifier: CallbackNotifier,
    ):
        self.auth = auth
        self.server_access_token = server_access_token
        self.on_diverged = on_diverged
        self.notifier = notifier
        self._subscription = None

    @classmethod
    def connect(
        cls,
        server_access_token: str | None,
        on_diverged: Callable[[httpx.Client], Any],
        settings: Settings | None = None,
    ) -> "SessionBridge":
        """Bridge the shared backend client to this app's callback endpoint.

        ``on_diverged`` receives the notifier's HTTP client so the re-fetch
        sends the cookies the callback just wrote.
        """
        settings = settings or get_settings()
        client = get_supabase_client(settings)
        notifier = CallbackNotifier.for_app(settings.app_url)
        return cls(
            client.auth,
            server_access_token,
            lambda: on_diverged(notifier.http),
            notifier,
        )

    @property
    def observing(self) -> bool:
        return self._subscription is not None

    def observe(self) -> None:
        """Subscribe to auth transitions. Calling again while subscribed is a no-op."""
        if self._subscription is not None:
            return
        self._subscription = self.auth.on_auth_state_change(self.handle)
        logger.debug("Session bridge subscribed")

    def handle(self, event: str, session: Any) -> SyncState:
        """Process one transition in receipt order."""
        state = compare_session(self.server_access_token, session)
        if state is SyncState.DIVERGED:
            try:
                self.on_diverged()
            except Exception as e:
                logger.warning(f"Re-render after {event} failed: {e}")
        self.notifier.dispatch(event, session)
        return state

    def close(self) -> None:
        """Release the subscription and shut down the notifier."""
        if self._subscription is not None:
            try:
                self._subscription.unsubscribe()
            finally:
                self._subscription = None
                logger.debug("Session bridge unsubscribed")
        self.notifier.shutdown()
