"""
Session Guard

Protected pages mount a guard for the lifetime of the request:
- mount: query the session once, then subscribe to auth-state changes
- a change reporting no session for this member marks the guard for redirect
- teardown: unsubscribe

No session (or a failed lookup) raises AuthError, which the app turns into
a redirect to the landing page.
"""
from typing import Callable, Iterator, Optional

from fastapi import Depends, Request

from portal.config import get_settings
from portal.errors import AuthError
from .session import AuthStateChange, Session, SessionProvider


class SessionGuard:
    """Per-page session lifecycle"""

    def __init__(self, provider: SessionProvider):
        self.provider = provider
        self.session: Optional[Session] = None
        self.redirect_required = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    def mount(self, access_token: Optional[str]) -> Optional[Session]:
        """Query the session once and subscribe for the page lifetime"""
        self.session = self.provider.get_session(access_token)
        if self.session is None:
            self.redirect_required = True
            return None

        self._unsubscribe = self.provider.on_auth_state_change(self._on_change)
        return self.session

    def _on_change(self, change: AuthStateChange) -> None:
        if self.session is None or change.session is not None:
            return
        # a sign-out of someone else's session leaves this page alone
        if change.user_id == self.session.user_id:
            self.redirect_required = True

    def check(self) -> Session:
        """The active session, or AuthError when the page must redirect"""
        if self.redirect_required or self.session is None:
            raise AuthError("No active session")
        return self.session

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "SessionGuard":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()


# =============================================
# FastAPI dependencies
# =============================================

def get_session_provider(request: Request) -> SessionProvider:
    """App-scoped provider, created on first use"""
    provider = getattr(request.app.state, "session_provider", None)
    if provider is None:
        provider = SessionProvider()
        request.app.state.session_provider = provider
    return provider


def get_access_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie"""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def session_guard(
    access_token: Optional[str] = Depends(get_access_token),
    provider: SessionProvider = Depends(get_session_provider),
) -> Iterator[SessionGuard]:
    """Mounted guard for a protected route; torn down after the response"""
    guard = SessionGuard(provider)
    with guard:
        if guard.mount(access_token) is None:
            raise AuthError("No active session")
        yield guard


def require_session(guard: SessionGuard = Depends(session_guard)) -> Session:
    return guard.check()
