"""
Session Provider - Supabase Auth adapter

Wraps the identity provider behind four operations the portal consumes:
get session, get current user id, sign out, and auth-state change
subscriptions. Sign-in / sign-up back the landing page form.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from jose import JWTError, jwt
from loguru import logger
from pydantic import BaseModel
from supabase import Client

from database.supabase_client import create_supabase_client
from portal.errors import AuthError


class Session(BaseModel):
    """Authenticated member session"""
    access_token: str
    user_id: str
    email: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class AuthStateChange:
    """Notification sent to auth-state listeners"""
    event: str                   # SIGNED_IN / SIGNED_OUT
    user_id: Optional[str]
    session: Optional[Session]


AuthStateListener = Callable[[AuthStateChange], None]


def read_token_claims(access_token: str) -> Optional[dict]:
    """
    JWT claims without signature verification

    Signature checks are left to Supabase (`auth.get_user`); this only
    rejects malformed or expired tokens before a network round trip.
    """
    try:
        return jwt.get_unverified_claims(access_token)
    except JWTError:
        return None


def _expiry(claims: dict) -> Optional[datetime]:
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)


class SessionProvider:
    """Session lookup and auth-state subscriptions over Supabase Auth"""

    def __init__(self, client_factory: Callable[[], Client] = create_supabase_client):
        self._client_factory = client_factory
        self._listeners: List[AuthStateListener] = []

    # =============================================
    # Session lookup
    # =============================================

    def get_session(self, access_token: Optional[str]) -> Optional[Session]:
        """
        Current session for `access_token`

        Missing, malformed, expired or rejected tokens all give None; a
        failed provider call is treated the same as "no session".
        """
        if not access_token:
            return None

        claims = read_token_claims(access_token)
        if claims is None:
            return None

        expires_at = _expiry(claims)
        if expires_at and expires_at <= datetime.now(timezone.utc):
            return None

        try:
            response = self._client_factory().auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Session lookup failed: {e}")
            return None

        user = getattr(response, "user", None) if response else None
        if not user:
            return None

        return Session(
            access_token=access_token,
            user_id=str(user.id),
            email=getattr(user, "email", None),
            expires_at=expires_at,
        )

    def get_user_id(self, access_token: Optional[str]) -> Optional[str]:
        session = self.get_session(access_token)
        return session.user_id if session else None

    # =============================================
    # Credentials
    # =============================================

    def sign_in(self, email: str, password: str) -> Session:
        """Email/password sign-in"""
        try:
            response = self._client_factory().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.info(f"Sign-in failed for {email}: {e}")
            raise AuthError(str(e) or "Invalid login credentials") from e

        session = self._session_from_auth_response(response)
        if session is None:
            raise AuthError("Invalid login credentials")

        logger.info(f"Signed in: user={session.user_id}")
        self._notify(AuthStateChange("SIGNED_IN", session.user_id, session))
        return session

    def sign_up(self, email: str, password: str) -> Optional[Session]:
        """
        Email/password sign-up

        Returns:
            the new session, or None when the project requires email
            confirmation before the first sign-in
        """
        try:
            response = self._client_factory().auth.sign_up(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.info(f"Sign-up failed for {email}: {e}")
            raise AuthError(str(e) or "Sign-up failed") from e

        session = self._session_from_auth_response(response)
        if session is not None:
            logger.info(f"Signed up: user={session.user_id}")
            self._notify(AuthStateChange("SIGNED_IN", session.user_id, session))
        else:
            logger.info(f"Signed up, awaiting email confirmation: {email}")
        return session

    def sign_out(self, access_token: Optional[str]) -> None:
        """Revoke the session (best effort) and notify listeners"""
        claims = read_token_claims(access_token) if access_token else None
        user_id = claims.get("sub") if claims else None

        if access_token:
            try:
                self._client_factory().auth.admin.sign_out(access_token)
            except Exception as e:
                logger.warning(f"Sign-out revoke failed: {e}")

        # an unreadable token names nobody, so no listener is told
        if user_id is None:
            logger.info("Sign-out without a readable session")
            return

        logger.info(f"Signed out: user={user_id}")
        self._notify(AuthStateChange("SIGNED_OUT", user_id, None))

    @staticmethod
    def _session_from_auth_response(response) -> Optional[Session]:
        auth_session = getattr(response, "session", None) if response else None
        if not auth_session or not auth_session.access_token:
            return None

        user = auth_session.user or getattr(response, "user", None)
        if not user:
            return None

        expires_at = None
        if getattr(auth_session, "expires_at", None):
            expires_at = datetime.fromtimestamp(int(auth_session.expires_at), tz=timezone.utc)

        return Session(
            access_token=auth_session.access_token,
            user_id=str(user.id),
            email=getattr(user, "email", None),
            expires_at=expires_at,
        )

    # =============================================
    # Auth-state subscriptions
    # =============================================

    def on_auth_state_change(self, callback: AuthStateListener) -> Callable[[], None]:
        """
        Register `callback`; returns the unsubscribe handle

        Callbacks run synchronously, one at a time, on the notifying thread.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, change: AuthStateChange) -> None:
        for callback in list(self._listeners):
            try:
                callback(change)
            except Exception as e:
                logger.exception(f"Auth-state listener failed: {e}")
