"""
Auth Module - Supabase sessions and the session guard
"""
from .router import router as auth_router
from .session import AuthStateChange, Session, SessionProvider
from .guard import SessionGuard, require_session, session_guard

__all__ = [
    "auth_router",
    "AuthStateChange",
    "Session",
    "SessionProvider",
    "SessionGuard",
    "require_session",
    "session_guard",
]
