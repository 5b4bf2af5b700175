"""
Auth Tests - session provider, session guard, settings
"""
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from portal.auth.guard import SessionGuard
from portal.auth.session import AuthStateChange, Session, SessionProvider, read_token_claims
from portal.config import get_settings
from portal.errors import AuthError

from conftest import MEMBER_ID, OTHER_MEMBER_ID, make_token


def provider_with_client(client) -> SessionProvider:
    return SessionProvider(client_factory=lambda: client)


def supabase_user(user_id=MEMBER_ID, email="member@example.com"):
    return SimpleNamespace(id=user_id, email=email)


class TestPortalSettings:
    """Settings defaults"""

    def test_settings_defaults(self):
        """Default values"""
        settings = get_settings()
        assert settings.SESSION_COOKIE_NAME == "access_token"
        assert settings.SESSION_COOKIE_MAX_AGE > 0
        assert settings.PERSONAL_TRAINING_URL.startswith("https://calendly.com/")
        assert settings.ROOM_BOOKING_PROVIDER == "Skedda"


class TestReadTokenClaims:
    """JWT claims"""

    def test_reads_subject(self):
        token = make_token(MEMBER_ID)
        assert read_token_claims(token)["sub"] == MEMBER_ID

    def test_malformed_token(self):
        assert read_token_claims("not-a-jwt") is None


class TestGetSession:
    """SessionProvider.get_session"""

    def test_valid_token(self):
        """Supabase confirms the user"""
        client = MagicMock()
        client.auth.get_user.return_value = SimpleNamespace(user=supabase_user())
        provider = provider_with_client(client)
        token = make_token(MEMBER_ID)

        session = provider.get_session(token)

        assert session is not None
        assert session.user_id == MEMBER_ID
        assert session.email == "member@example.com"
        assert session.expires_at is not None
        client.auth.get_user.assert_called_once_with(token)

    def test_missing_token(self):
        client = MagicMock()
        provider = provider_with_client(client)

        assert provider.get_session(None) is None
        assert provider.get_session("") is None
        client.auth.get_user.assert_not_called()

    def test_expired_token_skips_network(self):
        """Expired tokens are rejected locally"""
        client = MagicMock()
        provider = provider_with_client(client)

        assert provider.get_session(make_token(MEMBER_ID, expires_in=-60)) is None
        client.auth.get_user.assert_not_called()

    def test_malformed_token(self):
        client = MagicMock()
        provider = provider_with_client(client)

        assert provider.get_session("garbage") is None
        client.auth.get_user.assert_not_called()

    def test_failed_lookup_is_no_session(self):
        """A provider failure counts as no session"""
        client = MagicMock()
        client.auth.get_user.side_effect = RuntimeError("network down")
        provider = provider_with_client(client)

        assert provider.get_session(make_token(MEMBER_ID)) is None

    def test_rejected_token(self):
        client = MagicMock()
        client.auth.get_user.return_value = SimpleNamespace(user=None)
        provider = provider_with_client(client)

        assert provider.get_session(make_token(MEMBER_ID)) is None

    def test_get_user_id(self):
        client = MagicMock()
        client.auth.get_user.return_value = SimpleNamespace(user=supabase_user())
        provider = provider_with_client(client)

        assert provider.get_user_id(make_token(MEMBER_ID)) == MEMBER_ID
        assert provider.get_user_id(None) is None


class TestCredentials:
    """Sign in / sign up / sign out"""

    def _auth_response(self, token="issued-token", user_id=MEMBER_ID):
        user = supabase_user(user_id)
        auth_session = SimpleNamespace(
            access_token=token,
            expires_at=int(time.time()) + 3600,
            user=user,
        )
        return SimpleNamespace(session=auth_session, user=user)

    def test_sign_in(self):
        client = MagicMock()
        client.auth.sign_in_with_password.return_value = self._auth_response()
        provider = provider_with_client(client)
        changes = []
        provider.on_auth_state_change(changes.append)

        session = provider.sign_in("member@example.com", "secret123")

        assert session.access_token == "issued-token"
        assert session.user_id == MEMBER_ID
        assert changes == [AuthStateChange("SIGNED_IN", MEMBER_ID, session)]

    def test_sign_in_failure(self):
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        provider = provider_with_client(client)

        with pytest.raises(AuthError) as exc_info:
            provider.sign_in("member@example.com", "wrong")
        assert "Invalid login credentials" in exc_info.value.message

    def test_sign_up_awaiting_confirmation(self):
        """No session until the email is confirmed"""
        client = MagicMock()
        client.auth.sign_up.return_value = SimpleNamespace(session=None, user=supabase_user())
        provider = provider_with_client(client)

        assert provider.sign_up("new@example.com", "secret123") is None

    def test_sign_up_with_session(self):
        client = MagicMock()
        client.auth.sign_up.return_value = self._auth_response(token="fresh")
        provider = provider_with_client(client)

        session = provider.sign_up("new@example.com", "secret123")
        assert session.access_token == "fresh"

    def test_sign_out_notifies(self):
        client = MagicMock()
        provider = provider_with_client(client)
        changes = []
        provider.on_auth_state_change(changes.append)
        token = make_token(MEMBER_ID)

        provider.sign_out(token)

        client.auth.admin.sign_out.assert_called_once_with(token)
        assert changes == [AuthStateChange("SIGNED_OUT", MEMBER_ID, None)]

    def test_sign_out_revoke_failure_still_notifies(self):
        client = MagicMock()
        client.auth.admin.sign_out.side_effect = RuntimeError("offline")
        provider = provider_with_client(client)
        changes = []
        provider.on_auth_state_change(changes.append)

        provider.sign_out(make_token(MEMBER_ID))

        assert len(changes) == 1
        assert changes[0].session is None

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_sign_out_without_readable_token_is_silent(self, token):
        """Nobody is named, so nobody is notified"""
        client = MagicMock()
        provider = provider_with_client(client)
        changes = []
        provider.on_auth_state_change(changes.append)

        provider.sign_out(token)

        assert changes == []


class TestAuthStateSubscriptions:
    """on_auth_state_change"""

    def test_unsubscribe(self):
        provider = SessionProvider(client_factory=MagicMock)
        changes = []
        unsubscribe = provider.on_auth_state_change(changes.append)
        assert provider.listener_count == 1

        unsubscribe()
        unsubscribe()  # idempotent
        provider.sign_out(make_token(MEMBER_ID))

        assert provider.listener_count == 0
        assert changes == []

    def test_failing_listener_does_not_block_others(self):
        provider = SessionProvider(client_factory=MagicMock)
        changes = []

        def broken(change):
            raise RuntimeError("listener bug")

        provider.on_auth_state_change(broken)
        provider.on_auth_state_change(changes.append)
        provider.sign_out(make_token(MEMBER_ID))

        assert len(changes) == 1


class TestSessionGuard:
    """SessionGuard mount / change / teardown"""

    def test_mount_subscribes_and_teardown_unsubscribes(self, session_provider, member_token):
        guard = SessionGuard(session_provider)

        session = guard.mount(member_token)

        assert session.user_id == MEMBER_ID
        assert session_provider.listener_count == 1
        assert guard.check() == session

        guard.teardown()
        assert session_provider.listener_count == 0

    def test_no_session_requires_redirect(self, session_provider):
        guard = SessionGuard(session_provider)

        assert guard.mount(None) is None
        assert guard.redirect_required is True
        assert session_provider.listener_count == 0
        with pytest.raises(AuthError):
            guard.check()

    def test_sign_out_during_page_lifetime(self, session_provider, member_token):
        """Sign-out notification for this member flips the guard to redirect"""
        with SessionGuard(session_provider) as guard:
            guard.mount(member_token)
            session_provider.sign_out(member_token)

            assert guard.redirect_required is True
            with pytest.raises(AuthError):
                guard.check()

        assert session_provider.listener_count == 0

    def test_other_member_sign_out_is_ignored(self, session_provider, member_token, other_token):
        with SessionGuard(session_provider) as guard:
            guard.mount(member_token)
            session_provider.sign_out(other_token)

            assert guard.redirect_required is False
            assert guard.check().user_id == MEMBER_ID

    @pytest.mark.parametrize("token", [None, "garbage"])
    def test_anonymous_sign_out_is_ignored(self, session_provider, member_token, token):
        """A sign-out naming no member leaves every page alone"""
        with SessionGuard(session_provider) as guard:
            guard.mount(member_token)
            session_provider.sign_out(token)

            assert guard.redirect_required is False
            assert guard.check().user_id == MEMBER_ID

    def test_change_without_user_is_ignored(self, session_provider, member_token):
        with SessionGuard(session_provider) as guard:
            guard.mount(member_token)
            session_provider._notify(AuthStateChange("SIGNED_OUT", None, None))

            assert guard.redirect_required is False

    def test_sign_in_notification_is_ignored(self, session_provider, member_token):
        with SessionGuard(session_provider) as guard:
            guard.mount(member_token)
            other = Session(access_token="t", user_id=OTHER_MEMBER_ID)
            session_provider._notify(AuthStateChange("SIGNED_IN", OTHER_MEMBER_ID, other))

            assert guard.redirect_required is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
