"""
Pytest configuration and fixtures for the members portal tests
"""

import sys
import time
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
from jose import jwt
from postgrest.exceptions import APIError

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from portal.auth.session import Session, SessionProvider  # noqa: E402
from portal.errors import AuthError  # noqa: E402
from portal.events.store import EventStore  # noqa: E402

MEMBER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_MEMBER_ID = "22222222-2222-2222-2222-222222222222"

# `uuid` columns of the events table
UUID_COLUMNS = {"id", "created_by"}


# =============================================================================
# In-memory Supabase table client
# =============================================================================

def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = len(data)


class FakeQuery:
    """Subset of the PostgREST query builder used by EventStore"""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self._op = "select"
        self._payload = None
        self._filters = []
        self._orders = []
        self._limit = None

    def select(self, *columns, **kwargs):
        self._op = "select"
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._orders.append((column, desc))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self._filters)

    def execute(self):
        self.db.calls.append((self.table, self._op))
        if self._op in self.db.fail_on:
            raise self.db.fail_on[self._op]

        for column, value in self._filters:
            if column in UUID_COLUMNS and not _is_uuid(value):
                raise APIError({
                    "message": f"invalid input syntax for type uuid: \"{value}\"",
                    "code": "22P02",
                })

        rows = self.db.tables.setdefault(self.table, [])

        if self._op == "insert":
            row = self.db.new_row(self._payload)
            rows.append(row)
            return FakeResponse([dict(row)])

        if self._op == "delete":
            matched = [row for row in rows if self._matches(row)]
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        result = [dict(row) for row in rows if self._matches(row)]
        for column, desc in reversed(self._orders):
            result.sort(key=lambda row: row.get(column) or "", reverse=desc)
        if self._limit is not None:
            result = result[:self._limit]
        return FakeResponse(result)


class FakeSupabase:
    """Supabase client stand-in: `table()` plus `postgrest.auth()`"""

    def __init__(self):
        self.tables: Dict[str, list] = {"events": []}
        self.calls = []
        self.fail_on: Dict[str, Exception] = {}
        self.postgrest = SimpleNamespace(auth=lambda token: None)
        self._seq = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def new_row(self, payload: dict) -> dict:
        self._seq += 1
        created_at = datetime(2025, 1, 1) + timedelta(minutes=self._seq)
        row = {
            "id": str(uuid.uuid4()),
            "description": None,
            "status": "pending",
            "google_calendar_id": None,
            "created_at": created_at.isoformat() + "+00:00",
        }
        row.update(payload)
        return row

    def seed(self, **overrides) -> dict:
        """Insert a row directly, bypassing the store"""
        payload = {
            "title": "Club Night",
            "event_date": "2025-11-15",
            "event_time": "19:00:00",
            "created_by": MEMBER_ID,
            "status": "pending",
        }
        payload.update(overrides)
        row = self.new_row(payload)
        self.tables["events"].append(row)
        return row

    def inserts(self) -> int:
        return sum(1 for table, op in self.calls if op == "insert")


# =============================================================================
# Sessions
# =============================================================================

def make_token(user_id: str, expires_in: int = 3600) -> str:
    """HS256 JWT shaped like a Supabase access token"""
    return jwt.encode(
        {"sub": user_id, "exp": int(time.time()) + expires_in, "role": "authenticated"},
        "test-secret",
        algorithm="HS256",
    )


class StubSessionProvider(SessionProvider):
    """SessionProvider whose identity provider is a token -> user map"""

    def __init__(self):
        super().__init__(client_factory=MagicMock)
        self.tokens: Dict[str, str] = {}
        self.accounts: Dict[str, tuple] = {}

    def add_member(self, user_id: str, email: Optional[str] = None, password: str = "secret123") -> str:
        token = make_token(user_id)
        self.tokens[token] = user_id
        if email:
            self.accounts[email] = (password, user_id)
        return token

    def get_session(self, access_token):
        user_id = self.tokens.get(access_token or "")
        if user_id is None:
            return None
        return Session(access_token=access_token, user_id=user_id)

    def sign_in(self, email, password):
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials")
        token = self.add_member(account[1])
        return Session(access_token=token, user_id=account[1], email=email)

    def sign_out(self, access_token):
        self.tokens.pop(access_token or "", None)
        super().sign_out(access_token)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def event_store(fake_db):
    return EventStore(fake_db)


@pytest.fixture
def session_provider():
    return StubSessionProvider()


@pytest.fixture
def member_token(session_provider):
    return session_provider.add_member(MEMBER_ID, email="member@example.com")


@pytest.fixture
def other_token(session_provider):
    return session_provider.add_member(OTHER_MEMBER_ID)


@pytest.fixture
def client(fake_db, session_provider):
    """TestClient with the store and session provider replaced"""
    from fastapi.testclient import TestClient

    from portal.auth.guard import get_session_provider
    from portal.events.router import get_event_store
    from portal.server import app

    app.dependency_overrides[get_session_provider] = lambda: session_provider
    app.dependency_overrides[get_event_store] = lambda: EventStore(fake_db)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
