"""
Shared fixtures for auth tests.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from mcp_session_auth.auth import MemoryStore, SessionAuthProvider
from mcp_session_auth.core import set_provider

SESSION_ID = "550e8400-e29b-41d4-a716-446655440000"
GOOGLE_EMAIL_SCOPE = "https://www.googleapis.com/auth/userinfo.email"


def _rfc3339(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


@pytest.fixture
def session_id():
    return SESSION_ID


@pytest.fixture
def make_session_payload():
    """Factory for serialized session records"""

    def _make(user_id="u1", session_id=SESSION_ID, **overrides):
        now = datetime.now(timezone.utc)
        data = {
            "session_id": session_id,
            "user_id": user_id,
            "created_at": _rfc3339(now),
            "expires_at": _rfc3339(now + timedelta(hours=1)),
        }
        data.update(overrides)
        return json.dumps(data)

    return _make


@pytest.fixture
def make_token_payload():
    """Factory for serialized linked-account records"""

    def _make(user_id="u1", provider="google", expires_in=timedelta(hours=1), **overrides):
        data = {
            "user_id": user_id,
            "provider": provider,
            "provider_user_id": "109876543210",
            "email": "user@example.com",
            "display_name": "Test User",
            "access_token": "ya29.access-token-value",
            "refresh_token": "1//refresh-token-value",
            "expires_at": _rfc3339(datetime.now(timezone.utc) + expires_in),
            "scopes": [GOOGLE_EMAIL_SCOPE],
            "linked_at": "2024-01-01T00:00:00Z",
        }
        data.update(overrides)
        return json.dumps(data)

    return _make


@pytest.fixture
def populated_store(make_session_payload, make_token_payload):
    """Store with one live session for u1 and a valid google token"""
    return MemoryStore(
        {
            f"mcp_session:{SESSION_ID}": make_session_payload(),
            "linked_account:u1:google": make_token_payload(),
        }
    )


@pytest.fixture
def session_provider(populated_store):
    return SessionAuthProvider(populated_store)


@pytest.fixture(autouse=True)
def reset_server_provider():
    """Ensure no test leaks a provider into the server module"""
    set_provider(None)
    yield
    set_provider(None)
