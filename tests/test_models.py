"""
Tests for identity, session and token records.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from mcp_session_auth.auth.models import (
    Identity,
    Secret,
    SessionRecord,
    TokenRecord,
    parse_rfc3339,
)


class TestIdentity:
    """Test identity immutability"""

    def test_fields(self):
        identity = Identity(user_id="u1", metadata={"auth_type": "api_key"})

        assert identity.user_id == "u1"
        assert identity.auth_type == "api_key"
        assert identity.to_dict() == {"user_id": "u1", "metadata": {"auth_type": "api_key"}}

    def test_frozen(self):
        identity = Identity(user_id="u1")

        with pytest.raises(AttributeError):
            identity.user_id = "u2"  # type: ignore[misc]

    def test_metadata_read_only_and_detached(self):
        source = {"auth_type": "api_key"}
        identity = Identity(user_id="u1", metadata=source)

        source["auth_type"] = "changed"
        assert identity.metadata["auth_type"] == "api_key"

        with pytest.raises(TypeError):
            identity.metadata["auth_type"] = "x"  # type: ignore[index]

    def test_unknown_auth_type(self):
        assert Identity(user_id="u1").auth_type == "unknown"


class TestSecret:
    """Test secret zeroing"""

    def test_reveal_and_wipe(self):
        secret = Secret("s3cr3t")
        buffer = secret.raw_buffer()

        assert secret.reveal() == "s3cr3t"
        assert len(secret) == 6

        secret.wipe()

        assert secret.wiped
        assert buffer == bytearray(6)
        with pytest.raises(ValueError):
            secret.reveal()

    def test_context_manager_wipes_on_error(self):
        secret = Secret("s3cr3t")

        with pytest.raises(RuntimeError):
            with secret:
                raise RuntimeError("boom")

        assert secret.wiped
        assert not any(secret.raw_buffer())

    def test_repr_hides_value(self):
        secret = Secret("s3cr3t")

        assert "s3cr3t" not in repr(secret)
        assert "s3cr3t" not in str(secret)

    def test_equality(self):
        assert Secret("a") == Secret("a")
        assert Secret("a") != Secret("b")


class TestParseRfc3339:
    """Test RFC3339 parsing"""

    @pytest.mark.parametrize(
        "value",
        [
            "2020-01-01T00:00:00Z",
            "2020-01-01T00:00:00z",
            "2020-01-01t00:00:00Z",
            "2020-01-01 00:00:00Z",
            "2020-01-01T00:00:00.123456789Z",
            "2020-01-01T05:30:00+05:30",
            "2020-01-01T00:00:00-08:00",
        ],
    )
    def test_valid(self, value):
        parsed = parse_rfc3339(value)
        assert parsed is not None
        assert parsed.tzinfo is not None

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "not-a-date",
            "2020-01-01",
            "2020-01-01T00:00:00",  # no offset
            "2020-13-01T00:00:00Z",
            "20200101T000000Z",
            None,
            1700000000,
        ],
    )
    def test_invalid(self, value):
        assert parse_rfc3339(value) is None

    def test_offsets_compare_correctly(self):
        assert parse_rfc3339("2020-01-01T05:30:00+05:30") == parse_rfc3339("2020-01-01T00:00:00Z")


class TestSessionRecord:
    """Test session deserialization"""

    def test_from_json(self, make_session_payload):
        record = SessionRecord.from_json(make_session_payload(user_id="u42"))

        assert record.user_id == "u42"
        assert record.session_id == "550e8400-e29b-41d4-a716-446655440000"

    def test_from_bytes(self, make_session_payload):
        record = SessionRecord.from_json(make_session_payload().encode())
        assert record.user_id == "u1"

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[]",
            '"string"',
            json.dumps({"session_id": "x", "user_id": "u1", "created_at": "t"}),
            json.dumps({"session_id": "x", "user_id": 5, "created_at": "t", "expires_at": "t"}),
            "[" * 100000 + "]" * 100000,
        ],
    )
    def test_invalid_payloads(self, payload):
        with pytest.raises(ValueError):
            SessionRecord.from_json(payload)


def _token(expires_at, scopes=("https://www.googleapis.com/auth/userinfo.email",)):
    return TokenRecord(
        user_id="test-user",
        provider="google",
        provider_user_id="123",
        email="test@example.com",
        display_name="Test User",
        access_token=Secret("token"),
        refresh_token=None,
        expires_at=expires_at,
        scopes=tuple(scopes),
        linked_at="2020-01-01T00:00:00Z",
    )


class TestTokenRecord:
    """Test token expiry, scopes and secret handling"""

    def test_past_expiry_is_expired(self):
        assert _token("2020-01-01T00:00:00Z").is_expired()

    def test_future_expiry_is_not_expired(self):
        future = (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()
        assert not _token(future).is_expired()

    @pytest.mark.parametrize("value", ["", "garbage", "2099-01-01T00:00:00", "tomorrow"])
    def test_unparsable_expiry_is_expired(self, value):
        token = _token(value)

        assert token.expires_at_datetime is None
        assert token.is_expired()

    def test_expiry_boundary(self):
        token = _token("2030-06-01T12:00:00Z")
        boundary = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)

        assert token.is_expired(now=boundary)
        assert not token.is_expired(now=boundary - timedelta(seconds=1))

    def test_has_scope_substring(self):
        token = _token("2099-01-01T00:00:00Z")

        assert token.has_scope("userinfo.email")
        assert token.has_scope("https://www.googleapis.com/auth/userinfo.email")
        assert not token.has_scope("drive")

    def test_has_scope_empty_list(self):
        token = _token("2099-01-01T00:00:00Z", scopes=())

        assert not token.has_scope("userinfo.email")
        assert not token.has_scope("")

    def test_has_scope_any_entry(self):
        token = _token("2099-01-01T00:00:00Z", scopes=("openid", "repo:status"))

        assert token.has_scope("repo")
        assert token.has_scope("open")
        assert not token.has_scope("admin")

    def test_from_json(self, make_token_payload):
        token = TokenRecord.from_json(make_token_payload())

        assert token.provider == "google"
        assert token.access_token.reveal() == "ya29.access-token-value"
        assert token.refresh_token is not None
        assert token.refresh_token.reveal() == "1//refresh-token-value"
        assert token.scopes == ("https://www.googleapis.com/auth/userinfo.email",)

    def test_from_json_refresh_token_optional(self, make_token_payload):
        payload = json.loads(make_token_payload())
        del payload["refresh_token"]
        assert TokenRecord.from_json(json.dumps(payload)).refresh_token is None

        assert TokenRecord.from_json(make_token_payload(refresh_token=None)).refresh_token is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"scopes": "openid"},
            {"scopes": [1, 2]},
            {"access_token": None},
            {"refresh_token": 42},
            {"email": None},
        ],
    )
    def test_from_json_rejects_bad_fields(self, make_token_payload, overrides):
        with pytest.raises(ValueError):
            TokenRecord.from_json(make_token_payload(**overrides))

    def test_from_json_wipes_bytearray_payload(self, make_token_payload):
        payload = bytearray(make_token_payload().encode())

        TokenRecord.from_json(payload)

        assert not any(payload)

    def test_wipe_and_context_manager(self, make_token_payload):
        token = TokenRecord.from_json(make_token_payload())
        access = token.access_token.raw_buffer()
        refresh = token.refresh_token.raw_buffer()

        with token:
            assert token.access_token.reveal()

        assert token.wiped
        assert not any(access)
        assert not any(refresh)

    @pytest.mark.asyncio
    async def test_async_context_manager_wipes_on_error(self, make_token_payload):
        token = TokenRecord.from_json(make_token_payload())

        with pytest.raises(RuntimeError):
            async with token:
                raise RuntimeError("boom")

        assert token.wiped

    def test_public_dict_has_no_secrets(self, make_token_payload):
        token = TokenRecord.from_json(make_token_payload())
        public = token.to_public_dict()

        assert "access_token" not in public
        assert "refresh_token" not in public
        assert public["has_refresh_token"] is True
        assert "ya29" not in json.dumps(public)
        assert "ya29" not in repr(token)
