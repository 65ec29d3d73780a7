"""
Tests for credential format validation.
"""

import uuid

import pytest

from mcp_session_auth.auth import ApiKeyAuthProvider, SessionAuthProvider, MemoryStore
from mcp_session_auth.auth.validation import is_uuid4, validate_api_key, validate_session_id
from mcp_session_auth.errors import InvalidCredential, InvalidFormat


class TestIsUuid4:
    """Test UUIDv4 shape detection"""

    def test_accepts_valid_uuid4(self):
        assert is_uuid4("550e8400-e29b-41d4-a716-446655440000")

    def test_accepts_generated_uuid4(self):
        for _ in range(20):
            assert is_uuid4(str(uuid.uuid4()))

    def test_accepts_uppercase(self):
        assert is_uuid4("550E8400-E29B-41D4-A716-446655440000")

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "123",
            "invalid-uuid",
            "550e8400e29b41d4a716446655440000",  # no hyphens
            "{550e8400-e29b-41d4-a716-446655440000}",
            "urn:uuid:550e8400-e29b-41d4-a716-446655440000",
            "550e8400-e29b-11d4-a716-446655440000",  # version 1
            "550e8400-e29b-41d4-c716-446655440000",  # wrong variant
            "550e8400-e29b-41d4-a716-44665544000g",
            " 550e8400-e29b-41d4-a716-446655440000",
            "550e8400-e29b-41d4-a716-446655440000\n",
        ],
    )
    def test_rejects_non_uuid4(self, value):
        assert not is_uuid4(value)

    def test_rejects_non_strings(self):
        assert not is_uuid4(None)
        assert not is_uuid4(uuid.uuid4())


class TestValidators:
    """Test the raising validators"""

    def test_validate_session_id(self):
        validate_session_id("550e8400-e29b-41d4-a716-446655440000")

        with pytest.raises(InvalidFormat):
            validate_session_id("not-a-session")

    def test_validate_api_key(self):
        validate_api_key("valid-key")

        with pytest.raises(InvalidFormat):
            validate_api_key("")

    def test_api_key_format_ignores_table_contents(self):
        """Non-empty keys pass format validation even when unknown"""
        provider = ApiKeyAuthProvider({})
        provider.validate_credential_format("anything")

        with pytest.raises(InvalidFormat):
            provider.validate_credential_format("")


class TestValidatorAgreesWithResolver:
    """Malformed input rejected by the validator is also rejected by resolution"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["", "abc", "550e8400-e29b-11d4-a716-446655440000"])
    async def test_malformed_ids_never_reach_store(self, value):
        store = MemoryStore()
        provider = SessionAuthProvider(store)

        with pytest.raises(InvalidFormat):
            provider.validate_credential_format(value)

        with pytest.raises(InvalidCredential, match="Invalid session ID format"):
            await provider.resolve_session(value)

    @pytest.mark.asyncio
    async def test_well_formed_id_passes_even_if_unknown(self):
        provider = SessionAuthProvider(MemoryStore())
        session_id = str(uuid.uuid4())

        provider.validate_credential_format(session_id)

        with pytest.raises(InvalidCredential, match="not found or expired"):
            await provider.resolve_session(session_id)
