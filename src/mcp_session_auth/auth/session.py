"""
Session-store authentication provider.

Resolves a session identifier to a user, and a user to a linked OAuth
account, through two independent store reads:

    mcp_session:<session_id>                 -> SessionRecord
    linked_account:<user_id>:<provider>      -> TokenRecord

Nothing is cached and nothing is retried here. Every call hits the store,
so staleness is bounded by the store's own TTL. StoreUnavailable is safe
for callers to retry with backoff; InvalidCredential is definitive.
"""

from __future__ import annotations

import logging

from ..errors import InvalidCredential
from .models import Identity, SessionRecord, TokenRecord
from .store import KeyValueStore, RedisStore, linked_account_key, session_key
from .validation import is_uuid4, validate_session_id

logger = logging.getLogger(__name__)


class SessionAuthProvider:
    """Authentication backed by an external session store.

    The credential is a UUIDv4 session identifier issued elsewhere.

    Attributes:
        store: Key-value store holding session and linked-account records
        timeout: Per-call deadline passed to the store (None uses the
            store's default)
    """

    def __init__(self, store: KeyValueStore, timeout: float | None = None) -> None:
        self.store = store
        self.timeout = timeout

    @classmethod
    def from_url(
        cls, redis_url: str, timeout: float = 5.0, max_connections: int = 10
    ) -> SessionAuthProvider:
        """Create a provider backed by a Redis connection pool."""
        store = RedisStore(redis_url, timeout=timeout, max_connections=max_connections)
        return cls(store, timeout=timeout)

    async def resolve_session(self, session_id: str) -> str:
        """Resolve a session ID to the owning user ID.

        Raises:
            InvalidCredential: Malformed ID, missing/expired session, or
                undecodable session data
            StoreUnavailable: Store could not be reached
        """
        if not is_uuid4(session_id):
            raise InvalidCredential("Invalid session ID format")

        raw = await self.store.get(session_key(session_id), timeout=self.timeout)
        if raw is None:
            raise InvalidCredential("Session not found or expired")

        try:
            record = SessionRecord.from_json(raw)
        except ValueError as e:
            logger.debug(f"Session payload rejected: {e}")
            raise InvalidCredential(f"Invalid session data: {e}") from e

        return record.user_id

    async def get_oauth_token(self, user_id: str, provider: str) -> TokenRecord:
        """Fetch the unexpired linked-account token for user_id and provider.

        The caller owns the returned record and must wipe it (or use it as
        a context manager) once done.

        Raises:
            InvalidCredential: Token missing, undecodable, or expired
            StoreUnavailable: Store could not be reached
        """
        raw = await self.store.get(linked_account_key(user_id, provider), timeout=self.timeout)
        if raw is None:
            raise InvalidCredential("OAuth token not found")

        try:
            token = TokenRecord.from_json(raw)
        except ValueError as e:
            logger.debug(f"Linked account payload rejected for provider {provider}: {e}")
            raise InvalidCredential(f"Invalid OAuth token data: {e}") from e

        try:
            if token.expires_at_datetime is None:
                logger.warning(
                    f"Failed to parse expires_at timestamp for {provider} token: "
                    f"{token.expires_at!r}; treating as expired"
                )
            if token.is_expired():
                raise InvalidCredential("OAuth token expired")
        except BaseException:
            token.wipe()
            raise

        return token

    async def authenticate_with_token(self, session_id: str, provider: str) -> TokenRecord:
        """Complete flow: session_id -> user_id -> OAuth token."""
        user_id = await self.resolve_session(session_id)
        return await self.get_oauth_token(user_id, provider)

    async def authenticate(self, credential: str) -> Identity:
        """Resolve a session ID to an Identity (no token lookup)."""
        user_id = await self.resolve_session(credential)
        return Identity(
            user_id=user_id,
            metadata={"session_id": credential, "auth_type": "redis_session"},
        )

    def validate_credential_format(self, credential: str) -> None:
        validate_session_id(credential)

    def is_enabled(self) -> bool:
        return True

    async def close(self) -> None:
        await self.store.close()
