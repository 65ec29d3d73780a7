"""
Pluggable authentication providers for MCP servers.

Resolves an opaque credential (API key or session ID) into an Identity.
Callers hold an AuthProvider and never branch on the concrete strategy.

Architecture:
- AuthProvider Protocol: Interface for all auth implementations
- NoAuthProvider: Authentication turned off, refuses every credential
- ApiKeyAuthProvider: Static key table loaded once at startup
- SessionAuthProvider: Session store lookup with linked OAuth tokens
- Factory: get_auth_provider() selects based on AUTH_PROVIDER env var
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..config import VALID_AUTH_PROVIDERS, AuthSettings
from ..errors import AuthDisabled
from .apikey import ApiKeyAuthProvider
from .models import Identity, Secret, SessionRecord, TokenRecord
from .session import SessionAuthProvider
from .store import KeyValueStore, MemoryStore, RedisStore
from .validation import is_uuid4, validate_api_key, validate_session_id

__all__ = [
    "ApiKeyAuthProvider",
    "AuthProvider",
    "Identity",
    "KeyValueStore",
    "MemoryStore",
    "NoAuthProvider",
    "RedisStore",
    "Secret",
    "SessionAuthProvider",
    "SessionRecord",
    "TokenRecord",
    "authenticate_credential",
    "get_auth_provider",
    "is_uuid4",
    "validate_api_key",
    "validate_session_id",
]

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    """Authentication provider interface.

    Methods:
        authenticate: Resolve a credential into an Identity
        validate_credential_format: Cheap syntactic check before any I/O
        is_enabled: Whether the provider accepts any credential at all
    """

    async def authenticate(self, credential: str) -> Identity:
        """Authenticate a credential.

        Args:
            credential: Opaque credential string (API key, session ID)

        Returns:
            Identity for the resolved user

        Raises:
            AuthError: One of InvalidCredential, StoreUnavailable, AuthDisabled
        """
        ...

    def validate_credential_format(self, credential: str) -> None:
        """Validate credential shape without I/O.

        Accepts everything unless overridden.

        Raises:
            InvalidFormat: If the credential cannot possibly be valid
        """
        return None

    def is_enabled(self) -> bool:
        """Whether authentication is enabled."""
        ...


class NoAuthProvider:
    """Provider used when authentication is disabled.

    This is the default when AUTH_PROVIDER is not set or set to "none".
    Every credential is refused with AuthDisabled, so callers keep one
    code path whether or not auth is configured.
    """

    async def authenticate(self, credential: str) -> Identity:
        raise AuthDisabled("Authentication is disabled")

    def validate_credential_format(self, credential: str) -> None:
        return None

    def is_enabled(self) -> bool:
        return False


async def authenticate_credential(provider: AuthProvider, credential: str) -> Identity:
    """Validate format first, then authenticate.

    Malformed credentials fail with InvalidFormat without touching the store.
    """
    provider.validate_credential_format(credential)
    return await provider.authenticate(credential)


def get_auth_provider(settings: AuthSettings | None = None) -> AuthProvider:
    """Factory function to get auth provider based on configuration.

    Selects authentication provider based on AUTH_PROVIDER:
    - "none" or unset: NoAuthProvider (default)
    - "api_key": ApiKeyAuthProvider from API_KEYS
    - "redis_session": SessionAuthProvider backed by REDIS_URL

    Args:
        settings: Settings to use; a fresh AuthSettings() read from the
            environment when omitted

    Returns:
        AuthProvider instance

    Raises:
        ValueError: If redis_session is selected without REDIS_URL

    Examples:
        >>> os.environ["AUTH_PROVIDER"] = "api_key"
        >>> os.environ["API_KEYS"] = "k1:u1"
        >>> provider = get_auth_provider()  # ApiKeyAuthProvider
    """
    if settings is None:
        settings = AuthSettings()

    provider_type = settings.auth_provider

    if provider_type == "none":
        logger.info("Auth: disabled (NoAuthProvider)")
        return NoAuthProvider()

    elif provider_type == "api_key":
        pairs = settings.api_key_pairs()
        if not pairs:
            logger.warning("Auth: api_key selected but API_KEYS is empty; all keys will be rejected")
        logger.info("Auth: API key table enabled")
        return ApiKeyAuthProvider.from_pairs(pairs)

    elif provider_type == "redis_session":
        if not settings.redis_url:
            raise ValueError("REDIS_URL must be set for AUTH_PROVIDER=redis_session")
        logger.info("Auth: Redis session store enabled")
        return SessionAuthProvider.from_url(
            settings.redis_url,
            timeout=settings.store_timeout,
            max_connections=settings.redis_max_connections,
        )

    else:
        logger.warning(
            f"Unknown AUTH_PROVIDER '{provider_type}', using NoAuthProvider. "
            f"Valid options: {', '.join(VALID_AUTH_PROVIDERS)}"
        )
        return NoAuthProvider()
