"""
Static API key authentication provider.

The key table is loaded once (from API_KEYS or explicit pairs) and never
mutated, so concurrent reads need no locking.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..config import parse_api_keys
from ..errors import InvalidCredential
from .models import Identity
from .validation import validate_api_key

logger = logging.getLogger(__name__)


class ApiKeyAuthProvider:
    """API key table provider.

    The credential is the API key itself, looked up verbatim.

    Environment:
        API_KEYS: "key1:user1,key2:user2"
    """

    def __init__(self, api_keys: Mapping[str, str]) -> None:
        self._api_keys: Mapping[str, str] = MappingProxyType(dict(api_keys))
        logger.info(f"ApiKeyAuthProvider initialized with {len(self._api_keys)} key(s)")

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> ApiKeyAuthProvider:
        return cls(dict(pairs))

    @classmethod
    def from_env(cls, raw: str | None = None) -> ApiKeyAuthProvider:
        """Build the table from API_KEYS (or an explicit raw string)."""
        if raw is None:
            raw = os.environ.get("API_KEYS", "")
        return cls.from_pairs(parse_api_keys(raw))

    async def authenticate(self, credential: str) -> Identity:
        """Resolve an API key to its user.

        Raises:
            InvalidCredential: If the key is not in the table
        """
        user_id = self._api_keys.get(credential)
        if user_id is None:
            raise InvalidCredential("Invalid API key")

        return Identity(user_id=user_id, metadata={"auth_type": "api_key"})

    def validate_credential_format(self, credential: str) -> None:
        validate_api_key(credential)

    def is_enabled(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._api_keys)

    def __contains__(self, key: object) -> bool:
        return key in self._api_keys
