#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 MCP Session Auth Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Key-value store clients for session and linked-account lookups.

The auth layer only reads from the store. Records are written (and
evicted by TTL) by an external issuer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from ..errors import StoreUnavailable
from ..security import CredentialSanitizer

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "mcp_session:"
LINKED_ACCOUNT_KEY_PREFIX = "linked_account:"

StoreValue = bytes | str


def session_key(session_id: str) -> str:
    """Store key for a session record."""
    return f"{SESSION_KEY_PREFIX}{session_id}"


def linked_account_key(user_id: str, provider: str) -> str:
    """Store key for a user's linked account with provider."""
    return f"{LINKED_ACCOUNT_KEY_PREFIX}{user_id}:{provider}"


class KeyValueStore(Protocol):
    """Read interface the session provider needs from its backing store."""

    async def get(self, key: str, timeout: float | None = None) -> StoreValue | None:
        """Fetch the raw value at key, or None if absent.

        Raises:
            StoreUnavailable: On connection or transport failure
        """
        ...

    async def close(self) -> None:
        ...


class RedisStore:
    """
    Redis-backed store sharing one connection pool across all callers.

    The client is created lazily on first use. Every read is bounded by a
    deadline so a slow server cannot stall a caller indefinitely.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        max_connections: int = 10,
    ):
        """
        Initialize the store client.

        Args:
            url: Redis connection URL (redis:// or rediss://)
            timeout: Default per-call deadline in seconds
            max_connections: Connection pool size
        """
        self.url = url
        self.timeout = timeout
        self.max_connections = max_connections
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    def _get_client(self) -> Redis:
        if self._client is not None:
            return self._client

        try:
            self._pool = ConnectionPool.from_url(
                self.url,
                max_connections=self.max_connections,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
                health_check_interval=30,
            )
            self._client = Redis(connection_pool=self._pool)
        except (RedisError, ValueError, OSError) as e:
            safe_error = CredentialSanitizer.sanitize_error(e)
            logger.error(f"Failed to create Redis client: {safe_error}")
            raise StoreUnavailable(f"Failed to connect to Redis: {safe_error}") from e

        logger.info(f"Redis client created for {CredentialSanitizer.sanitize_string(self.url)}")
        return self._client

    async def get(self, key: str, timeout: float | None = None) -> StoreValue | None:
        client = self._get_client()
        deadline = self.timeout if timeout is None else timeout

        try:
            return await asyncio.wait_for(client.get(key), timeout=deadline)
        except asyncio.TimeoutError as e:
            logger.warning(f"Redis GET timed out after {deadline}s")
            raise StoreUnavailable(f"Redis request timed out after {deadline}s") from e
        except (RedisError, OSError) as e:
            safe_error = CredentialSanitizer.sanitize_error(e)
            logger.warning(f"Redis GET failed: {safe_error}")
            raise StoreUnavailable(f"Redis request failed: {safe_error}") from e

    async def ping(self) -> bool:
        """Check connectivity; never raises."""
        try:
            client = self._get_client()
            return bool(await asyncio.wait_for(client.ping(), timeout=self.timeout))
        except (StoreUnavailable, RedisError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Redis ping failed: {CredentialSanitizer.sanitize_error(e)}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None


class MemoryStore:
    """
    In-process store with optional per-key TTL.

    Mirrors the store's eviction semantics (an expired key reads as
    absent) for local development and tests.
    """

    def __init__(self, initial: dict[str, StoreValue] | None = None):
        self._data: dict[str, tuple[StoreValue, float | None]] = {}
        for key, value in (initial or {}).items():
            self._data[key] = (value, None)

    async def get(self, key: str, timeout: float | None = None) -> StoreValue | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: StoreValue, ttl: float | None = None) -> None:
        expires_at = time.monotonic() + ttl if ttl is not None else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
