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
Configuration module for the MCP Session Auth server
Centralizes all configuration values and environment variables
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from .security import CredentialSanitizer

logger = logging.getLogger(__name__)

VALID_AUTH_PROVIDERS = ("none", "api_key", "redis_session")


def parse_api_keys(raw: str | None) -> list[tuple[str, str]]:
    """
    Parse an API key table of the form "key1:user1,key2:user2".

    Pairs that do not split into exactly two parts on ":" are skipped.
    Later duplicates of the same key win when the pairs are loaded into
    a mapping.

    Args:
        raw: Raw table string, typically from the API_KEYS variable

    Returns:
        List of (key, user_id) pairs in declaration order
    """
    pairs: list[tuple[str, str]] = []
    if not raw:
        return pairs

    for index, pair in enumerate(raw.split(",")):
        parts = pair.split(":")
        if len(parts) != 2:
            if pair.strip():
                logger.warning(f"Skipping malformed API key entry at position {index}")
            continue
        pairs.append((parts[0], parts[1]))

    return pairs


@dataclass
class AuthSettings:
    """Configuration for the auth layer and the MCP server around it"""

    # Provider selection: none | api_key | redis_session
    auth_provider: str = field(
        default_factory=lambda: os.getenv("AUTH_PROVIDER", "none").strip().lower()
    )

    # Static key table, "key1:user1,key2:user2"
    api_keys: str = field(default_factory=lambda: os.getenv("API_KEYS", ""))

    # Session store
    redis_url: str | None = field(default_factory=lambda: os.getenv("REDIS_URL") or None)
    store_timeout: float = field(
        default_factory=lambda: float(os.getenv("AUTH_STORE_TIMEOUT", "5.0"))
    )
    redis_max_connections: int = field(
        default_factory=lambda: int(os.getenv("REDIS_MAX_CONNECTIONS", "10"))
    )

    # Tool defaults
    default_oauth_provider: str = field(
        default_factory=lambda: os.getenv("DEFAULT_OAUTH_PROVIDER", "google")
    )

    # Server
    server_name: str = field(
        default_factory=lambda: os.getenv("MCP_SERVER_NAME", "mcp-session-auth")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    def api_key_pairs(self) -> list[tuple[str, str]]:
        """Parsed API key table"""
        return parse_api_keys(self.api_keys)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary with credentials redacted"""
        return {
            "auth_provider": self.auth_provider,
            "api_keys": f"[{len(self.api_key_pairs())} configured]",
            "redis_url": (
                CredentialSanitizer.sanitize_string(self.redis_url) if self.redis_url else None
            ),
            "store_timeout": self.store_timeout,
            "redis_max_connections": self.redis_max_connections,
            "default_oauth_provider": self.default_oauth_provider,
            "server_name": self.server_name,
            "log_level": self.log_level,
        }


# Global configuration instance
settings = AuthSettings()
