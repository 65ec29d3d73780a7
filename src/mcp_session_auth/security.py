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
Security utilities for sanitizing credentials from logs and error messages.
"""

import re
from typing import Any


class CredentialSanitizer:
    """Sanitizer for bearer tokens, API keys, store URLs and OAuth secrets."""

    PATTERNS = {
        "store_url_password": re.compile(
            r"(rediss?://[^:/@\s]*:)([^@\s]+)(@)",
            re.IGNORECASE,
        ),
        "authorization_header": re.compile(
            r"(?:Authorization|X-API-Key)[\s:]+[\"\']?(?:Bearer\s+)?([^\s\"\']+)[\"\']?",
            re.IGNORECASE,
        ),
        "bearer_token": re.compile(r"Bearer\s+([A-Za-z0-9\-._~+/]{8,}=*)", re.IGNORECASE),
        "oauth_token": re.compile(
            r"(?:access_token|refresh_token)[\"\']?[\s=:]+[\"\']?([^\s\"\',}]+)[\"\']?",
            re.IGNORECASE,
        ),
        "generic_api_key": re.compile(
            r"(?:api[_-]?keys?|apikey|api_secret)[\s=:]+[\"\']?([A-Za-z0-9_\-:,]+)[\"\']?",
            re.IGNORECASE,
        ),
    }

    # Sensitive field names to redact in structured data
    SENSITIVE_FIELDS = {
        "password",
        "secret",
        "token",
        "api_key",
        "api_keys",
        "apikey",
        "authorization",
        "credential",
        "credentials",
        "x-api-key",
    }

    @classmethod
    def sanitize_string(cls, text: str, replacement: str = "[REDACTED]") -> str:
        """
        Sanitize sensitive information from a string.

        Args:
            text: String to sanitize
            replacement: Replacement text for sensitive data

        Returns:
            Sanitized string
        """
        if not text:
            return text

        sanitized = cls.PATTERNS["store_url_password"].sub(
            lambda m: f"{m.group(1)}{replacement}{m.group(3)}", text
        )

        for pattern_name, pattern in cls.PATTERNS.items():
            if pattern_name == "store_url_password":
                continue
            sanitized = pattern.sub(
                lambda m, name=pattern_name: m.group(0).replace(
                    m.group(1), f"[REDACTED_{name.upper()}]"
                ),
                sanitized,
            )

        return sanitized

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any], max_depth: int = 10) -> dict[str, Any]:
        """
        Recursively sanitize sensitive fields in a dictionary.

        Args:
            data: Dictionary to sanitize
            max_depth: Maximum recursion depth

        Returns:
            Sanitized dictionary
        """
        if max_depth <= 0:
            return {"error": "Max recursion depth reached"}

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in cls.SENSITIVE_FIELDS):
                if isinstance(value, dict):
                    sanitized[key] = cls.sanitize_dict(value, max_depth - 1)
                elif value is None:
                    sanitized[key] = None
                else:
                    sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = cls.sanitize_dict(value, max_depth - 1)
            elif isinstance(value, list):
                sanitized[key] = [
                    cls.sanitize_string(item) if isinstance(item, str) else item
                    for item in value
                ]
            elif isinstance(value, str):
                sanitized[key] = cls.sanitize_string(value)
            else:
                sanitized[key] = value

        return sanitized

    @classmethod
    def sanitize_error(cls, error: BaseException) -> str:
        """
        Sanitize an exception message.

        Args:
            error: Exception to sanitize

        Returns:
            Sanitized error message
        """
        return cls.sanitize_string(str(error))

    @staticmethod
    def mask(value: str, visible: int = 4) -> str:
        """Mask all but the first few characters of an identifier."""
        if not value:
            return ""
        if len(value) <= visible:
            return "*" * len(value)
        return value[:visible] + "*" * (len(value) - visible)
