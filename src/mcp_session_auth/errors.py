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
Authentication error taxonomy and classification.

Every failure that leaves the auth layer is one of four kinds:

- InvalidFormat: credential shape rejected before any I/O
- InvalidCredential: resolution failed (not found, expired, corrupt)
- StoreUnavailable: transport fault talking to the backing store
- AuthDisabled: the provider refuses all credentials

Callers translate these into protocol-level rejections with
create_error_response(), which never includes internal detail.
"""

import asyncio
import json
import logging
from typing import Any

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for all authentication failures."""

    kind = "auth_error"
    retryable = False
    public_message = "Authentication failed"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidFormat(AuthError):
    """Credential shape rejected before any store round-trip."""

    kind = "invalid_format"
    public_message = "Invalid credential format"


class InvalidCredential(AuthError):
    """Credential could not be resolved to an identity.

    Deliberately covers both "absent" and "expired": the backing store
    evicts by TTL so the two are indistinguishable here.
    """

    kind = "invalid_credential"


class StoreUnavailable(AuthError):
    """The backing key-value store could not be reached."""

    kind = "store_unavailable"
    retryable = True
    public_message = "Authentication service temporarily unavailable"


class AuthDisabled(AuthError):
    """Authentication is turned off; every credential is refused."""

    kind = "auth_disabled"
    public_message = "Authentication is disabled"


ERROR_KINDS: tuple[type[AuthError], ...] = (
    InvalidFormat,
    InvalidCredential,
    StoreUnavailable,
    AuthDisabled,
)


def classify_error(error: BaseException, context: str = "") -> AuthError:
    """
    Map an arbitrary failure onto the closed taxonomy.

    Args:
        error: Exception raised while authenticating
        context: Short description of the failing step, used in the message

    Returns:
        An AuthError instance. AuthError inputs are returned unchanged;
        anything else is wrapped with the original chained as __cause__.
    """
    if isinstance(error, AuthError):
        return error

    prefix = f"{context}: " if context else ""

    if isinstance(error, asyncio.TimeoutError | TimeoutError):
        classified: AuthError = StoreUnavailable(f"{prefix}store request timed out")
    elif isinstance(error, RedisError | OSError):
        classified = StoreUnavailable(f"{prefix}{error}")
    elif isinstance(error, json.JSONDecodeError | ValueError | TypeError | KeyError):
        classified = InvalidCredential(f"{prefix}invalid data: {error}")
    else:
        logger.debug(f"Unclassified error in {context or 'auth'}: {type(error).__name__}")
        classified = StoreUnavailable(f"{prefix}{type(error).__name__}")

    classified.__cause__ = error
    return classified


def create_error_response(error: Exception, context: str) -> dict[str, Any]:
    """
    Create a client-safe error response.

    Args:
        error: The exception that occurred
        context: Context about where the error occurred

    Returns:
        Dict with the error kind, a generic message and a recovery hint.
        Internal messages (hostnames, store errors) are never included.
    """
    classified = classify_error(error, context)

    response: dict[str, Any] = {
        "success": False,
        "error": classified.public_message,
        "error_type": classified.kind,
        "retryable": classified.retryable,
        "context": context,
    }

    if isinstance(classified, StoreUnavailable):
        response["_hint"] = "Retry the request with backoff"
    elif isinstance(classified, InvalidFormat):
        response["_hint"] = "Check the credential format"
    elif isinstance(classified, AuthDisabled):
        response["_hint"] = "Authentication is not configured on this server"
    else:
        response["_hint"] = "Obtain a new credential and try again"

    return response
