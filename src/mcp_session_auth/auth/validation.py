"""
Credential format validation.

Pure syntactic checks run before any store round-trip. The session
resolver calls is_uuid4() itself, so a credential rejected here is
always rejected there too.
"""

from __future__ import annotations

import re

from ..errors import InvalidFormat

# RFC 4122 version 4: version nibble 4, variant nibble 8, 9, a or b
_UUID4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid4(value: object) -> bool:
    """Whether value is a hyphenated UUID version 4 string."""
    if not isinstance(value, str):
        return False
    return _UUID4_PATTERN.fullmatch(value) is not None


def validate_session_id(session_id: str) -> None:
    """Reject anything that is not a UUIDv4 session identifier.

    Raises:
        InvalidFormat: If session_id is not UUIDv4-shaped
    """
    if not is_uuid4(session_id):
        raise InvalidFormat("Invalid session ID format")


def validate_api_key(api_key: str) -> None:
    """Reject empty API keys.

    Raises:
        InvalidFormat: If api_key is empty
    """
    if not api_key:
        raise InvalidFormat("API key cannot be empty")
