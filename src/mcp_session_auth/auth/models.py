"""
Data models for authentication module.

Separated from __init__.py to avoid circular imports between
the main auth module and provider implementations.

Session and linked-account records are produced by an external issuer
and only read here. Their JSON field names are exact and case-sensitive.
"""

from __future__ import annotations

import hmac
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

_RFC3339_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def parse_rfc3339(value: Any) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware datetime.

    Fractional seconds beyond microsecond precision are truncated.

    Returns:
        Aware datetime, or None if value is not a valid RFC3339 string
    """
    if not isinstance(value, str):
        return None
    match = _RFC3339_PATTERN.fullmatch(value)
    if match is None:
        return None

    date_part, time_part, fraction, offset = match.groups()
    normalized = f"{date_part}T{time_part}"
    if fraction:
        normalized += "." + fraction[:6].ljust(6, "0")
    normalized += "+00:00" if offset in ("Z", "z") else offset

    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return None
    return parsed


def _load_object(payload: str | bytes | bytearray) -> dict[str, Any]:
    try:
        data = json.loads(payload)
    except RecursionError as e:
        raise ValueError("payload nested too deeply") from e
    if not isinstance(data, dict):
        raise ValueError(f"expected JSON object, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], name: str) -> str:
    if name not in data:
        raise ValueError(f"missing field '{name}'")
    value = data[name]
    if not isinstance(value, str):
        raise ValueError(f"field '{name}' must be a string")
    return value


class Secret:
    """Mutable holder for secret material that can be zeroed in place.

    The value lives in a bytearray so wipe() overwrites the actual bytes
    rather than dropping a reference. Use as a context manager to wipe on
    every exit path.
    """

    __slots__ = ("_buffer", "_wiped", "__weakref__")

    def __init__(self, value: str | bytes | bytearray) -> None:
        if isinstance(value, str):
            self._buffer = bytearray(value.encode("utf-8"))
        else:
            self._buffer = bytearray(value)
        self._wiped = False

    def reveal(self) -> str:
        """Return the secret value.

        Raises:
            ValueError: If the secret has already been wiped
        """
        if self._wiped:
            raise ValueError("Secret has been wiped")
        return self._buffer.decode("utf-8")

    def wipe(self) -> None:
        """Overwrite every byte with zero."""
        self._buffer[:] = bytes(len(self._buffer))
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def raw_buffer(self) -> bytearray:
        """The underlying buffer (for callers that need to verify zeroing)."""
        return self._buffer

    def __len__(self) -> int:
        return len(self._buffer)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buffer), bytes(other._buffer))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "Secret('[wiped]')" if self._wiped else "Secret('**********')"

    __str__ = __repr__

    def __enter__(self) -> Secret:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        self.wipe()

    def __del__(self) -> None:
        # Last resort only; owners wipe explicitly.
        buffer = getattr(self, "_buffer", None)
        if buffer is not None:
            buffer[:] = bytes(len(buffer))


@dataclass(frozen=True)
class Identity:
    """Identity resolved from a credential.

    Attributes:
        user_id: Resolved user identifier
        metadata: Provider-specific details (auth_type, session_id, ...),
            read-only after construction
    """

    user_id: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def auth_type(self) -> str:
        return str(self.metadata.get("auth_type", "unknown"))

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "metadata": dict(self.metadata)}


@dataclass(frozen=True)
class SessionRecord:
    """Session stored at mcp_session:<session_id>."""

    session_id: str
    user_id: str
    created_at: str
    expires_at: str

    @classmethod
    def from_json(cls, payload: str | bytes | bytearray) -> SessionRecord:
        """Deserialize a stored session.

        Raises:
            ValueError: If payload is not a JSON object with the expected fields
        """
        data = _load_object(payload)
        return cls(
            session_id=_require_str(data, "session_id"),
            user_id=_require_str(data, "user_id"),
            created_at=_require_str(data, "created_at"),
            expires_at=_require_str(data, "expires_at"),
        )


@dataclass
class TokenRecord:
    """Linked third-party account stored at linked_account:<user_id>:<provider>.

    access_token and refresh_token are held in Secret buffers. The record
    is a context manager (sync and async) that wipes both on exit.
    """

    user_id: str
    provider: str
    provider_user_id: str
    email: str
    display_name: str
    access_token: Secret
    refresh_token: Secret | None
    expires_at: str
    scopes: tuple[str, ...]
    linked_at: str

    @classmethod
    def from_json(cls, payload: str | bytes | bytearray) -> TokenRecord:
        """Deserialize a stored linked account.

        Secret fields are moved into Secret buffers immediately and removed
        from the intermediate dict.

        Raises:
            ValueError: If payload is not a JSON object with the expected fields
        """
        data = _load_object(payload)
        try:
            access_token = _require_str(data, "access_token")
            refresh_raw = data.get("refresh_token")
            if refresh_raw is not None and not isinstance(refresh_raw, str):
                raise ValueError("field 'refresh_token' must be a string or null")

            scopes = data.get("scopes")
            if not isinstance(scopes, list) or not all(isinstance(s, str) for s in scopes):
                raise ValueError("field 'scopes' must be a list of strings")

            fields = {
                name: _require_str(data, name)
                for name in (
                    "user_id",
                    "provider",
                    "provider_user_id",
                    "email",
                    "display_name",
                    "expires_at",
                    "linked_at",
                )
            }

            return cls(
                access_token=Secret(access_token),
                refresh_token=Secret(refresh_raw) if refresh_raw is not None else None,
                scopes=tuple(scopes),
                **fields,
            )
        finally:
            data.clear()
            if isinstance(payload, bytearray):
                payload[:] = bytes(len(payload))

    @property
    def expires_at_datetime(self) -> datetime | None:
        """Expiry as an aware datetime, or None if expires_at is not RFC3339."""
        return parse_rfc3339(self.expires_at)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the access token is expired.

        Unparsable expiry timestamps count as expired.
        """
        expires_at = self.expires_at_datetime
        if expires_at is None:
            return True
        current = now or datetime.now(timezone.utc)
        return current >= expires_at

    def has_scope(self, required_scope: str) -> bool:
        """Whether any granted scope contains required_scope as a substring."""
        return any(required_scope in scope for scope in self.scopes)

    def wipe(self) -> None:
        """Zero all secret material held by this record."""
        self.access_token.wipe()
        if self.refresh_token is not None:
            self.refresh_token.wipe()

    @property
    def wiped(self) -> bool:
        return self.access_token.wiped

    def to_public_dict(self) -> dict[str, Any]:
        """Non-secret fields, safe to log or return to clients."""
        return {
            "user_id": self.user_id,
            "provider": self.provider,
            "provider_user_id": self.provider_user_id,
            "email": self.email,
            "display_name": self.display_name,
            "expires_at": self.expires_at,
            "scopes": list(self.scopes),
            "linked_at": self.linked_at,
            "has_refresh_token": self.refresh_token is not None,
        }

    def __enter__(self) -> TokenRecord:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        self.wipe()

    async def __aenter__(self) -> TokenRecord:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        self.wipe()
