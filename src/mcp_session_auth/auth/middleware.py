"""
Authentication middleware for the HTTP transport.

Key Features:
- Credential extraction from X-API-Key or Authorization: Bearer header
- 401 for rejected credentials, 503 when the session store is down
- Request state injection for downstream handlers
- No internal detail in responses (no store errors, no hostnames)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..errors import AuthDisabled, AuthError, StoreUnavailable
from . import authenticate_credential

if TYPE_CHECKING:
    from starlette.requests import Request

    from . import AuthProvider

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health"})


def extract_credential(request: Request) -> str | None:
    """Pull the credential from the request headers.

    Checked in order: X-API-Key, Authorization: Bearer. Mcp-Session-Id is the
    streamable-HTTP transport id, not a credential, and is never read.
    """
    api_key = request.headers.get("x-api-key")
    if api_key:
        return api_key

    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip()

    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Authenticate every HTTP request through the configured provider.

    Passes through untouched when the provider is disabled.

    Attributes:
        auth_provider: Provider instance (any AuthProvider)
    """

    def __init__(self, app, auth_provider: AuthProvider) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.auth_provider = auth_provider

        logger.info(
            f"AuthMiddleware initialized: "
            f"auth_enabled={auth_provider.is_enabled()}, "
            f"provider={auth_provider.__class__.__name__}"
        )

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        if request.url.path in EXEMPT_PATHS or not self.auth_provider.is_enabled():
            request.state.identity = None
            return await call_next(request)

        credential = extract_credential(request)
        if not credential:
            logger.warning(f"Unauthorized request (no credential): path={request.url.path}")
            return self._reject(401, "unauthorized")

        try:
            identity = await authenticate_credential(self.auth_provider, credential)
        except StoreUnavailable:
            logger.error(f"Auth store unavailable: path={request.url.path}")
            return self._reject(503, "auth_unavailable")
        except AuthDisabled:
            request.state.identity = None
            return await call_next(request)
        except AuthError as e:
            logger.warning(
                f"Unauthorized request: path={request.url.path}, reason={e.kind}, "
                f"client={request.client.host if request.client else 'unknown'}"
            )
            return self._reject(401, "unauthorized")

        request.state.identity = identity
        logger.info(
            f"Authenticated request: user={identity.user_id}, "
            f"auth_type={identity.auth_type}, path={request.url.path}"
        )
        return await call_next(request)

    @staticmethod
    def _reject(status_code: int, error: str) -> JSONResponse:
        headers = {"Retry-After": "1"} if status_code == 503 else None
        return JSONResponse({"error": error}, status_code=status_code, headers=headers)
