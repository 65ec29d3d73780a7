"""
MCP Server setup and core decorators for MCP Session Auth
"""

import json
import logging
import sys
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..auth import AuthProvider, get_auth_provider
from ..config import settings
from ..errors import (
    AuthDisabled,
    AuthError,
    InvalidFormat,
    StoreUnavailable,
    create_error_response,
)
from ..security import CredentialSanitizer

# Configure logging to stderr only - NEVER stdout in MCP servers
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# Type variable for decorators
T = TypeVar("T")

# Create FastMCP instance
mcp = FastMCP(settings.server_name)

_started_at = time.monotonic()
_auth_provider: AuthProvider | None = None


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint (exempt from authentication)."""
    return JSONResponse(
        {
            "status": "ok",
            "transport": "streamable-http",
            "server": settings.server_name,
        }
    )


def get_provider() -> AuthProvider:
    """Return the process-wide auth provider, creating it on first use."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = get_auth_provider()
    return _auth_provider


def set_provider(provider: AuthProvider | None) -> None:
    """Replace the process-wide auth provider (None resets to lazy creation)."""
    global _auth_provider
    _auth_provider = provider


def uptime_seconds() -> int:
    return int(time.monotonic() - _started_at)


def _auth_error_message(error: AuthError) -> str:
    if isinstance(error, InvalidFormat):
        return f"❌ **Invalid credential**: {error.message}"
    if isinstance(error, StoreUnavailable):
        return f"❌ **{error.public_message}**. Please retry shortly."
    if isinstance(error, AuthDisabled):
        return "❌ **Authentication is disabled** on this server."
    return f"❌ **{error.public_message}**"


def handle_tool_errors(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to handle standard error patterns for MCP tools.

    Auth failures are reported with generic messages only; the detailed
    reason goes to the log. Any other failure goes through classify_error
    and comes back as a client-safe error dict for format_output.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        tool_name = func.__name__
        try:
            return await func(*args, **kwargs)  # type: ignore[misc, return-value]
        except AuthError as e:
            logger.warning(
                f"Auth failure in {tool_name}: {e.kind}: {CredentialSanitizer.sanitize_error(e)}"
            )
            return _auth_error_message(e)
        except ValueError as e:
            logger.warning(f"Validation error in {tool_name}: {e}")
            return f"❌ **Invalid input**: {str(e)}"
        except Exception as e:
            logger.exception(f"Unexpected error in {tool_name}: {type(e).__name__}")
            return create_error_response(e, tool_name)

    return wrapper  # type: ignore[misc, return-value]


def format_output(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to format tool output for optimal LLM consumption.

    Converts dict results to formatted strings for better LLM parsing.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        result = await func(*args, **kwargs)  # type: ignore[misc, return-value]

        if isinstance(result, str):
            return result

        if isinstance(result, dict):
            if result.get("error"):
                return f"❌ **Error**: {result['error']}"
            return json.dumps(result, indent=2)

        return result

    return wrapper  # type: ignore[misc, return-value]
