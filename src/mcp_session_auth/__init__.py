#!/usr/bin/env python3
"""
MCP Session Auth Server
Pluggable credential authentication (API keys, session store + linked OAuth tokens)

CRITICAL: This server uses stdio transport for MCP protocol communication.
- stdout is reserved for MCP JSON-RPC messages
- All logging/debug output must go to stderr or files
- Never logger.info() to stdout in MCP server code
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Load .env before the config module reads the environment
load_dotenv()

# Configure logging to stderr only - NEVER stdout in MCP servers
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

from .__version__ import __version__  # noqa: E402
from .config import settings  # noqa: E402
from .core.server import get_provider, mcp  # noqa: E402

logger.setLevel(settings.log_level)

__all__ = ["__version__", "create_server", "http_main", "main", "run_from_env"]


def create_server():
    """Create and return the MCP server instance.

    Returns:
        The configured MCP server instance with all tools registered.
    """
    # Tools register with the mcp instance via decorators when imported
    from .tools import (  # noqa: F401
        authenticated_action,
        get_session_info,
        get_user_profile,
        server_info,
    )

    return mcp


def _log_startup() -> None:
    provider = get_provider()
    logger.info(f"Auth provider: {provider.__class__.__name__} (enabled={provider.is_enabled()})")
    logger.debug(f"Settings: {settings.to_dict()}")


def main() -> None:
    """Run the MCP server with stdio transport (default)"""
    logger.info("Starting MCP Session Auth server (stdio)")

    try:
        _log_startup()
        server = create_server()
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


def http_main(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Run the MCP server with streamable HTTP transport behind AuthMiddleware.

    Args:
        host: Host to bind to (default: 127.0.0.1 for localhost only)
        port: Port to bind to (default: 8080)
    """
    import uvicorn

    from .auth.middleware import AuthMiddleware

    logger.info(f"Starting MCP Session Auth server (HTTP) on {host}:{port}")

    try:
        _log_startup()
        server = create_server()
        app = server.streamable_http_app()
        app.add_middleware(AuthMiddleware, auth_provider=get_provider())

        config = uvicorn.Config(
            app=app,
            host=host,
            port=port,
            log_level="warning",  # Reduce uvicorn logging, let our logger handle it
            access_log=False,
        )
        asyncio.run(uvicorn.Server(config).serve())
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception:
        logger.exception("Server error")
        raise


def run_from_env() -> None:
    """Pick the transport from MCP_TRANSPORT (stdio | http)."""
    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "http":
        host = os.environ.get("MCP_HTTP_HOST", "127.0.0.1")
        port = int(os.environ.get("MCP_HTTP_PORT", "8080"))
        http_main(host=host, port=port)
    else:
        main()
