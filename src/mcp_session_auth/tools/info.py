"""
Server information tool
"""

from ..__version__ import __version__
from ..config import settings
from ..core import format_output, get_provider, handle_tool_errors, mcp
from ..core.server import uptime_seconds
from ..formatting import format_server_info


@mcp.tool(description="Get server information")
@format_output
@handle_tool_errors
async def server_info() -> str:
    """Report server name, version, uptime and auth configuration."""
    provider = get_provider()
    return format_server_info(
        {
            "name": settings.server_name,
            "version": __version__,
            "uptime": uptime_seconds(),
            "auth_provider": provider.__class__.__name__,
            "auth_enabled": provider.is_enabled(),
        }
    )
