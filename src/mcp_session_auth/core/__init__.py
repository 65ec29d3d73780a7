"""Core server module with FastMCP instance and decorators"""

from .server import format_output, get_provider, handle_tool_errors, mcp, set_provider

__all__ = ["format_output", "get_provider", "handle_tool_errors", "mcp", "set_provider"]
