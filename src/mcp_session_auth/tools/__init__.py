"""MCP tools for MCP Session Auth"""

from .actions import authenticated_action
from .info import server_info
from .sessions import get_session_info, get_user_profile

__all__ = [
    "authenticated_action",
    "get_session_info",
    "get_user_profile",
    "server_info",
]
