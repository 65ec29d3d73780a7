"""
Response formatting utilities for LLM-optimized output
"""

from typing import Any

from .auth import Identity, TokenRecord


def format_authenticated_action(identity: Identity, action: str) -> str:
    """Format authenticated_action response"""
    return f"""✅ **Authenticated Action**

**User ID:** `{identity.user_id}`
**Action:** {action}
**Auth Type:** {identity.auth_type}
**Status:** Success"""


def format_session_info(session_id: str, user_id: str) -> str:
    """Format get_session_info response"""
    return f"""✅ **Session Information**

**Session ID:** `{session_id}`
**User ID:** `{user_id}`
**Status:** Valid
**Authentication:** Enabled"""


def format_user_profile(token: TokenRecord) -> str:
    """Format get_user_profile response. Never includes token material."""
    scopes = ", ".join(token.scopes) if token.scopes else "(none)"
    status = "Expired" if token.is_expired() else "Valid"

    return f"""✅ **User Profile**

**User ID:** `{token.user_id}`
**Provider:** {token.provider}
**Email:** {token.email}
**Display Name:** {token.display_name}
**Provider User ID:** {token.provider_user_id}
**Scopes:** {scopes}
**Linked At:** {token.linked_at}
**Token Status:** {status}
**Authentication:** Enabled"""


def format_server_info(info: dict[str, Any]) -> str:
    """Format server_info response"""
    auth_state = "Enabled" if info.get("auth_enabled") else "Disabled"

    return f"""**Server Information**

**Name:** {info.get('name', 'unknown')}
**Version:** {info.get('version', 'unknown')}
**Uptime:** {info.get('uptime', 0)}s
**Auth Provider:** {info.get('auth_provider', 'unknown')}
**Authentication:** {auth_state}"""
