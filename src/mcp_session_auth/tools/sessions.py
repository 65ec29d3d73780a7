"""
Session tools: session lookup and linked-account profile
"""

import logging

from ..auth import SessionAuthProvider, validate_session_id
from ..config import settings
from ..core import format_output, get_provider, handle_tool_errors, mcp
from ..formatting import format_session_info, format_user_profile

logger = logging.getLogger(__name__)


def _session_provider() -> SessionAuthProvider:
    provider = get_provider()
    if not isinstance(provider, SessionAuthProvider):
        raise ValueError("Session tools require AUTH_PROVIDER=redis_session")
    return provider


@mcp.tool(description="Validate a session ID (UUID4) and show the user it belongs to.")
@format_output
@handle_tool_errors
async def get_session_info(session_id: str) -> str:
    """
    Get basic session information.

    Args:
        session_id: Session ID for authenticated user (UUID4 format)

    Returns:
        Formatted session information
    """
    logger.info("get_session_info called")

    # Reject malformed IDs before touching the store
    validate_session_id(session_id)
    provider = _session_provider()

    user_id = await provider.resolve_session(session_id)

    logger.info(f"Session info retrieved for user: {user_id}")
    return format_session_info(session_id, user_id)


@mcp.tool(
    description="Get the user's linked account profile for an OAuth provider "
    "(e.g. 'google', 'github', 'microsoft')."
)
@format_output
@handle_tool_errors
async def get_user_profile(session_id: str, provider: str | None = None) -> str:
    """
    Get user profile information from the linked OAuth account.

    Args:
        session_id: Session ID for authenticated user (UUID4 format)
        provider: OAuth provider name (defaults to DEFAULT_OAUTH_PROVIDER)

    Returns:
        Formatted profile. Token material is never included.
    """
    oauth_provider = provider or settings.default_oauth_provider
    logger.info(f"get_user_profile called for provider: {oauth_provider}")

    validate_session_id(session_id)
    auth = _session_provider()

    async with await auth.authenticate_with_token(session_id, oauth_provider) as token:
        result = format_user_profile(token)
        logger.info(f"User profile retrieved for user: {token.user_id}")

    return result
