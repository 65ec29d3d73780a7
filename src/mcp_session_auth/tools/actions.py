"""
Authenticated action tool: works with any configured auth provider
"""

import logging

from ..auth import authenticate_credential
from ..core import format_output, get_provider, handle_tool_errors, mcp
from ..formatting import format_authenticated_action

logger = logging.getLogger(__name__)


@mcp.tool(
    description="Perform an action on behalf of the user identified by a credential "
    "(API key or session ID, depending on server configuration)."
)
@format_output
@handle_tool_errors
async def authenticated_action(credential: str, action: str) -> str:
    """
    Authenticate the credential, then perform the action for that user.

    Args:
        credential: Authentication credential (API key, session ID, etc.)
        action: The action to perform

    Returns:
        Formatted action result
    """
    logger.info("authenticated_action called")

    identity = await authenticate_credential(get_provider(), credential)

    logger.info(f"Action performed for user: {identity.user_id}")
    return format_authenticated_action(identity, action)
