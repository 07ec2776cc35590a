"""Permission discovery tool.

Lets the model ask what the configured Productboard token can do before it
plans any calls.
"""

import logging
from typing import Any

from ..permissions.tool_permissions import get_allowed_tools
from ..utils.tool_decorators import handle_tool_errors
from .session import get_current_permissions

logger = logging.getLogger(__name__)


@handle_tool_errors
async def get_permissions(refresh: bool = False) -> dict[str, Any]:
    """
    Report the permissions discovered for the current API token.

    Args:
        refresh: Re-probe the API instead of using the cached result

    Returns:
        Dictionary containing:
            - permissions: The permission model (access level, flags, matrix)
            - allowed_tools: Tools this token may run
            - note: Caveat about assumed capabilities
    """
    model = await get_current_permissions(refresh=refresh)
    logger.info(f"Reporting permissions: access_level={model.access_level}")

    return {
        "permissions": model.to_dict(),
        "allowed_tools": get_allowed_tools(model),
        "note": (
            "Delete access is never probed and always reported as false. "
            "Entries in assumedCapabilities are heuristics, not probe results."
        ),
    }


TOOL_SCHEMAS = [
    {
        "name": "pb_get_permissions",
        "description": (
            "Discover what the configured Productboard API token is allowed to do. "
            "Returns the overall access level (read, write, delete, admin), the "
            "individual capability flags, a per-resource capability matrix and the "
            "list of tools that can run with these permissions."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "refresh": {
                    "type": "boolean",
                    "default": False,
                    "description": "Re-probe the API instead of using cached permissions",
                },
            },
            "required": [],
        },
        "handler": get_permissions,
    },
]
