"""Productboard MCP server with permission discovery."""

__version__ = "0.1.0"

from .api.client import ProductboardAPIClient
from .core.config import Settings
from .permissions import (
    AccessLevel,
    Permission,
    PermissionCache,
    PermissionDiscoveryService,
    PermissionModel,
    check_tool_permission,
)
from .server.server import create_mcp_server

__all__ = [
    "AccessLevel",
    "Permission",
    "PermissionCache",
    "PermissionDiscoveryService",
    "PermissionModel",
    "ProductboardAPIClient",
    "Settings",
    "check_tool_permission",
    "create_mcp_server",
]
