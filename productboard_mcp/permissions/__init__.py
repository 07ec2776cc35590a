"""Permission discovery for the Productboard API.

The API exposes no endpoint listing what a token may do, so permissions are
measured empirically:

- ProbeRunner: issues a fixed battery of representative requests
- analyze_probe_outcomes: folds the outcomes into a PermissionModel
- PermissionDiscoveryService: runs both, once per call
- PermissionCache: optional time-bounded reuse, keyed by credential
- TOOL_PERMISSIONS: what each MCP tool needs from the model

Example usage:
    async with ProductboardAPIClient() as client:
        model = await PermissionDiscoveryService(client).discover_permissions()

    allowed, missing = check_tool_permission("pb_create_note", model)

Limitations:
- Deletes are never probed, so can_delete is always False
- Some matrix cells are heuristics (see ASSUMED_CAPABILITIES)
"""

from .analyzer import analyze_probe_outcomes, can_access
from .cache import PermissionCache
from .discovery import PermissionDiscoveryService
from .permissions import ASSUMED_CAPABILITIES, AccessLevel, Permission, PermissionModel
from .probes import PERMISSION_PROBES, ProbeDefinition, ProbeOutcome, ProbeRunner
from .tool_permissions import (
    TOOL_PERMISSIONS,
    ToolRequirement,
    check_tool_permission,
    get_allowed_tools,
    get_tool_requirement,
)

__all__ = [
    "ASSUMED_CAPABILITIES",
    "AccessLevel",
    "PERMISSION_PROBES",
    "Permission",
    "PermissionCache",
    "PermissionDiscoveryService",
    "PermissionModel",
    "ProbeDefinition",
    "ProbeOutcome",
    "ProbeRunner",
    "TOOL_PERMISSIONS",
    "ToolRequirement",
    "analyze_probe_outcomes",
    "can_access",
    "check_tool_permission",
    "get_allowed_tools",
    "get_tool_requirement",
]
