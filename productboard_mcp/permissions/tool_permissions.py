"""Tool-to-permission mappings.

Defines which discovered capabilities each MCP tool needs. The server checks
these before executing a tool so calls the credentials cannot make are
rejected without touching the API.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .permissions import AccessLevel, Permission, PermissionModel, sorted_permissions


@dataclass(frozen=True)
class ToolRequirement:
    """Capabilities a tool needs.

    Attributes:
        permissions: Flags that must ALL be present
        minimum_access_level: Lowest access tier allowed to run the tool
        description: Human-readable summary for error messages
    """

    permissions: frozenset[Permission] = field(default_factory=frozenset)
    minimum_access_level: AccessLevel = AccessLevel.READ
    description: str = ""

    @property
    def is_unrestricted(self) -> bool:
        """True when any credentials satisfy this requirement."""
        return not self.permissions and self.minimum_access_level <= AccessLevel.READ


# Unknown tools require ADMIN (fail-safe)
UNKNOWN_TOOL_REQUIREMENT = ToolRequirement(
    minimum_access_level=AccessLevel.ADMIN,
    description="Unknown tool - requires admin access",
)

TOOL_PERMISSIONS: dict[str, ToolRequirement] = {
    # =========================================================================
    # Discovery - always available
    # =========================================================================
    "pb_get_permissions": ToolRequirement(description="Available to any credentials"),

    # =========================================================================
    # Features - READ for listing, SEARCH for search
    # =========================================================================
    "pb_list_features": ToolRequirement(
        permissions=frozenset({Permission.FEATURES_READ}),
        description="Requires feature read access",
    ),
    "pb_search_features": ToolRequirement(
        permissions=frozenset({Permission.SEARCH}),
        description="Requires search access",
    ),

    # =========================================================================
    # Notes - WRITE for creation
    # =========================================================================
    "pb_create_note": ToolRequirement(
        permissions=frozenset({Permission.NOTES_WRITE}),
        minimum_access_level=AccessLevel.WRITE,
        description="Requires note write access",
    ),
}


def get_tool_requirement(tool_name: str) -> ToolRequirement:
    """Get the requirement for a tool, defaulting to admin-only for unknown tools.

    Example:
        get_tool_requirement("pb_list_features").permissions
        # frozenset({Permission.FEATURES_READ})
    """
    return TOOL_PERMISSIONS.get(tool_name, UNKNOWN_TOOL_REQUIREMENT)


def check_tool_permission(tool_name: str, model: PermissionModel) -> tuple[bool, list[str]]:
    """Check if a discovered permission model allows a tool.

    Args:
        tool_name: Name of the tool to check
        model: Permissions discovered for the caller's credentials

    Returns:
        Tuple of (allowed, missing). ``missing`` lists absent flag values and,
        when the tier is too low, an ``access_level>=<tier>`` entry.

    Example:
        allowed, missing = check_tool_permission("pb_create_note", read_only_model)
        # allowed = False
        # missing = ["notes:write", "access_level>=write"]
    """
    requirement = get_tool_requirement(tool_name)
    missing = [p.value for p in sorted_permissions(requirement.permissions - model.permissions)]
    if not model.meets(requirement.minimum_access_level):
        missing.append(f"access_level>={requirement.minimum_access_level}")
    return len(missing) == 0, missing


def get_allowed_tools(model: PermissionModel) -> list[str]:
    """Get the tools a permission model allows, sorted by name."""
    return sorted(name for name in TOOL_PERMISSIONS if check_tool_permission(name, model)[0])
