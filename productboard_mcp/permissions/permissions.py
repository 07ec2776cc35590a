"""Capability flags, access levels and the discovered permission model.

A ``PermissionModel`` is the result of one discovery run. It is immutable:
callers that want a fresher view run discovery again.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable


class Permission(Enum):
    """Discrete capabilities inferred from probe outcomes.

    Values double as the serialized form and define the total order used
    whenever flags are listed.
    """

    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    FEATURES_READ = "features:read"
    FEATURES_WRITE = "features:write"
    PRODUCTS_READ = "products:read"
    PRODUCTS_WRITE = "products:write"
    NOTES_READ = "notes:read"
    NOTES_WRITE = "notes:write"
    COMPANIES_READ = "companies:read"
    OBJECTIVES_READ = "objectives:read"
    OBJECTIVES_WRITE = "objectives:write"
    RELEASES_READ = "releases:read"
    RELEASES_WRITE = "releases:write"
    CUSTOM_FIELDS_READ = "custom_fields:read"
    CUSTOM_FIELDS_WRITE = "custom_fields:write"
    WEBHOOKS_READ = "webhooks:read"
    WEBHOOKS_WRITE = "webhooks:write"
    SEARCH = "search"
    ANALYTICS_READ = "analytics:read"


class AccessLevel(IntEnum):
    """Coarse overall access tier, ordered READ < WRITE < DELETE < ADMIN."""

    READ = 1
    WRITE = 2
    DELETE = 3
    ADMIN = 4

    def __str__(self) -> str:
        return self.name.lower()


# Matrix cells set by fixed heuristics rather than by a probe. Reported to
# callers so they can treat these as approximate.
ASSUMED_CAPABILITIES: tuple[tuple[str, str], ...] = (
    ("companies", "write"),
    ("integrations", "read"),
    ("integrations", "write"),
    ("export", "data"),
    ("bulk", "operations"),
)


def sorted_permissions(permissions: Iterable[Permission]) -> list[Permission]:
    """Return permissions in their canonical (value) order."""
    return sorted(permissions, key=lambda p: p.value)


def freeze_capabilities(
    capabilities: Mapping[str, Mapping[str, bool]],
) -> Mapping[str, Mapping[str, bool]]:
    """Wrap a nested capability dict in read-only mapping proxies."""
    return MappingProxyType(
        {category: MappingProxyType(dict(flags)) for category, flags in capabilities.items()}
    )


@dataclass(frozen=True)
class PermissionModel:
    """Permissions discovered for the current credentials.

    Attributes:
        access_level: Highest tier any probe signal supports
        can_write: Whether any core resource (features, products, notes,
            objectives, releases) accepted a creation probe
        can_delete: Always False; deletes are never probed
        is_admin: Inferred from analytics access or user read+write access
        permissions: Capability flags backed by a successful probe
        capabilities: Per-category matrix of booleans (read-only mapping)

    Example:
        model = await PermissionDiscoveryService(client).discover_permissions()
        if model.has(Permission.NOTES_WRITE):
            await client.post("/notes", payload)
    """

    access_level: AccessLevel
    can_write: bool
    can_delete: bool
    is_admin: bool
    permissions: frozenset[Permission] = field(default_factory=frozenset)
    capabilities: Mapping[str, Mapping[str, bool]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def is_read_only(self) -> bool:
        """True when no write capability was discovered."""
        return not self.can_write

    def has(self, permission: Permission) -> bool:
        """Check if a capability flag was discovered."""
        return permission in self.permissions

    def has_all(self, permissions: Iterable[Permission]) -> bool:
        """Check if every given capability flag was discovered."""
        return all(p in self.permissions for p in permissions)

    def meets(self, level: AccessLevel) -> bool:
        """Check if the access level is at least ``level``."""
        return self.access_level >= level

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict (for tool output and logging).

        Returns:
            Dict with camelCase keys, flags in canonical order and the list
            of matrix cells that are assumed rather than probed
        """
        return {
            "accessLevel": str(self.access_level),
            "isReadOnly": self.is_read_only,
            "canWrite": self.can_write,
            "canDelete": self.can_delete,
            "isAdmin": self.is_admin,
            "permissions": [p.value for p in sorted_permissions(self.permissions)],
            "capabilities": {
                category: dict(flags) for category, flags in self.capabilities.items()
            },
            "assumedCapabilities": [f"{category}.{flag}" for category, flag in ASSUMED_CAPABILITIES],
        }

    def __repr__(self) -> str:
        flags = ", ".join(p.value for p in sorted_permissions(self.permissions))
        return f"PermissionModel({self.access_level}, permissions={{{flags}}})"
