"""Fold probe outcomes into a permission model.

Classification is a pure function of the outcome list: no I/O, no clock, and
the result does not depend on outcome order.
"""

from __future__ import annotations

from collections.abc import Sequence

from .permissions import (
    AccessLevel,
    Permission,
    PermissionModel,
    freeze_capabilities,
)
from .probes import ProbeOutcome

# Resource paths probed for read (GET) and write (POST) access, and the flags
# each success grants. Companies are only probed for reads.
RESOURCE_PERMISSIONS: dict[str, tuple[Permission, Permission | None]] = {
    "/users": (Permission.USERS_READ, Permission.USERS_WRITE),
    "/features": (Permission.FEATURES_READ, Permission.FEATURES_WRITE),
    "/products": (Permission.PRODUCTS_READ, Permission.PRODUCTS_WRITE),
    "/notes": (Permission.NOTES_READ, Permission.NOTES_WRITE),
    "/companies": (Permission.COMPANIES_READ, None),
    "/objectives": (Permission.OBJECTIVES_READ, Permission.OBJECTIVES_WRITE),
    "/releases": (Permission.RELEASES_READ, Permission.RELEASES_WRITE),
    "/custom_fields": (Permission.CUSTOM_FIELDS_READ, Permission.CUSTOM_FIELDS_WRITE),
    "/webhooks": (Permission.WEBHOOKS_READ, Permission.WEBHOOKS_WRITE),
}

# Writes that count toward the coarse can_write signal
CORE_WRITE_PERMISSIONS = frozenset(
    {
        Permission.FEATURES_WRITE,
        Permission.PRODUCTS_WRITE,
        Permission.NOTES_WRITE,
        Permission.OBJECTIVES_WRITE,
        Permission.RELEASES_WRITE,
    }
)


def can_access(outcomes: Sequence[ProbeOutcome], endpoint: str, method: str) -> bool:
    """Check whether any successful outcome covers an endpoint and method.

    Matching is by substring, so an outcome for ``/features?sort=votes``
    satisfies a check for ``/features``.

    Args:
        outcomes: Probe outcomes from one discovery run
        endpoint: Endpoint fragment to look for
        method: HTTP method that must match exactly

    Returns:
        True if a matching outcome succeeded
    """
    return any(
        endpoint in outcome.endpoint and outcome.method == method and outcome.succeeded
        for outcome in outcomes
    )


def determine_access_level(*, is_admin: bool, can_delete: bool, can_write: bool) -> AccessLevel:
    """Pick the highest tier any signal supports (ADMIN > DELETE > WRITE > READ)."""
    if is_admin:
        return AccessLevel.ADMIN
    if can_delete:
        return AccessLevel.DELETE
    if can_write:
        return AccessLevel.WRITE
    return AccessLevel.READ


def analyze_probe_outcomes(outcomes: Sequence[ProbeOutcome]) -> PermissionModel:
    """Derive the permission model from a discovery run's outcomes.

    Args:
        outcomes: One outcome per probe, as returned by ``ProbeRunner.run()``

    Returns:
        Immutable PermissionModel
    """
    permissions: set[Permission] = set()

    for path, (read_flag, write_flag) in RESOURCE_PERMISSIONS.items():
        if can_access(outcomes, path, "GET"):
            permissions.add(read_flag)
        if write_flag is not None and can_access(outcomes, path, "POST"):
            permissions.add(write_flag)

    if can_access(outcomes, "/search", "GET"):
        permissions.add(Permission.SEARCH)
    if can_access(outcomes, "/analytics", "GET"):
        permissions.add(Permission.ANALYTICS_READ)

    def has(flag: Permission) -> bool:
        return flag in permissions

    can_write = bool(permissions & CORE_WRITE_PERMISSIONS)
    can_delete = False  # Deletes are never probed to avoid data loss
    is_admin = has(Permission.ANALYTICS_READ) or (
        has(Permission.USERS_READ) and has(Permission.USERS_WRITE)
    )

    access_level = determine_access_level(
        is_admin=is_admin, can_delete=can_delete, can_write=can_write
    )

    capabilities = {
        "users": {
            "read": has(Permission.USERS_READ),
            "write": has(Permission.USERS_WRITE),
            "admin": is_admin,
        },
        "features": {
            "read": has(Permission.FEATURES_READ),
            "write": has(Permission.FEATURES_WRITE),
            "delete": can_delete,
        },
        "products": {
            "read": has(Permission.PRODUCTS_READ),
            "write": has(Permission.PRODUCTS_WRITE),
            "delete": can_delete,
        },
        "notes": {
            "read": has(Permission.NOTES_READ),
            "write": has(Permission.NOTES_WRITE),
            "delete": can_delete,
        },
        "companies": {
            "read": has(Permission.COMPANIES_READ),
            "write": False,  # Assumed read-only
        },
        "objectives": {
            "read": has(Permission.OBJECTIVES_READ),
            "write": has(Permission.OBJECTIVES_WRITE),
            "delete": can_delete,
        },
        "releases": {
            "read": has(Permission.RELEASES_READ),
            "write": has(Permission.RELEASES_WRITE),
            "delete": can_delete,
        },
        "customFields": {
            "read": has(Permission.CUSTOM_FIELDS_READ),
            "write": has(Permission.CUSTOM_FIELDS_WRITE),
            "delete": can_delete,
        },
        "webhooks": {
            "read": has(Permission.WEBHOOKS_READ),
            "write": has(Permission.WEBHOOKS_WRITE),
            "delete": can_delete,
        },
        "analytics": {
            "read": has(Permission.ANALYTICS_READ),
        },
        "integrations": {
            "read": True,  # Assumed available
            "write": can_write,
        },
        "export": {
            "data": has(Permission.FEATURES_READ),
        },
        "bulk": {
            "operations": can_write,
        },
        "search": {
            "enabled": has(Permission.SEARCH),
        },
    }

    return PermissionModel(
        access_level=access_level,
        can_write=can_write,
        can_delete=can_delete,
        is_admin=is_admin,
        permissions=frozenset(permissions),
        capabilities=freeze_capabilities(capabilities),
    )
