"""In-memory, time-bounded cache of discovered permission models.

Discovery issues roughly twenty requests, so the server reuses a model for a
while instead of probing before every tool call. Entries are keyed by a hash
of the API token and live only for the lifetime of the process.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from .permissions import PermissionModel

logger = logging.getLogger(__name__)


def credential_key(api_token: str) -> str:
    """Derive a cache key from an API token without retaining the token."""
    return hashlib.sha256(api_token.encode()).hexdigest()


@dataclass(frozen=True)
class CachedPermissions:
    """A permission model with its expiry."""

    model: PermissionModel
    expires_at: datetime

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return datetime.now(UTC) >= self.expires_at

    def time_until_expiry(self) -> timedelta:
        """Get time until this entry expires."""
        return self.expires_at - datetime.now(UTC)


class PermissionCache:
    """Credential-keyed cache with explicit expiry.

    Usage:
        cache = PermissionCache(ttl_seconds=3600)
        model = await cache.get_or_discover(token, service.discover_permissions)
    """

    def __init__(self, ttl_seconds: int = 3600):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of each entry. 0 disables caching.
        """
        self.ttl = timedelta(seconds=ttl_seconds)
        self._entries: dict[str, CachedPermissions] = {}
        self._lock = asyncio.Lock()

    def get(self, api_token: str) -> PermissionModel | None:
        """Return the cached model for a token, or None if missing or expired."""
        key = credential_key(api_token)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            logger.debug("Cached permissions expired")
            del self._entries[key]
            return None
        logger.debug(
            f"Using cached permissions (expires in {int(entry.time_until_expiry().total_seconds())}s)"
        )
        return entry.model

    def set(self, api_token: str, model: PermissionModel) -> None:
        """Store a model for a token. No-op when caching is disabled."""
        if self.ttl <= timedelta(0):
            return
        self._entries[credential_key(api_token)] = CachedPermissions(
            model=model,
            expires_at=datetime.now(UTC) + self.ttl,
        )

    def invalidate(self, api_token: str) -> bool:
        """Drop the entry for a token.

        Returns:
            True if an entry was removed
        """
        return self._entries.pop(credential_key(api_token), None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    async def get_or_discover(
        self,
        api_token: str,
        discover: Callable[[], Awaitable[PermissionModel]],
    ) -> PermissionModel:
        """Return the cached model, running ``discover`` on a miss.

        Concurrent misses are serialized so a burst of tool calls triggers a
        single discovery run.

        Args:
            api_token: Credential the model belongs to
            discover: Coroutine factory that performs discovery

        Returns:
            Cached or freshly discovered PermissionModel
        """
        model = self.get(api_token)
        if model is not None:
            return model

        async with self._lock:
            model = self.get(api_token)
            if model is not None:
                return model
            model = await discover()
            self.set(api_token, model)
            return model

    def __len__(self) -> int:
        return len(self._entries)
