"""Shared API client and permission lookup for tools.

Tools and the server share one API client and one permission cache per
process, created lazily from settings.
"""

import asyncio
import logging
import threading

from ..api.client import ProductboardAPIClient
from ..core.config import settings
from ..permissions.cache import PermissionCache
from ..permissions.discovery import PermissionDiscoveryService
from ..permissions.permissions import PermissionModel

logger = logging.getLogger(__name__)

_client_lock = threading.Lock()
_api_client: ProductboardAPIClient | None = None
_permission_cache: PermissionCache | None = None

# Discovery runs that outlived their caller's deadline; kept until they finish
_pending_discoveries: set[asyncio.Task] = set()


def get_api_client() -> ProductboardAPIClient:
    """Get or create the shared API client.

    Raises:
        MissingAPIKeyError: If PRODUCTBOARD_API_TOKEN is not configured
    """
    global _api_client
    if _api_client is None or _api_client.is_closed:
        with _client_lock:
            if _api_client is None or _api_client.is_closed:
                _api_client = ProductboardAPIClient()
    return _api_client


def get_permission_cache() -> PermissionCache:
    """Get or create the shared permission cache."""
    global _permission_cache
    if _permission_cache is None:
        with _client_lock:
            if _permission_cache is None:
                _permission_cache = PermissionCache(settings.permission_cache_ttl_seconds)
    return _permission_cache


async def get_current_permissions(refresh: bool = False) -> PermissionModel:
    """Return the permission model for the configured credentials.

    Uses the cache unless ``refresh`` is set. The wait is bounded by
    settings.permission_discovery_timeout. A run that overshoots is not
    cancelled: it finishes in the background so probe cleanup still happens,
    and its model lands in the cache for the next lookup.

    Args:
        refresh: Discard any cached model and probe again

    Returns:
        PermissionModel for the current API token

    Raises:
        TimeoutError: If discovery does not finish in time
    """
    client = get_api_client()
    cache = get_permission_cache()
    if refresh and cache.invalidate(client.api_token):
        logger.info("Discarded cached permissions, re-probing")

    service = PermissionDiscoveryService(client, probe_delay=settings.probe_delay_seconds)
    task = asyncio.ensure_future(
        cache.get_or_discover(client.api_token, service.discover_permissions)
    )
    _pending_discoveries.add(task)
    task.add_done_callback(_discovery_finished)

    return await asyncio.wait_for(
        asyncio.shield(task), timeout=settings.permission_discovery_timeout
    )


def _discovery_finished(task: asyncio.Task) -> None:
    _pending_discoveries.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Permission discovery failed: {error}")


async def reset_session() -> None:
    """Wait for in-flight discovery, close the shared client and drop cached permissions."""
    global _api_client, _permission_cache
    if _pending_discoveries:
        logger.info(f"Waiting for {len(_pending_discoveries)} permission discovery run(s)")
        await asyncio.gather(*_pending_discoveries, return_exceptions=True)
    if _api_client is not None:
        await _api_client.close()
    _api_client = None
    _permission_cache = None
