"""Permission discovery service.

Combines the probe runner and the outcome analyzer into the single call the
rest of the server uses: ``discover_permissions()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .analyzer import analyze_probe_outcomes
from .probes import DEFAULT_PROBE_DELAY, PERMISSION_PROBES, ProbeDefinition, ProbeRunner

if TYPE_CHECKING:
    from ..api.client import ProductboardAPIClient
    from .permissions import PermissionModel

logger = logging.getLogger(__name__)


class PermissionDiscoveryService:
    """Discovers what the configured credentials may do.

    Every call re-probes from scratch; nothing is cached here. Callers that
    want reuse wrap the service with ``PermissionCache``, and callers that
    want a deadline wrap the call in ``asyncio.wait_for``.

    Usage:
        async with ProductboardAPIClient() as client:
            service = PermissionDiscoveryService(client)
            model = await service.discover_permissions()
            print(model.access_level, model.is_read_only)
    """

    def __init__(
        self,
        api_client: ProductboardAPIClient,
        probe_delay: float = DEFAULT_PROBE_DELAY,
        probes: tuple[ProbeDefinition, ...] = PERMISSION_PROBES,
    ):
        self.api_client = api_client
        self.runner = ProbeRunner(api_client, probes=probes, delay=probe_delay)

    async def discover_permissions(self) -> PermissionModel:
        """Probe the API and classify the results.

        Returns:
            PermissionModel for the current credentials

        Raises:
            NotConnectedError: If the API client is unusable before probing
        """
        logger.info("Starting permission discovery...")

        outcomes = await self.runner.run()
        model = analyze_probe_outcomes(outcomes)

        failed = sum(1 for outcome in outcomes if not outcome.succeeded)
        logger.info(
            f"Permission discovery completed: access_level={model.access_level}, "
            f"permissions={len(model.permissions)}, "
            f"probes={len(outcomes)} ({failed} denied or failed)"
        )
        logger.debug(f"Discovered capabilities: {model.to_dict()['capabilities']}")

        return model
