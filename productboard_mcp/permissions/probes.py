"""Permission probes issued against the Productboard API.

The API has no "list my permissions" endpoint, so access is measured by
issuing one representative request per operation and recording whether it
went through. Creation probes clean up after themselves when the API returns
the new object's id.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from ..utils.errors import (
    APIAuthorizationError,
    APINotFoundError,
    APIValidationError,
    NotConnectedError,
)

if TYPE_CHECKING:
    from ..api.client import ProductboardAPIClient

logger = logging.getLogger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "DELETE"]

DEFAULT_PROBE_DELAY = 0.1  # seconds


@dataclass(frozen=True)
class ProbeDefinition:
    """A single representative request used to test one capability.

    Attributes:
        endpoint: API path, optionally with a query string
        method: HTTP method to issue
        label: Human-readable description for logs
        sample_payload: JSON body for POST/PUT probes
    """

    endpoint: str
    method: HTTPMethod
    label: str
    sample_payload: Any = None


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of running one probe.

    Attributes:
        endpoint: Endpoint of the probe that produced this outcome
        method: HTTP method of that probe
        succeeded: Whether the API accepted the request
        status_code: 200 on success, otherwise the classified failure code
        error: Diagnostic message for failed probes
    """

    endpoint: str
    method: HTTPMethod
    succeeded: bool
    status_code: int
    error: str | None = None


# Fixed probe battery. DELETE is never probed: it could destroy real data.
PERMISSION_PROBES: tuple[ProbeDefinition, ...] = (
    # Users
    ProbeDefinition("/users/me", "GET", "Read current user"),
    ProbeDefinition("/users", "GET", "List users"),
    # Features
    ProbeDefinition("/features", "GET", "Read features"),
    ProbeDefinition(
        "/features",
        "POST",
        "Create features",
        {"name": "Permission Test Feature", "description": "Test"},
    ),
    # Products
    ProbeDefinition("/products", "GET", "Read products"),
    ProbeDefinition(
        "/products",
        "POST",
        "Create products",
        {"name": "Permission Test Product", "type": "product"},
    ),
    # Notes
    ProbeDefinition("/notes", "GET", "Read notes"),
    ProbeDefinition("/notes", "POST", "Create notes", {"content": "Permission test note"}),
    # Companies
    ProbeDefinition("/companies", "GET", "Read companies"),
    # Objectives
    ProbeDefinition("/objectives", "GET", "Read objectives"),
    ProbeDefinition(
        "/objectives", "POST", "Create objectives", {"name": "Test Objective", "type": "company"}
    ),
    # Releases
    ProbeDefinition("/releases", "GET", "Read releases"),
    ProbeDefinition("/releases", "POST", "Create releases", {"name": "Test Release"}),
    # Custom fields
    ProbeDefinition("/custom_fields", "GET", "Read custom fields"),
    ProbeDefinition(
        "/custom_fields", "POST", "Create custom fields", {"name": "Test Field", "type": "text"}
    ),
    # Webhooks
    ProbeDefinition("/webhooks", "GET", "Read webhooks"),
    ProbeDefinition(
        "/webhooks",
        "POST",
        "Create webhooks",
        {"url": "https://example.com/webhook", "events": ["feature.created"]},
    ),
    # Search
    ProbeDefinition("/search?q=test", "GET", "Search functionality"),
    # Analytics (typically admin-only)
    ProbeDefinition("/analytics/features", "GET", "Feature analytics"),
    ProbeDefinition("/analytics/users", "GET", "User analytics"),
)


def classify_probe_error(error: Exception) -> tuple[int, str]:
    """Map a failed probe's exception to a status code and diagnostic message.

    Args:
        error: Exception raised by the API client

    Returns:
        Tuple of (status_code, message). Unrecognized errors map to 500 with
        the raw error message.
    """
    if isinstance(error, APIAuthorizationError):
        return 403, "Forbidden - insufficient permissions"
    if isinstance(error, APINotFoundError):
        return 404, "Not found - endpoint may not exist"
    if isinstance(error, APIValidationError):
        return 400, "Validation error - invalid test data"
    return 500, str(error) or "Unknown error"


def created_resource_id(response: Any) -> str | None:
    """Extract the id of a resource created by a POST probe, if present."""
    if not isinstance(response, dict):
        return None
    data = response.get("data")
    if not isinstance(data, dict):
        return None
    resource_id = data.get("id")
    return str(resource_id) if resource_id else None


class ProbeRunner:
    """Runs the probe battery sequentially against the API.

    Probes are issued one at a time with a fixed pause between them, so the
    remote rate limiter is not tripped and cleanup of one probe can never race
    a later probe. A probe's failure is recorded as data; ``run()`` itself
    only raises when the client is unusable before probing starts.

    Example:
        runner = ProbeRunner(client)
        outcomes = await runner.run()
        failed = [o for o in outcomes if not o.succeeded]
    """

    def __init__(
        self,
        api_client: ProductboardAPIClient,
        probes: tuple[ProbeDefinition, ...] = PERMISSION_PROBES,
        delay: float = DEFAULT_PROBE_DELAY,
    ):
        """Initialize the runner.

        Args:
            api_client: Client used to issue probe requests
            probes: Probe definitions to run, in order
            delay: Pause in seconds after each probe
        """
        self.api_client = api_client
        self.probes = probes
        self.delay = delay

    async def run(self) -> list[ProbeOutcome]:
        """Run every probe and return one outcome per probe, in order.

        Raises:
            NotConnectedError: If the API client is missing or closed
        """
        if self.api_client is None or getattr(self.api_client, "is_closed", False):
            raise NotConnectedError("Permission discovery needs an open API client")

        outcomes: list[ProbeOutcome] = []
        for probe in self.probes:
            outcomes.append(await self._run_probe(probe))
            await asyncio.sleep(self.delay)
        return outcomes

    async def _send(self, probe: ProbeDefinition) -> Any:
        """Issue the probe's request with its configured method and payload."""
        if probe.method == "GET":
            return await self.api_client.get(probe.endpoint)
        if probe.method == "POST":
            return await self.api_client.post(probe.endpoint, probe.sample_payload or {})
        if probe.method == "PUT":
            return await self.api_client.put(probe.endpoint, probe.sample_payload or {})
        return await self.api_client.delete(probe.endpoint)

    async def _run_probe(self, probe: ProbeDefinition) -> ProbeOutcome:
        logger.debug(f"Testing {probe.method} {probe.endpoint}...")

        try:
            response = await self._send(probe)
        except Exception as e:
            status_code, message = classify_probe_error(e)
            logger.debug(f"✗ {probe.label} - {message}")
            return ProbeOutcome(
                endpoint=probe.endpoint,
                method=probe.method,
                succeeded=False,
                status_code=status_code,
                error=message,
            )

        logger.debug(f"✓ {probe.label} - Success")

        if probe.method == "POST":
            resource_id = created_resource_id(response)
            if resource_id:
                await self._cleanup(probe.endpoint, resource_id)

        return ProbeOutcome(
            endpoint=probe.endpoint,
            method=probe.method,
            succeeded=True,
            status_code=200,
        )

    async def _cleanup(self, endpoint: str, resource_id: str) -> None:
        """Delete a resource created by a probe. Failures are logged and ignored."""
        base_endpoint = endpoint.split("?")[0]
        try:
            await self.api_client.delete(f"{base_endpoint}/{resource_id}")
            logger.debug(f"Cleaned up test resource: {resource_id}")
        except Exception as e:
            logger.debug(f"Could not clean up test resource {resource_id} (non-critical): {e}")
