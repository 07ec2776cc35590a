"""Productboard REST API client.

Thin async wrapper around httpx that attaches bearer authentication and
translates HTTP failures into the typed errors in ``utils.errors``. Retry and
backoff are left to callers.

API documentation: https://developer.productboard.com/reference/introduction
"""

import logging
from types import TracebackType
from typing import Any

import httpx

from ..core.config import settings
from ..utils.errors import (
    APIAuthenticationError,
    APIAuthorizationError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIValidationError,
    MissingAPIKeyError,
    NotConnectedError,
)

logger = logging.getLogger(__name__)

API_VERSION_HEADER = "X-Version"
API_VERSION = "1"


def _error_message(response: httpx.Response) -> str:
    """Extract a human-readable error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict):
                return first.get("detail") or first.get("title") or str(first)
            return str(first)
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {response.status_code}"


def raise_for_api_status(response: httpx.Response) -> None:
    """Raise the typed API error matching a failed response.

    Args:
        response: The httpx response to inspect

    Raises:
        APIValidationError: 400 or 422
        APIAuthenticationError: 401
        APIAuthorizationError: 403
        APINotFoundError: 404
        APIRateLimitError: 429
        APIError: any other status >= 400
    """
    status = response.status_code
    if status < 400:
        return

    message = _error_message(response)
    if status in (400, 422):
        raise APIValidationError(message, status)
    if status == 401:
        raise APIAuthenticationError(message)
    if status == 403:
        raise APIAuthorizationError(message)
    if status == 404:
        raise APINotFoundError(message)
    if status == 429:
        retry_after = response.headers.get("Retry-After")
        try:
            retry_seconds = float(retry_after) if retry_after is not None else None
        except ValueError:
            retry_seconds = None
        raise APIRateLimitError(message, retry_after=retry_seconds)
    raise APIError(message, status)


class ProductboardAPIClient:
    """Async client for the Productboard REST API.

    Usage:
        async with ProductboardAPIClient() as client:
            features = await client.get("/features", params={"limit": 20})
            note = await client.post("/notes", {"title": "Feedback", "content": "..."})

    Every method returns the decoded JSON body (an empty dict when the API
    answers without content) or raises an ``APIError`` subclass.
    """

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize the API client.

        Args:
            api_token: Productboard API token. If not provided, uses
                PRODUCTBOARD_API_TOKEN from environment.
            base_url: API base URL (default: settings.productboard_api_url)
            timeout: Request timeout in seconds (default: settings.api_timeout)

        Raises:
            MissingAPIKeyError: If no API token is configured
        """
        self.api_token = api_token or settings.productboard_api_token
        if not self.api_token:
            raise MissingAPIKeyError("PRODUCTBOARD_API_TOKEN")

        self.base_url = (base_url or settings.productboard_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self._client: httpx.AsyncClient | None = None
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Return True once close() has been called."""
        return self._closed

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._closed:
            raise NotConnectedError("The API client has been closed")
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.api_token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    API_VERSION_HEADER: API_VERSION,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
        self._closed = True

    async def __aenter__(self) -> "ProductboardAPIClient":
        self._get_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> dict[str, Any]:
        """Issue a request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: Path relative to the API base URL (e.g. "/features")
            params: Optional query parameters
            body: Optional JSON body

        Returns:
            Decoded JSON body, or an empty dict for empty responses

        Raises:
            APIError: On HTTP errors or transport failures
        """
        client = self._get_client()
        logger.debug(f"{method} {endpoint}")

        try:
            response = await client.request(method, endpoint, params=params, json=body)
        except httpx.RequestError as e:
            logger.error(f"Request {method} {endpoint} failed: {e}")
            raise APIError(f"Request failed: {e}") from e

        raise_for_api_status(response)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON in response from {endpoint}", response.status_code) from e
        return data if isinstance(data, dict) else {"data": data}

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a resource or collection."""
        return await self.make_request("GET", endpoint, params=params)

    async def post(self, endpoint: str, body: Any) -> dict[str, Any]:
        """POST a new resource."""
        return await self.make_request("POST", endpoint, body=body)

    async def put(self, endpoint: str, body: Any) -> dict[str, Any]:
        """PUT (replace) a resource."""
        return await self.make_request("PUT", endpoint, body=body)

    async def delete(self, endpoint: str) -> dict[str, Any]:
        """DELETE a resource."""
        return await self.make_request("DELETE", endpoint)
