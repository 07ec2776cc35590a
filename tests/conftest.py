"""Pytest configuration and fixtures for productboard-mcp tests."""

import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from productboard_mcp.permissions.probes import ProbeOutcome


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_api_client():
    """Create a mock ProductboardAPIClient where every request succeeds."""
    client = MagicMock()
    client.is_closed = False
    client.api_token = "test-token-12345"
    client.get = AsyncMock(return_value={"data": []})
    client.post = AsyncMock(return_value={"data": {}})
    client.put = AsyncMock(return_value={"data": {}})
    client.delete = AsyncMock(return_value={})
    return client


@pytest.fixture
def no_sleep(monkeypatch):
    """Replace asyncio.sleep in the probe runner so tests do not wait."""
    mock_sleep = AsyncMock()
    monkeypatch.setattr("productboard_mcp.permissions.probes.asyncio.sleep", mock_sleep)
    return mock_sleep


@pytest.fixture
def make_outcome():
    """Factory for ProbeOutcome objects."""

    def _make(endpoint: str, method: str = "GET", succeeded: bool = True) -> ProbeOutcome:
        return ProbeOutcome(
            endpoint=endpoint,
            method=method,
            succeeded=succeeded,
            status_code=200 if succeeded else 403,
            error=None if succeeded else "Forbidden - insufficient permissions",
        )

    return _make


@pytest.fixture(autouse=True)
def reset_tool_session(monkeypatch):
    """Reset the shared API client and permission cache between tests."""
    from productboard_mcp.tools import session

    session._api_client = None
    session._permission_cache = None
    monkeypatch.delenv("PRODUCTBOARD_API_TOKEN", raising=False)
    yield
    session._api_client = None
    session._permission_cache = None
    session._pending_discoveries.clear()


@pytest.fixture
def env_with_api_token(monkeypatch):
    """Set up environment with an API token."""
    monkeypatch.setenv("PRODUCTBOARD_API_TOKEN", "test-api-token-12345")
