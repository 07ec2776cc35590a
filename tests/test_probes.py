"""Tests for the permission probe runner."""

from unittest.mock import AsyncMock, call

import pytest

from productboard_mcp.permissions.probes import (
    PERMISSION_PROBES,
    ProbeDefinition,
    ProbeRunner,
    classify_probe_error,
    created_resource_id,
)
from productboard_mcp.utils.errors import (
    APIAuthorizationError,
    APIError,
    APINotFoundError,
    APIValidationError,
    NotConnectedError,
)


class TestProbeBattery:
    """Tests for the fixed probe definitions."""

    def test_probe_battery_never_probes_delete(self):
        """Test that no probe issues a DELETE."""
        assert all(probe.method != "DELETE" for probe in PERMISSION_PROBES)

    def test_probe_battery_covers_resources(self):
        """Test read and write probes exist for each expected resource."""
        probes = {(p.endpoint, p.method) for p in PERMISSION_PROBES}

        for resource in [
            "/features",
            "/products",
            "/notes",
            "/objectives",
            "/releases",
            "/custom_fields",
            "/webhooks",
        ]:
            assert (resource, "GET") in probes
            assert (resource, "POST") in probes

        assert ("/users", "GET") in probes
        assert ("/companies", "GET") in probes
        assert ("/companies", "POST") not in probes
        assert ("/search?q=test", "GET") in probes
        assert ("/analytics/features", "GET") in probes
        assert ("/analytics/users", "GET") in probes

    def test_write_probes_have_payloads(self):
        """Test every POST probe carries a creation payload."""
        for probe in PERMISSION_PROBES:
            if probe.method == "POST":
                assert isinstance(probe.sample_payload, dict)
                assert probe.sample_payload


class TestClassifyProbeError:
    """Tests for classify_probe_error."""

    def test_authorization_error(self):
        """Test authorization failures map to 403."""
        assert classify_probe_error(APIAuthorizationError()) == (
            403,
            "Forbidden - insufficient permissions",
        )

    def test_not_found_error(self):
        """Test missing endpoints map to 404."""
        assert classify_probe_error(APINotFoundError()) == (
            404,
            "Not found - endpoint may not exist",
        )

    def test_validation_error(self):
        """Test rejected payloads map to 400."""
        assert classify_probe_error(APIValidationError("bad name", 422)) == (
            400,
            "Validation error - invalid test data",
        )

    def test_unrecognized_error_keeps_message(self):
        """Test unknown failures map to 500 with the raw message."""
        assert classify_probe_error(APIError("Gateway exploded", 502)) == (500, "Gateway exploded")
        assert classify_probe_error(RuntimeError("boom")) == (500, "boom")


class TestCreatedResourceId:
    """Tests for created_resource_id."""

    def test_extracts_id(self):
        """Test the id is read from data.id."""
        assert created_resource_id({"data": {"id": "abc123"}}) == "abc123"

    def test_missing_id(self):
        """Test responses without an id yield None."""
        assert created_resource_id({"data": {}}) is None
        assert created_resource_id({}) is None
        assert created_resource_id(None) is None
        assert created_resource_id({"data": ["abc123"]}) is None


class TestProbeRunner:
    """Tests for ProbeRunner.run."""

    @pytest.mark.asyncio
    async def test_run_returns_one_outcome_per_probe_in_order(self, mock_api_client, no_sleep):
        """Test outcomes follow probe definition order."""
        runner = ProbeRunner(mock_api_client)

        outcomes = await runner.run()

        assert len(outcomes) == len(PERMISSION_PROBES)
        for outcome, probe in zip(outcomes, PERMISSION_PROBES, strict=True):
            assert outcome.endpoint == probe.endpoint
            assert outcome.method == probe.method
            assert outcome.succeeded is True
            assert outcome.status_code == 200
            assert outcome.error is None

    @pytest.mark.asyncio
    async def test_run_pauses_after_each_probe(self, mock_api_client, no_sleep):
        """Test the runner sleeps the configured delay after every probe."""
        runner = ProbeRunner(mock_api_client, delay=0.25)

        await runner.run()

        assert no_sleep.await_count == len(PERMISSION_PROBES)
        no_sleep.assert_has_awaits([call(0.25)] * len(PERMISSION_PROBES))

    @pytest.mark.asyncio
    async def test_run_sends_payloads(self, mock_api_client, no_sleep):
        """Test POST probes send their sample payload."""
        probes = (
            ProbeDefinition("/notes", "POST", "Create notes", {"content": "Permission test note"}),
        )
        runner = ProbeRunner(mock_api_client, probes=probes)

        await runner.run()

        mock_api_client.post.assert_awaited_once_with("/notes", {"content": "Permission test note"})

    @pytest.mark.asyncio
    async def test_run_dispatches_put_and_delete(self, mock_api_client, no_sleep):
        """Test PUT and DELETE definitions use the matching client method."""
        probes = (
            ProbeDefinition("/features/1", "PUT", "Update feature"),
            ProbeDefinition("/features/1", "DELETE", "Delete feature"),
        )
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        mock_api_client.put.assert_awaited_once_with("/features/1", {})
        mock_api_client.delete.assert_awaited_once_with("/features/1")
        assert all(o.succeeded for o in outcomes)

    @pytest.mark.asyncio
    async def test_failed_probe_is_recorded_not_raised(self, mock_api_client, no_sleep):
        """Test a single probe failure only marks that probe unsuccessful."""
        probes = (
            ProbeDefinition("/features", "GET", "Read features"),
            ProbeDefinition("/features", "POST", "Create features", {"name": "x"}),
            ProbeDefinition("/notes", "GET", "Read notes"),
        )
        mock_api_client.post = AsyncMock(side_effect=APIAuthorizationError())
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert outcomes[1].status_code == 403
        assert outcomes[1].error == "Forbidden - insufficient permissions"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_500(self, mock_api_client, no_sleep):
        """Test arbitrary exceptions are downgraded to a 500 outcome."""
        probes = (ProbeDefinition("/analytics/users", "GET", "User analytics"),)
        mock_api_client.get = AsyncMock(side_effect=ConnectionError("connection reset"))
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        assert outcomes[0].succeeded is False
        assert outcomes[0].status_code == 500
        assert outcomes[0].error == "connection reset"

    @pytest.mark.asyncio
    async def test_successful_create_is_cleaned_up(self, mock_api_client, no_sleep):
        """Test a created resource with an id is deleted immediately."""
        probes = (ProbeDefinition("/notes", "POST", "Create notes", {"content": "x"}),)
        mock_api_client.post = AsyncMock(return_value={"data": {"id": "abc123"}})
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        mock_api_client.delete.assert_awaited_once_with("/notes/abc123")
        assert outcomes[0].succeeded is True

    @pytest.mark.asyncio
    async def test_cleanup_failure_does_not_affect_outcome(self, mock_api_client, no_sleep):
        """Test a failing cleanup DELETE leaves the POST outcome successful."""
        probes = (
            ProbeDefinition("/notes", "POST", "Create notes", {"content": "x"}),
            ProbeDefinition("/notes", "GET", "Read notes"),
        )
        mock_api_client.post = AsyncMock(return_value={"data": {"id": "abc123"}})
        mock_api_client.delete = AsyncMock(side_effect=APIAuthorizationError())
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        mock_api_client.delete.assert_awaited_once_with("/notes/abc123")
        assert outcomes[0].succeeded is True
        assert outcomes[0].status_code == 200
        assert outcomes[1].succeeded is True

    @pytest.mark.asyncio
    async def test_cleanup_strips_query_string(self, mock_api_client, no_sleep):
        """Test cleanup targets the endpoint path without its query."""
        probes = (ProbeDefinition("/features?workspace=1", "POST", "Create features", {}),)
        mock_api_client.post = AsyncMock(return_value={"data": {"id": 42}})
        runner = ProbeRunner(mock_api_client, probes=probes)

        await runner.run()

        mock_api_client.delete.assert_awaited_once_with("/features/42")

    @pytest.mark.asyncio
    async def test_no_cleanup_without_id(self, mock_api_client, no_sleep):
        """Test no DELETE is issued when the API returns no id."""
        probes = (ProbeDefinition("/releases", "POST", "Create releases", {"name": "x"}),)
        mock_api_client.post = AsyncMock(return_value={"links": {}})
        runner = ProbeRunner(mock_api_client, probes=probes)

        outcomes = await runner.run()

        mock_api_client.delete.assert_not_awaited()
        assert outcomes[0].succeeded is True

    @pytest.mark.asyncio
    async def test_no_cleanup_for_get(self, mock_api_client, no_sleep):
        """Test GET responses carrying an id never trigger a DELETE."""
        probes = (ProbeDefinition("/users/me", "GET", "Read current user"),)
        mock_api_client.get = AsyncMock(return_value={"data": {"id": "user-1"}})
        runner = ProbeRunner(mock_api_client, probes=probes)

        await runner.run()

        mock_api_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_closed_client_raises_before_probing(self, mock_api_client, no_sleep):
        """Test an unusable client propagates instead of producing outcomes."""
        mock_api_client.is_closed = True
        runner = ProbeRunner(mock_api_client)

        with pytest.raises(NotConnectedError):
            await runner.run()

        mock_api_client.get.assert_not_awaited()
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_client_raises(self, no_sleep):
        """Test a missing client propagates."""
        runner = ProbeRunner(None)

        with pytest.raises(NotConnectedError):
            await runner.run()
