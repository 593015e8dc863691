"""Tests for the MELCloud Home API client against a stubbed session."""

import json
from unittest.mock import MagicMock

import aiohttp
import pytest

from custom_components.melcloud_home.client import (
    MELCloudHomeAuthError,
    MELCloudHomeClient,
    MELCloudHomeConnectionError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status=200, body=None, content_type="application/json"):
        self.status = status
        self._body = body
        self.content_type = content_type

    async def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def text(self):
        return str(self._body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def _client(response=None, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.request.side_effect = side_effect
    else:
        session.request.return_value = response
    return MELCloudHomeClient(session, "token-123", base_url="https://example.test/"), session


CONTEXT = {
    "id": "user-1",
    "buildings": [
        {
            "name": "Home",
            "airToAirUnits": [
                {
                    "id": "unit-a",
                    "givenDisplayName": "Lounge",
                    "connectedInterfaceIdentifier": "IF-A",
                    "settings": [
                        {"name": "Power", "value": "True"},
                        {"name": "SetFanSpeed", "value": "Two"},
                    ],
                },
                {"givenDisplayName": "Broken"},
            ],
        }
    ],
    "guestBuildings": [
        {
            "name": "Cabin",
            "airToAirUnits": [
                {"id": "unit-b", "givenDisplayName": "Cabin", "settings": []},
            ],
        }
    ],
}


# ---------------------------------------------------------------------------
# Context and units
# ---------------------------------------------------------------------------

class TestGetUnits:

    @pytest.mark.asyncio
    async def test_units_from_own_and_guest_buildings(self):
        client, session = _client(FakeResponse(body=CONTEXT))
        units = await client.async_get_units()

        assert sorted(units) == ["unit-a", "unit-b"]
        assert units["unit-a"].given_display_name == "Lounge"
        assert units["unit-a"].settings.set_fan_speed == "Two"
        assert units["unit-b"].connected_interface_identifier == "unit-b"

        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == "https://example.test/api/user/context"
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer token-123"

    @pytest.mark.asyncio
    async def test_non_dict_context_is_an_error(self):
        client, _ = _client(FakeResponse(body=[]))
        with pytest.raises(MELCloudHomeConnectionError):
            await client.async_get_context()


# ---------------------------------------------------------------------------
# Control and errors
# ---------------------------------------------------------------------------

class TestControlDevice:

    @pytest.mark.asyncio
    async def test_put_payload(self):
        client, session = _client(FakeResponse(status=200, content_type="text/plain"))
        payload = {"power": True, "setFanSpeed": "Five"}

        assert await client.async_control_device("unit-a", payload) is None

        method, url = session.request.call_args.args
        assert method == "PUT"
        assert url == "https://example.test/api/ataunit/unit-a"
        assert session.request.call_args.kwargs["json"] == payload

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_errors(self, status):
        client, _ = _client(FakeResponse(status=status))
        with pytest.raises(MELCloudHomeAuthError):
            await client.async_control_device("unit-a", {})

    @pytest.mark.asyncio
    async def test_server_error(self):
        client, _ = _client(FakeResponse(status=500, body="boom"))
        with pytest.raises(MELCloudHomeConnectionError, match="500"):
            await client.async_control_device("unit-a", {})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [aiohttp.ClientError("reset"), TimeoutError()])
    async def test_transport_errors_are_wrapped(self, error):
        client, _ = _client(side_effect=error)
        with pytest.raises(MELCloudHomeConnectionError) as excinfo:
            await client.async_control_device("unit-a", {})
        assert excinfo.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_undecodable_json_body(self):
        error = json.JSONDecodeError("Expecting value", "<html>", 0)
        client, _ = _client(FakeResponse(status=200, body=error))
        with pytest.raises(MELCloudHomeConnectionError) as excinfo:
            await client.async_control_device("unit-a", {})
        assert excinfo.value.__cause__ is error
