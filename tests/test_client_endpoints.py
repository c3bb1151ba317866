from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pyloctrack.client import TrackerClient
from pyloctrack.config import TrackerConfig
from pyloctrack.exceptions import TrackerApiError, TrackerError, TrackerUserNotFoundError


class _ScriptedTransport:
    """Returns canned envelopes keyed by ``(method, endpoint)`` and records requests."""

    def __init__(self, responses: dict[tuple[str, str], dict[str, Any]]) -> None:
        self._responses = responses
        self.requests: list[tuple[str, str, dict[str, Any] | None]] = []

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.requests.append((method, endpoint, dict(payload) if payload is not None else None))
        return self._responses[(method, endpoint)]


def _client(transport: _ScriptedTransport) -> TrackerClient:
    return TrackerClient(TrackerConfig(), transport=transport)


@pytest.mark.asyncio
async def test_check_status_parses_envelope() -> None:
    transport = _ScriptedTransport(
        {("GET", "/api/users/u1/status"): {"code": "0", "data": {"userId": "u1", "isActive": True}}}
    )

    async with _client(transport) as client:
        status = await client.check_status("u1")

    assert status.identifier == "u1"
    assert status.active is True


@pytest.mark.asyncio
async def test_identifier_is_quoted_into_path() -> None:
    transport = _ScriptedTransport(
        {("GET", "/api/users/a%2Fb%20c/status"): {"code": "0", "data": {"isActive": False}}}
    )

    async with _client(transport) as client:
        status = await client.check_status(" a/b c ")

    # Identifier falls back to the requested one when the service omits it.
    assert status.identifier == "a/b c"
    assert status.active is False


@pytest.mark.asyncio
async def test_fetch_location_unwraps_nested_location() -> None:
    transport = _ScriptedTransport(
        {
            ("GET", "/api/users/u1/location"): {
                "code": "0",
                "data": {"location": {"latitude": 12.34, "longitude": 56.78}},
            }
        }
    )

    async with _client(transport) as client:
        location = await client.fetch_location("u1")

    assert location.coordinates == (12.34, 56.78)


@pytest.mark.asyncio
async def test_bare_payload_without_envelope_is_accepted() -> None:
    transport = _ScriptedTransport({("GET", "/api/users/u1/location"): {"lat": 1.5, "lon": 2.5}})

    async with _client(transport) as client:
        location = await client.fetch_location("u1")

    assert location.coordinates == (1.5, 2.5)


@pytest.mark.asyncio
async def test_unknown_user_maps_to_not_found_error() -> None:
    transport = _ScriptedTransport(
        {("GET", "/api/users/ghost"): {"code": "USER_NOT_FOUND", "message": "no such user"}}
    )

    async with _client(transport) as client:
        with pytest.raises(TrackerUserNotFoundError) as exc_info:
            await client.verify_identity("ghost")

    assert exc_info.value.code == "USER_NOT_FOUND"
    assert exc_info.value.endpoint == "/api/users/ghost"


@pytest.mark.asyncio
async def test_non_zero_code_maps_to_api_error() -> None:
    transport = _ScriptedTransport(
        {("GET", "/api/users/u1/location"): {"code": "500", "message": "database unavailable"}}
    )

    async with _client(transport) as client:
        with pytest.raises(TrackerApiError) as exc_info:
            await client.fetch_location("u1")

    exc = exc_info.value
    assert not isinstance(exc, TrackerUserNotFoundError)
    assert exc.code == "500"
    assert "database unavailable" in str(exc)


@pytest.mark.asyncio
async def test_invalid_payload_maps_to_api_error() -> None:
    transport = _ScriptedTransport(
        {("GET", "/api/users/u1/location"): {"code": "0", "data": {"latitude": "north"}}}
    )

    async with _client(transport) as client:
        with pytest.raises(TrackerApiError) as exc_info:
            await client.fetch_location("u1")

    assert exc_info.value.code == "invalid_payload"


@pytest.mark.asyncio
async def test_update_status_sends_flag_and_keeps_echoed_value() -> None:
    transport = _ScriptedTransport(
        {("PUT", "/api/users/me/status"): {"code": "0", "data": {"id": "me", "isActive": False}}}
    )

    async with _client(transport) as client:
        status = await client.update_status("me", True)

    assert transport.requests == [("PUT", "/api/users/me/status", {"isActive": True})]
    # The service's answer wins over the requested value.
    assert status.active is False


@pytest.mark.asyncio
async def test_update_status_assumes_requested_value_when_not_echoed() -> None:
    transport = _ScriptedTransport({("PUT", "/api/users/me/status"): {"code": "0", "data": {}}})

    async with _client(transport) as client:
        status = await client.update_status("me", True)

    assert status.identifier == "me"
    assert status.active is True


@pytest.mark.asyncio
async def test_push_location_posts_coordinates() -> None:
    transport = _ScriptedTransport({("POST", "/api/users/me/location"): {"code": "0"}})

    async with _client(transport) as client:
        ack = await client.push_location("me", 32.0853, 34.7818)

    assert transport.requests == [
        ("POST", "/api/users/me/location", {"latitude": 32.0853, "longitude": 34.7818}),
    ]
    assert ack.coordinates == (32.0853, 34.7818)


@pytest.mark.asyncio
async def test_create_user_returns_assigned_identity() -> None:
    transport = _ScriptedTransport({("POST", "/api/users"): {"code": "0", "data": {"id": "u-100"}}})

    async with _client(transport) as client:
        identity = await client.create_user("  dana  ")

    assert transport.requests == [("POST", "/api/users", {"username": "dana"})]
    assert identity.identifier == "u-100"
    assert identity.username == "dana"


@pytest.mark.parametrize("username", ["", "ab", "x" * 51])
@pytest.mark.asyncio
async def test_create_user_validates_username(username: str) -> None:
    transport = _ScriptedTransport({})

    async with _client(transport) as client:
        with pytest.raises(ValueError):
            await client.create_user(username)

    assert transport.requests == []


@pytest.mark.asyncio
async def test_empty_identifier_rejected() -> None:
    transport = _ScriptedTransport({})

    async with _client(transport) as client:
        with pytest.raises(ValueError):
            await client.fetch_location("   ")


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = TrackerClient(TrackerConfig())

    with pytest.raises(TrackerError, match="not initialized"):
        await client.check_status("u1")
