from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import AsyncIterator
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from pyloctrack._constants import USER_AGENT
from pyloctrack._transport import HttpTransport
from pyloctrack.config import TrackerConfig
from pyloctrack.exceptions import TrackerTransportError


async def _echo(request: web.Request) -> web.Response:
    text = await request.text()
    return web.json_response(
        {
            "code": "0",
            "data": {
                "method": request.method,
                "path": request.path,
                "body": json.loads(text) if text else None,
                "authorization": request.headers.get("Authorization"),
                "userAgent": request.headers.get("User-Agent"),
                "contentType": request.headers.get("Content-Type"),
            },
        }
    )


async def _missing(_request: web.Request) -> web.Response:
    return web.Response(status=404, text="no such user")


async def _broken(_request: web.Request) -> web.Response:
    return web.Response(status=502, text="upstream down")


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(text="<html>maintenance</html>", content_type="text/html")


async def _array(_request: web.Request) -> web.Response:
    return web.json_response([1, 2, 3])


async def _slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(0.5)
    return web.json_response({"code": "0"})


def _build_app() -> web.Application:
    app = web.Application()
    app.router.add_route("*", "/api/echo", _echo)
    app.router.add_get("/api/missing", _missing)
    app.router.add_get("/api/broken", _broken)
    app.router.add_get("/api/not-json", _not_json)
    app.router.add_get("/api/array", _array)
    app.router.add_get("/api/slow", _slow)
    return app


@contextlib.asynccontextmanager
async def _serve(**config_kwargs: Any) -> AsyncIterator[HttpTransport]:
    server = test_utils.TestServer(_build_app())
    await server.start_server()
    try:
        config = TrackerConfig(base_url=str(server.make_url("/")), **config_kwargs)
        async with aiohttp.ClientSession() as http:
            yield HttpTransport(config, http)
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_post_sends_json_body_and_default_headers() -> None:
    async with _serve() as transport:
        response = await transport.request_json("POST", "/api/echo", {"latitude": 1.5, "longitude": 2.5})

    data = response["data"]
    assert response["code"] == "0"
    assert data["method"] == "POST"
    assert data["body"] == {"latitude": 1.5, "longitude": 2.5}
    assert data["userAgent"] == USER_AGENT
    assert data["contentType"].startswith("application/json")
    assert data["authorization"] is None


@pytest.mark.asyncio
async def test_get_sends_no_body() -> None:
    async with _serve() as transport:
        response = await transport.request_json("GET", "/api/echo")

    assert response["data"]["method"] == "GET"
    assert response["data"]["body"] is None


@pytest.mark.asyncio
async def test_bearer_token_header_when_configured() -> None:
    async with _serve(api_token="secret-token") as transport:
        response = await transport.request_json("PUT", "/api/echo", {"isActive": True})

    assert response["data"]["authorization"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_not_found_status_maps_to_transport_error() -> None:
    async with _serve() as transport:
        with pytest.raises(TrackerTransportError) as exc_info:
            await transport.request_json("GET", "/api/missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.endpoint == "/api/missing"
    assert "no such user" in str(exc_info.value)


@pytest.mark.asyncio
async def test_server_error_status_maps_to_transport_error() -> None:
    async with _serve() as transport:
        with pytest.raises(TrackerTransportError) as exc_info:
            await transport.request_json("GET", "/api/broken")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_invalid_json_maps_to_transport_error() -> None:
    async with _serve() as transport:
        with pytest.raises(TrackerTransportError, match="Invalid JSON") as exc_info:
            await transport.request_json("GET", "/api/not-json")

    assert exc_info.value.status_code is None
    assert exc_info.value.endpoint == "/api/not-json"


@pytest.mark.asyncio
async def test_non_object_body_maps_to_transport_error() -> None:
    async with _serve() as transport:
        with pytest.raises(TrackerTransportError, match="not a JSON object"):
            await transport.request_json("GET", "/api/array")


@pytest.mark.asyncio
async def test_timeout_maps_to_transport_error() -> None:
    async with _serve(http_timeout=0.05) as transport:
        with pytest.raises(TrackerTransportError, match="timed out") as exc_info:
            await transport.request_json("GET", "/api/slow")

    assert exc_info.value.endpoint == "/api/slow"


@pytest.mark.asyncio
async def test_connection_failure_maps_to_transport_error() -> None:
    server = test_utils.TestServer(_build_app())
    await server.start_server()
    base_url = str(server.make_url("/"))
    await server.close()

    async with aiohttp.ClientSession() as http:
        transport = HttpTransport(TrackerConfig(base_url=base_url), http)
        with pytest.raises(TrackerTransportError) as exc_info:
            await transport.request_json("GET", "/api/echo")

    assert exc_info.value.status_code is None
    assert exc_info.value.endpoint == "/api/echo"


class _RecordedResponse:
    status = 200

    async def text(self) -> str:
        return '{"code": "0"}'

    async def __aenter__(self) -> _RecordedResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _RecordingSession:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _RecordedResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return _RecordedResponse()


@pytest.mark.asyncio
@pytest.mark.parametrize(("verify_ssl", "expected"), [(True, None), (False, False)])
async def test_verify_ssl_toggle_is_passed_to_aiohttp(verify_ssl: bool, expected: bool | None) -> None:
    http = _RecordingSession()
    config = TrackerConfig(base_url="https://track.example.com/", verify_ssl=verify_ssl, http_timeout=7.0)
    transport = HttpTransport(config, http)  # type: ignore[arg-type]

    await transport.request_json("GET", "/api/users/u1")

    call = http.calls[0]
    assert call["url"] == "https://track.example.com/api/users/u1"
    assert call["ssl"] is expected
    assert call["timeout"].total == 7.0
