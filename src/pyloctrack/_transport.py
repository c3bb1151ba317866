"""JSON-over-HTTP transport for the location service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyloctrack._constants import USER_AGENT
from pyloctrack.config import TrackerConfig
from pyloctrack.exceptions import TrackerTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ...


class HttpTransport:
    """HTTP transport sending JSON bodies and decoding JSON envelopes."""

    def __init__(
        self,
        config: TrackerConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.http_timeout)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        if self._config.api_token:
            headers["authorization"] = f"Bearer {self._config.api_token}"
        return headers

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON envelope.

        Any network failure, non-2xx status or non-object body is raised
        as :class:`TrackerTransportError`.
        """
        url = f"{self._config.base_url}{endpoint}"
        body = json.dumps(dict(payload), separators=(",", ":")) if payload is not None else None

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=self._build_headers(),
                timeout=self._timeout,
                ssl=None if self._config.verify_ssl else False,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise TrackerTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except TrackerTransportError:
            raise
        except TimeoutError as exc:
            raise TrackerTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TrackerTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body_json = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrackerTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body_json, dict):
            raise TrackerTransportError(
                f"Response from {endpoint} is not a JSON object",
                endpoint=endpoint,
            )
        return body_json
