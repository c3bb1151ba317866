"""High-level async client for the remote location service."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pyloctrack._api import locations as _locations_api
from pyloctrack._api import users as _users_api
from pyloctrack._transport import HttpTransport, Transport
from pyloctrack.config import TrackerConfig
from pyloctrack.exceptions import TrackerError
from pyloctrack.models.location import RemoteLocation
from pyloctrack.models.user import RemoteStatus, UserIdentity
from pyloctrack.tracking.provider import LocalPositionProvider
from pyloctrack.tracking.session import TrackingListener, TrackingSession
from pyloctrack.tracking.sharing import LocalSharingSession, SharingListener

_logger = logging.getLogger(__name__)


class TrackerClient:
    """Async client for the remote location service.

    Every method is a stateless call; failures raise a
    :class:`~pyloctrack.exceptions.TrackerError` subclass.

    Usage::

        async with TrackerClient(config) as client:
            status = await client.check_status("user-42")
            if status.active:
                location = await client.fetch_location("user-42")
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or TrackerConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> TrackerConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrackerClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        _logger.debug("Client ready for %s", self._config.base_url)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TrackerError("Client not initialized. Use 'async with TrackerClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, username: str) -> UserIdentity:
        """Register a new user and return the assigned identity."""
        return await _users_api.create_user(self._require_transport(), username)

    async def verify_identity(self, identifier: str) -> UserIdentity:
        """Confirm that *identifier* is a known user (login flow)."""
        return await _users_api.verify_user(self._require_transport(), identifier)

    async def check_status(self, identifier: str) -> RemoteStatus:
        """Return whether *identifier* is currently sharing its location."""
        return await _users_api.get_user_status(self._require_transport(), identifier)

    async def update_status(self, identifier: str, active: bool) -> RemoteStatus:
        """Turn location sharing for *identifier* on or off."""
        return await _users_api.update_user_status(self._require_transport(), identifier, active)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    async def fetch_location(self, identifier: str) -> RemoteLocation:
        """Fetch the latest position published by *identifier*."""
        return await _locations_api.get_user_location(self._require_transport(), identifier)

    async def push_location(self, identifier: str, latitude: float, longitude: float) -> RemoteLocation:
        """Publish a position for *identifier*."""
        return await _locations_api.update_location(self._require_transport(), identifier, latitude, longitude)

    # ------------------------------------------------------------------
    # Engine factories
    # ------------------------------------------------------------------

    def tracking_session(self, listener: TrackingListener) -> TrackingSession:
        """Build a :class:`TrackingSession` using this client's poll settings."""
        return TrackingSession(
            self,
            listener,
            poll_interval=self._config.poll_interval,
            request_timeout=self._config.request_timeout,
        )

    def sharing_session(
        self,
        identifier: str,
        provider: LocalPositionProvider,
        listener: SharingListener | None = None,
    ) -> LocalSharingSession:
        """Build a :class:`LocalSharingSession` for the local user *identifier*."""
        return LocalSharingSession(
            self,
            identifier,
            provider,
            listener,
            request_timeout=self._config.request_timeout,
        )
