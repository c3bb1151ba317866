"""Remote presence tracking session.

A :class:`TrackingSession` follows one remote identifier at a time:

1. ``start_tracking(id)`` asks the service whether *id* is sharing
   (``verifying``).
2. If it is, a :class:`~pyloctrack.tracking.scheduler.PollScheduler`
   starts and every tick fetches the latest location (``polling``).
3. Each result is delivered to the listener as a tagged event.

All transitions happen on the event loop that called
``start_tracking``.  Remote calls run as tasks; their completions are
tagged with the generation they were issued for and are dropped when
the session has since been stopped or restarted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from pyloctrack._api._common import require_identifier
from pyloctrack._constants import DEFAULT_POLL_INTERVAL
from pyloctrack.models.location import RemoteLocation
from pyloctrack.models.user import RemoteStatus
from pyloctrack.tracking._common import call_with_timeout, describe_error
from pyloctrack.tracking.events import (
    RemoteLocationUpdated,
    RemoteUserInactive,
    TrackingError,
    TrackingEvent,
)
from pyloctrack.tracking.scheduler import PollScheduler, Scheduler

_logger = logging.getLogger(__name__)

TrackingListener = Callable[[TrackingEvent], None]


class RemoteTrackingClient(Protocol):
    """The part of :class:`~pyloctrack.client.TrackerClient` a session uses."""

    async def check_status(self, identifier: str) -> RemoteStatus:
        ...

    async def fetch_location(self, identifier: str) -> RemoteLocation:
        ...


class TrackingState(StrEnum):
    IDLE = "idle"
    VERIFYING = "verifying"
    POLLING = "polling"
    STOPPED = "stopped"


class TrackingSession:
    """Poll a single remote identifier and report its location.

    Parameters
    ----------
    client : RemoteTrackingClient
        Source of status checks and location fetches.
    listener : callable
        Receives every :data:`TrackingEvent`, one at a time, in order.
    poll_interval : float
        Seconds between location fetches.
    request_timeout : float or None
        Bound for each remote call; ``None`` waits indefinitely.
    scheduler : Scheduler or None
        Timer implementation.  Defaults to a new :class:`PollScheduler`.
    """

    def __init__(
        self,
        client: RemoteTrackingClient,
        listener: TrackingListener,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        request_timeout: float | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._client = client
        self._listener = listener
        self._poll_interval = poll_interval
        self._request_timeout = request_timeout
        self._scheduler: Scheduler = scheduler if scheduler is not None else PollScheduler()
        self._state = TrackingState.IDLE
        self._identifier: str | None = None
        self._is_first_update = True
        self._generation = 0
        self._consecutive_failures = 0
        self._verify_task: asyncio.Task[None] | None = None
        self._fetch_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def tracked_identifier(self) -> str | None:
        return self._identifier

    @property
    def is_first_update(self) -> bool:
        return self._is_first_update

    @property
    def consecutive_failures(self) -> int:
        """Failed fetches since the last successful one."""
        return self._consecutive_failures

    @property
    def fetch_in_flight(self) -> bool:
        return self._fetch_task is not None and not self._fetch_task.done()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start_tracking(self, identifier: str) -> None:
        """Begin tracking *identifier*, replacing any current session.

        Returns immediately; the outcome arrives as listener events.
        Must be called from a running event loop.
        """
        user_id = require_identifier(identifier)
        loop = asyncio.get_running_loop()
        if self._state is not TrackingState.IDLE:
            self._reset()

        self._generation += 1
        self._identifier = user_id
        self._is_first_update = True
        self._state = TrackingState.VERIFYING
        _logger.debug("Verifying status of %s", user_id)
        self._verify_task = loop.create_task(
            self._verify(self._generation, user_id),
            name=f"pyloctrack-verify-{user_id}",
        )

    def stop_tracking(self) -> None:
        """Stop polling and forget the tracked identifier.

        Idempotent and safe to call from inside the listener.  No event for
        the stopped identifier is delivered afterwards, including results
        already in flight.
        """
        self._reset()

    def _reset(self) -> None:
        self._generation += 1
        self._scheduler.stop()
        for task in (self._verify_task, self._fetch_task):
            if task is not None and not task.done():
                task.cancel()
        self._verify_task = None
        self._fetch_task = None

        previous = self._identifier
        self._state = TrackingState.STOPPED
        if previous is not None:
            _logger.debug("Stopped tracking %s", previous)
        self._identifier = None
        self._is_first_update = True
        self._consecutive_failures = 0
        self._state = TrackingState.IDLE

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _emit(self, event: TrackingEvent) -> None:
        try:
            self._listener(event)
        except Exception:
            _logger.warning("Tracking listener failed on %s event", event.kind, exc_info=True)

    async def _verify(self, generation: int, identifier: str) -> None:
        try:
            status = await call_with_timeout(self._client.check_status(identifier), self._request_timeout)
        except Exception as exc:
            if not self._is_current(generation):
                _logger.debug("Dropping stale status failure for %s", identifier)
                return
            description = describe_error(exc, self._request_timeout)
            _logger.warning("Status check for %s failed: %s", identifier, description)
            self._verify_task = None
            self._identifier = None
            self._state = TrackingState.IDLE
            self._emit(TrackingError(description=description, identifier=identifier))
            return

        if not self._is_current(generation):
            _logger.debug("Dropping stale status for %s", identifier)
            return
        self._verify_task = None

        if not status.active:
            _logger.debug("%s is not sharing its location", identifier)
            self._identifier = None
            self._state = TrackingState.IDLE
            self._emit(RemoteUserInactive(identifier=identifier))
            return

        self._state = TrackingState.POLLING
        self._scheduler.start(self._poll_interval, self._on_tick)
        _logger.debug("Polling %s every %gs", identifier, self._poll_interval)

    def _on_tick(self) -> None:
        identifier = self._identifier
        if self._state is not TrackingState.POLLING or identifier is None:
            return
        if self.fetch_in_flight:
            _logger.debug("Fetch for %s still in flight, skipping tick", identifier)
            return
        self._fetch_task = asyncio.get_running_loop().create_task(
            self._poll(self._generation, identifier),
            name=f"pyloctrack-fetch-{identifier}",
        )

    async def _poll(self, generation: int, identifier: str) -> None:
        try:
            location = await call_with_timeout(self._client.fetch_location(identifier), self._request_timeout)
        except Exception as exc:
            if not self._is_current(generation):
                _logger.debug("Dropping stale fetch failure for %s", identifier)
                return
            self._consecutive_failures += 1
            description = describe_error(exc, self._request_timeout)
            _logger.warning(
                "Failed to get location of %s (%d in a row): %s",
                identifier,
                self._consecutive_failures,
                description,
            )
            self._emit(TrackingError(description=description, identifier=identifier))
            return

        if not self._is_current(generation):
            _logger.debug("Dropping stale location for %s", identifier)
            return
        self._consecutive_failures = 0
        self._emit(
            RemoteLocationUpdated(
                identifier=identifier,
                location=location,
                is_first_update=self._is_first_update,
            )
        )
        # The listener may have stopped or restarted the session.
        if self._is_current(generation):
            self._is_first_update = False
