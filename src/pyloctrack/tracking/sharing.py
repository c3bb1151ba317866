"""Local location sharing toggle.

The toggle is optimistic: :meth:`LocalSharingSession.set_sharing` flips
the visible value at once and asks the service to confirm.  Every request
takes a new token and only the response to the latest token is applied,
so rapid on/off/on toggling settles on the last choice.  A rejected
request rolls the toggle back to the last confirmed value.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import datetime
from typing import Any, Protocol

from pyloctrack._api._common import require_identifier
from pyloctrack.models.location import RemoteLocation
from pyloctrack.models.user import RemoteStatus
from pyloctrack.tracking._common import call_with_timeout, describe_error
from pyloctrack.tracking.events import (
    LocationShared,
    SharingChanged,
    SharingError,
    SharingEvent,
    SharingOperation,
)
from pyloctrack.tracking.provider import LocalPositionProvider, LocalSample

_logger = logging.getLogger(__name__)

SharingListener = Callable[[SharingEvent], None]


class LocalSharingClient(Protocol):
    """The part of :class:`~pyloctrack.client.TrackerClient` sharing uses."""

    async def check_status(self, identifier: str) -> RemoteStatus:
        ...

    async def update_status(self, identifier: str, active: bool) -> RemoteStatus:
        ...

    async def push_location(self, identifier: str, latitude: float, longitude: float) -> RemoteLocation:
        ...


class LocalSharingSession:
    """Publish the local user's position while sharing is switched on.

    Parameters
    ----------
    client : LocalSharingClient
        Service used for status updates and position pushes.
    identifier : str
        The local user's identifier.
    provider : LocalPositionProvider
        Started once the service confirms sharing is on, stopped once it
        confirms sharing is off.
    listener : callable or None
        Receives :data:`SharingEvent` objects.
    request_timeout : float or None
        Bound for each remote call; ``None`` waits indefinitely.
    """

    def __init__(
        self,
        client: LocalSharingClient,
        identifier: str,
        provider: LocalPositionProvider,
        listener: SharingListener | None = None,
        *,
        request_timeout: float | None = None,
    ) -> None:
        self._client = client
        self._identifier = require_identifier(identifier)
        self._provider = provider
        self._listener = listener
        self._request_timeout = request_timeout
        self._sharing = False
        self._confirmed = False
        self._token = 0
        self._pending_token: int | None = None
        self._confirm_epoch = 0
        self._push_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._last_sample: LocalSample | None = None
        self._last_shared_at: datetime | None = None
        self._closed = False

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def sharing(self) -> bool:
        """Toggle value as shown to the user (optimistic)."""
        return self._sharing

    @property
    def confirmed_sharing(self) -> bool:
        """Last value the service acknowledged."""
        return self._confirmed

    @property
    def pending(self) -> bool:
        """Whether a toggle or sync response is still awaited."""
        return self._pending_token is not None

    @property
    def last_sample(self) -> LocalSample | None:
        """Most recent local fix, from the session or the provider."""
        if self._last_sample is not None:
            return self._last_sample
        return self._provider.last_sample

    @property
    def last_shared_at(self) -> datetime | None:
        return self._last_shared_at

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def set_sharing(self, enabled: bool) -> None:
        """Request sharing on or off.  Returns immediately.

        A rejected request reverts the toggle to :attr:`confirmed_sharing`.
        That value only reflects responses that were applied: when an
        earlier request succeeded but was superseded before it answered,
        the service may hold a different value until the next :meth:`sync`.
        """
        self._require_open()
        enabled = bool(enabled)
        if enabled == self._sharing:
            return
        self._sharing = enabled
        token = self._next_token()
        _logger.debug("Requesting sharing=%s for %s (token %d)", enabled, self._identifier, token)
        self._spawn(self._apply_toggle(token, enabled), "toggle")

    def sync(self) -> None:
        """Align the toggle with the status stored by the service."""
        self._require_open()
        token = self._next_token()
        self._spawn(self._apply_remote_status(token), "sync")

    def on_local_sample(self, sample: LocalSample) -> None:
        """Receive a new local fix and publish it when sharing is on.

        A fix arriving while the previous push is unanswered is recorded
        but not pushed.
        """
        self._last_sample = sample
        if self._closed or not (self._sharing and self._confirmed):
            return
        if self._push_task is not None and not self._push_task.done():
            _logger.debug("Push for %s still in flight, skipping sample", self._identifier)
            return
        self._push_task = self._spawn(self._push(sample, self._confirm_epoch), "push")

    def close(self) -> None:
        """Cancel outstanding calls; no events are delivered afterwards.

        The provider is left in its current state.
        """
        if self._closed:
            return
        self._closed = True
        self._next_token()
        self._pending_token = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._push_task = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("sharing session is closed")

    def _next_token(self) -> int:
        self._token += 1
        self._pending_token = self._token
        return self._token

    def _is_latest(self, token: int) -> bool:
        return not self._closed and token == self._token

    def _confirm(self, enabled: bool) -> None:
        if enabled != self._confirmed:
            self._confirm_epoch += 1
        self._confirmed = enabled

    def _push_is_current(self, epoch: int) -> bool:
        return not self._closed and epoch == self._confirm_epoch and self._sharing and self._confirmed

    def _spawn(self, coro: Coroutine[Any, Any, None], label: str) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro, name=f"pyloctrack-{label}-{self._identifier}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _emit(self, event: SharingEvent) -> None:
        if self._listener is None:
            return
        try:
            self._listener(event)
        except Exception:
            _logger.warning("Sharing listener failed on %s event", event.kind, exc_info=True)

    async def _apply_toggle(self, token: int, enabled: bool) -> None:
        try:
            await call_with_timeout(self._client.update_status(self._identifier, enabled), self._request_timeout)
        except Exception as exc:
            if not self._is_latest(token):
                _logger.debug("Dropping stale toggle failure (token %d)", token)
                return
            self._pending_token = None
            self._sharing = self._confirmed
            description = describe_error(exc, self._request_timeout)
            _logger.warning("Failed to update sharing status for %s: %s", self._identifier, description)
            self._emit(SharingError(operation=SharingOperation.TOGGLE, description=description, requested=enabled))
            return

        if not self._is_latest(token):
            _logger.debug("Dropping stale toggle response (token %d)", token)
            return
        self._pending_token = None
        self._confirm(enabled)
        if enabled:
            self._provider.start()
        else:
            self._provider.stop()
        self._emit(SharingChanged(enabled=enabled))

    async def _apply_remote_status(self, token: int) -> None:
        try:
            status = await call_with_timeout(self._client.check_status(self._identifier), self._request_timeout)
        except Exception as exc:
            if not self._is_latest(token):
                _logger.debug("Dropping stale status sync failure (token %d)", token)
                return
            self._pending_token = None
            self._sharing = self._confirmed
            description = describe_error(exc, self._request_timeout)
            _logger.warning("Failed to get sharing status for %s: %s", self._identifier, description)
            self._emit(SharingError(operation=SharingOperation.SYNC, description=description))
            return

        if not self._is_latest(token):
            _logger.debug("Dropping stale status sync (token %d)", token)
            return
        self._pending_token = None
        was_confirmed = self._confirmed
        self._confirm(status.active)
        self._sharing = status.active
        if status.active:
            self._provider.start()
        elif was_confirmed:
            self._provider.stop()
        self._emit(SharingChanged(enabled=status.active))

    async def _push(self, sample: LocalSample, epoch: int) -> None:
        try:
            await call_with_timeout(
                self._client.push_location(self._identifier, sample.latitude, sample.longitude),
                self._request_timeout,
            )
        except Exception as exc:
            if not self._push_is_current(epoch):
                _logger.debug("Dropping push failure for %s, sharing changed", self._identifier)
                return
            description = describe_error(exc, self._request_timeout)
            _logger.warning("Failed to update location for %s: %s", self._identifier, description)
            self._emit(SharingError(operation=SharingOperation.PUSH, description=description))
            return

        if not self._push_is_current(epoch):
            _logger.debug("Dropping push ack for %s, sharing changed", self._identifier)
            return
        event = LocationShared(latitude=sample.latitude, longitude=sample.longitude)
        self._last_shared_at = event.shared_at
        self._emit(event)
