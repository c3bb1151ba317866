"""Fixed-interval poll timer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Scheduler(Protocol):
    """Structural interface of the timer driving a tracking session.

    `PollScheduler` is the production implementation; tests pass doubles
    that fire ticks by hand.
    """

    @property
    def is_running(self) -> bool:
        ...

    def start(self, interval: float, on_tick: TickCallback) -> None:
        ...

    def stop(self) -> None:
        ...


class PollScheduler:
    """Repeating timer backed by a single asyncio task.

    ``on_tick`` runs on the event loop every *interval* seconds, the first
    time one interval after :meth:`start`.  Ticks keep a fixed cadence
    whatever the callback does; there is no retry or backoff.
    """

    def __init__(self, *, name: str = "pyloctrack-poll") -> None:
        self._name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval: float, on_tick: TickCallback) -> None:
        """Start firing *on_tick*, replacing any timer already running.

        Must be called from a running event loop.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        loop = asyncio.get_running_loop()
        self.stop()
        self._task = loop.create_task(self._run(interval, on_tick), name=self._name)

    def stop(self) -> None:
        """Cancel pending and future ticks.  No-op when not running."""
        task = self._task
        self._task = None
        if task is not None and not task.done():
            # A cancelled task never resumes past its sleep, so no tick of
            # this run can fire after stop() returns.
            task.cancel()

    async def _run(self, interval: float, on_tick: TickCallback) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            try:
                on_tick()
            except Exception:
                _logger.warning("Poll tick callback failed", exc_info=True)
            now = loop.time()
            next_at += interval
            if next_at <= now:
                # Fell behind (blocked loop); skip missed ticks instead of bursting.
                next_at = now + interval
