"""Helpers shared by the tracking and sharing sessions."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def call_with_timeout(awaitable: Awaitable[T], timeout: float | None) -> T:
    """Await *awaitable*, bounded by *timeout* seconds when given."""
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


def describe_error(exc: BaseException, timeout: float | None = None) -> str:
    """Opaque, human-readable text for a failed remote call."""
    if isinstance(exc, TimeoutError) and not str(exc):
        return f"request timed out after {timeout:g}s" if timeout is not None else "request timed out"
    text = str(exc)
    return text or type(exc).__name__
