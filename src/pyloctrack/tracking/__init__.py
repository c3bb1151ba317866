"""Tracking engine.

This package holds the stateful parts of the library: the remote
tracking session with its poll timer, and the local sharing toggle.
Both run on a single asyncio event loop and report through tagged
events.
"""

from pyloctrack.tracking.events import (
    EventKind,
    LocationShared,
    RemoteLocationUpdated,
    RemoteUserInactive,
    SharingChanged,
    SharingError,
    SharingEvent,
    SharingOperation,
    TrackingError,
    TrackingEvent,
    format_updated_label,
)
from pyloctrack.tracking.provider import LocalPositionProvider, LocalSample
from pyloctrack.tracking.scheduler import PollScheduler, Scheduler
from pyloctrack.tracking.session import RemoteTrackingClient, TrackingListener, TrackingSession, TrackingState
from pyloctrack.tracking.sharing import LocalSharingClient, LocalSharingSession, SharingListener

__all__ = [
    "EventKind",
    "LocalPositionProvider",
    "LocalSample",
    "LocalSharingClient",
    "LocalSharingSession",
    "LocationShared",
    "PollScheduler",
    "RemoteLocationUpdated",
    "RemoteTrackingClient",
    "RemoteUserInactive",
    "Scheduler",
    "SharingChanged",
    "SharingError",
    "SharingEvent",
    "SharingListener",
    "SharingOperation",
    "TrackingError",
    "TrackingEvent",
    "TrackingListener",
    "TrackingSession",
    "TrackingState",
    "format_updated_label",
]
