"""pyloctrack - Async Python client and tracking engine for a remote location service."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyloctrack")
except PackageNotFoundError:
    __version__ = "0+local"

from pyloctrack.client import TrackerClient
from pyloctrack.config import TrackerConfig
from pyloctrack.exceptions import (
    TrackerApiError,
    TrackerConfigError,
    TrackerError,
    TrackerTransportError,
    TrackerUserNotFoundError,
)
from pyloctrack.models import RemoteLocation, RemoteStatus, UserIdentity
from pyloctrack.tracking import (
    EventKind,
    LocalPositionProvider,
    LocalSample,
    LocalSharingSession,
    LocationShared,
    PollScheduler,
    RemoteLocationUpdated,
    RemoteUserInactive,
    SharingChanged,
    SharingError,
    SharingOperation,
    TrackingError,
    TrackingSession,
    TrackingState,
)

__all__ = [
    "__version__",
    "EventKind",
    "LocalPositionProvider",
    "LocalSample",
    "LocalSharingSession",
    "LocationShared",
    "PollScheduler",
    "RemoteLocation",
    "RemoteLocationUpdated",
    "RemoteStatus",
    "RemoteUserInactive",
    "SharingChanged",
    "SharingError",
    "SharingOperation",
    "TrackerApiError",
    "TrackerClient",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerError",
    "TrackerTransportError",
    "TrackerUserNotFoundError",
    "TrackingError",
    "TrackingSession",
    "TrackingState",
    "UserIdentity",
]
