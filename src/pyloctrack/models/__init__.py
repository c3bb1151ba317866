"""Data models for location service responses."""

from pyloctrack.models._base import TrackerBaseModel
from pyloctrack.models.location import RemoteLocation
from pyloctrack.models.user import RemoteStatus, UserIdentity

__all__ = [
    "RemoteLocation",
    "RemoteStatus",
    "TrackerBaseModel",
    "UserIdentity",
]
