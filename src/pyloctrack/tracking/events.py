"""Tagged events delivered by the tracking and sharing sessions.

Listeners receive exactly one event object per call and dispatch on
``kind``.  Events are immutable and carry everything the presentation
layer needs; the sessions keep no reference to them afterwards.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pyloctrack.models._base import utcnow
from pyloctrack.models.location import RemoteLocation


class EventKind(StrEnum):
    UPDATED = "updated"
    INACTIVE = "inactive"
    TRACKING_ERROR = "tracking_error"
    SHARING_CHANGED = "sharing_changed"
    SHARING_ERROR = "sharing_error"
    LOCATION_SHARED = "location_shared"


class SharingOperation(StrEnum):
    TOGGLE = "toggle"
    SYNC = "sync"
    PUSH = "push"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(default_factory=utcnow)


class RemoteLocationUpdated(_Event):
    """A location was received for the tracked identifier.

    ``is_first_update`` is ``True`` only for the first delivery of a
    tracking session, so a map can recenter once and then just move the
    marker.
    """

    kind: Literal[EventKind.UPDATED] = EventKind.UPDATED
    identifier: str
    location: RemoteLocation
    is_first_update: bool


class RemoteUserInactive(_Event):
    """The requested identifier is not sharing its location; nothing is polled."""

    kind: Literal[EventKind.INACTIVE] = EventKind.INACTIVE
    identifier: str


class TrackingError(_Event):
    """A status check or location fetch failed.

    Not an exception: ``description`` is the opaque failure text.
    """

    kind: Literal[EventKind.TRACKING_ERROR] = EventKind.TRACKING_ERROR
    description: str
    identifier: str | None = None


TrackingEvent = Annotated[
    RemoteLocationUpdated | RemoteUserInactive | TrackingError,
    Field(discriminator="kind"),
]


class SharingChanged(_Event):
    kind: Literal[EventKind.SHARING_CHANGED] = EventKind.SHARING_CHANGED
    enabled: bool


class SharingError(_Event):
    """A sharing call failed.

    ``requested`` is the toggle value that was rejected for
    :attr:`SharingOperation.TOGGLE` failures and ``None`` otherwise.
    """

    kind: Literal[EventKind.SHARING_ERROR] = EventKind.SHARING_ERROR
    operation: SharingOperation
    description: str
    requested: bool | None = None


class LocationShared(_Event):
    """The service acknowledged a pushed local position."""

    kind: Literal[EventKind.LOCATION_SHARED] = EventKind.LOCATION_SHARED
    latitude: float
    longitude: float
    shared_at: datetime = Field(default_factory=utcnow)

    @property
    def label(self) -> str:
        return format_updated_label(self.shared_at)


SharingEvent = Annotated[
    SharingChanged | SharingError | LocationShared,
    Field(discriminator="kind"),
]


def format_updated_label(moment: datetime) -> str:
    """Render *moment* in local time as ``"Updated: HH:MM:SS"``."""
    return f"Updated: {moment.astimezone():%H:%M:%S}"
