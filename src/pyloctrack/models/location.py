"""Remote location model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyloctrack.models._base import TrackerBaseModel, safe_float, utcnow


class RemoteLocation(TrackerBaseModel):
    """A position reported by the location service.

    Immutable once received; the tracking engine hands it to the listener
    and keeps no copy.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, -90 to 90.
    longitude : float
        Longitude in degrees, -180 to 180.
    received_at : datetime
        UTC time the client decoded the response.
    raw : dict
        Full service payload.
    """

    latitude: float = Field(
        ge=-90.0,
        le=90.0,
        validation_alias=AliasChoices("latitude", "lat"),
    )
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )
    received_at: datetime = Field(default_factory=utcnow, validation_alias=AliasChoices("receivedAt", "received_at"))

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        # Leave unparseable input for pydantic to reject with a clear error.
        return value if parsed is None else parsed

    @property
    def coordinates(self) -> tuple[float, float]:
        """``(latitude, longitude)`` pair."""
        return (self.latitude, self.longitude)
