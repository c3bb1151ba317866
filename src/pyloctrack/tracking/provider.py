"""Boundary to the platform's local position provider."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from pyloctrack.models._base import utcnow


class LocalSample(BaseModel):
    """One position fix of the local device."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    recorded_at: datetime = Field(default_factory=utcnow)


class LocalPositionProvider(Protocol):
    """Structural interface of a local position source.

    The provider owns its accuracy and interval settings.  While started
    it reports each new fix to
    :meth:`~pyloctrack.tracking.sharing.LocalSharingSession.on_local_sample`.
    """

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...

    @property
    def last_sample(self) -> LocalSample | None:
        ...
