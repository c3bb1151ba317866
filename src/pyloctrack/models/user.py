"""User identity and status models."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from pyloctrack.models._base import TrackerBaseModel

_ID_ALIASES = AliasChoices("identifier", "id", "userId", "user_id")


class UserIdentity(TrackerBaseModel):
    """Confirmed identity returned by verification or registration."""

    identifier: str = Field(validation_alias=_ID_ALIASES)
    username: str | None = Field(default=None, validation_alias=AliasChoices("username", "userName", "name"))

    @field_validator("identifier", mode="before")
    @classmethod
    def _normalize_identifier(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value.strip() if isinstance(value, str) else value


class RemoteStatus(UserIdentity):
    """Whether a user is currently sharing their location.

    Parameters
    ----------
    identifier : str
        The user the status belongs to.
    active : bool
        ``True`` when the user is sharing and may be polled.
    username : str or None
        Display name when the service includes it.
    """

    active: bool = Field(default=False, validation_alias=AliasChoices("active", "isActive", "is_active"))
