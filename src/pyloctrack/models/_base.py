"""Base model for location service responses.

Every response model inherits from :class:`TrackerBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase wire keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips placeholder
  values (``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings the service uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


def utcnow() -> datetime:
    return datetime.now(UTC)


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


class TrackerBaseModel(BaseModel):
    """Base for location service response models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * placeholder values (``""``, ``"--"``, NaN) → dropped so
      the field default is used instead
    * Stashes the original payload in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original service payload."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = TrackerBaseModel._clean_dict(values)
        # Keep an explicit raw= when constructing with kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
