"""Client configuration for pyloctrack."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyloctrack._constants import BASE_URL, DEFAULT_HTTP_TIMEOUT, DEFAULT_POLL_INTERVAL
from pyloctrack.exceptions import TrackerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise TrackerConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Location service base URL, without trailing slash.
    api_token : str or None
        Bearer token sent as ``Authorization`` header when set.
    poll_interval : float
        Seconds between remote location polls while tracking.
    request_timeout : float or None
        Upper bound in seconds for a single remote call made by the
        tracking and sharing sessions.  ``None`` waits indefinitely.
    http_timeout : float
        aiohttp total timeout for one HTTP request.
    verify_ssl : bool
        Verify TLS certificates.
    """

    base_url: str = BASE_URL
    api_token: str | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise TrackerConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise TrackerConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.http_timeout <= 0:
            raise TrackerConfigError(f"http_timeout must be positive, got {self.http_timeout}")
        # Normalise so endpoint joins never produce a double slash.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads ``LOCTRACK_BASE_URL``, ``LOCTRACK_API_TOKEN`` and the numeric
        ``LOCTRACK_*`` tuning variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("LOCTRACK_BASE_URL")
        if base_url:
            config_kwargs["base_url"] = base_url

        token = env.get("LOCTRACK_API_TOKEN")
        if token:
            config_kwargs["api_token"] = token

        _ENV_FLOAT_MAP = {
            "LOCTRACK_POLL_INTERVAL": "poll_interval",
            "LOCTRACK_REQUEST_TIMEOUT": "request_timeout",
            "LOCTRACK_HTTP_TIMEOUT": "http_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "verify_ssl" not in overrides:
            config_kwargs["verify_ssl"] = _env_bool(env.get("LOCTRACK_VERIFY_SSL"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
