"""Shared helpers for location service endpoint modules.

This module centralizes the most repeated patterns:
- quoting identifiers into endpoint paths
- mapping envelope error codes to exceptions
- validating the ``data`` payload into a response model

It is internal to pyloctrack and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import AliasChoices, ValidationError

from pyloctrack._constants import USER_NOT_FOUND_CODES
from pyloctrack._transport import Transport
from pyloctrack.exceptions import TrackerApiError, TrackerUserNotFoundError
from pyloctrack.models._base import TrackerBaseModel

M = TypeVar("M", bound=TrackerBaseModel)


def require_identifier(identifier: str) -> str:
    """Return *identifier* stripped, raising ``ValueError`` when empty."""
    value = identifier.strip() if isinstance(identifier, str) else ""
    if not value:
        raise ValueError("identifier must be a non-empty string")
    return value


def user_endpoint(identifier: str, suffix: str = "") -> str:
    return f"/api/users/{quote(identifier, safe='')}{suffix}"


def _raise_for_code(*, endpoint: str, code: str, message: str) -> None:
    if code in USER_NOT_FOUND_CODES:
        raise TrackerUserNotFoundError(
            f"{endpoint} failed: user not found (code={code})",
            code=code,
            endpoint=endpoint,
        )
    raise TrackerApiError(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
    )


async def request_data(
    *,
    transport: Transport,
    method: str,
    endpoint: str,
    payload: Mapping[str, Any] | None = None,
) -> Any:
    """Send a request and return the envelope's ``data`` member.

    A missing ``code`` is treated as success so bare payloads from
    simple deployments still decode.
    """
    response = await transport.request_json(method, endpoint, payload)
    code = str(response.get("code", "0"))
    if code != "0":
        _raise_for_code(
            endpoint=endpoint,
            code=code,
            message=str(response.get("message", "")),
        )
    return response.get("data", {k: v for k, v in response.items() if k not in ("code", "message")})


def _has_field(model: type[M], field_name: str, values: Mapping[str, Any]) -> bool:
    """Return True when *values* already carries *field_name* under any alias."""
    info = model.model_fields[field_name]
    names = {field_name}
    if info.alias:
        names.add(info.alias)
    alias = info.validation_alias
    if isinstance(alias, AliasChoices):
        names.update(choice for choice in alias.choices if isinstance(choice, str))
    elif isinstance(alias, str):
        names.add(alias)
    return any(values.get(name) not in (None, "") for name in names)


def parse_model(model: type[M], data: Any, *, endpoint: str, **extra: Any) -> M:
    """Validate *data* into *model*, mapping failures to ``TrackerApiError``.

    *extra* fills fields the service may leave out (for example the
    identifier the request was made for).
    """
    if not isinstance(data, dict):
        raise TrackerApiError(
            f"{endpoint} returned {type(data).__name__}, expected an object",
            code="invalid_payload",
            endpoint=endpoint,
        )
    values = dict(data)
    for key, value in extra.items():
        if not _has_field(model, key, values):
            values[key] = value
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise TrackerApiError(
            f"{endpoint} returned an invalid {model.__name__}: {exc.error_count()} error(s)",
            code="invalid_payload",
            endpoint=endpoint,
        ) from exc
