"""User endpoints.

Endpoints:
  - POST /api/users (register)
  - GET  /api/users/{id} (verify)
  - GET  /api/users/{id}/status
  - PUT  /api/users/{id}/status
"""

from __future__ import annotations

import logging

from pyloctrack._api._common import parse_model, request_data, require_identifier, user_endpoint
from pyloctrack._constants import USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH
from pyloctrack._transport import Transport
from pyloctrack.models.user import RemoteStatus, UserIdentity

_logger = logging.getLogger(__name__)


def _validate_username(username: str) -> str:
    value = username.strip()
    if not value:
        raise ValueError("username must not be empty")
    if len(value) < USERNAME_MIN_LENGTH:
        raise ValueError(f"username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(value) > USERNAME_MAX_LENGTH:
        raise ValueError(f"username must be at most {USERNAME_MAX_LENGTH} characters")
    return value


async def create_user(transport: Transport, username: str) -> UserIdentity:
    """Register *username* and return the identity the service assigned."""
    name = _validate_username(username)
    endpoint = "/api/users"
    data = await request_data(transport=transport, method="POST", endpoint=endpoint, payload={"username": name})
    identity = parse_model(UserIdentity, data, endpoint=endpoint, username=name)
    _logger.debug("Registered user %s as %s", name, identity.identifier)
    return identity


async def verify_user(transport: Transport, identifier: str) -> UserIdentity:
    """Confirm that *identifier* exists."""
    user_id = require_identifier(identifier)
    endpoint = user_endpoint(user_id)
    data = await request_data(transport=transport, method="GET", endpoint=endpoint)
    return parse_model(UserIdentity, data, endpoint=endpoint)


async def get_user_status(transport: Transport, identifier: str) -> RemoteStatus:
    user_id = require_identifier(identifier)
    endpoint = user_endpoint(user_id, "/status")
    data = await request_data(transport=transport, method="GET", endpoint=endpoint)
    return parse_model(RemoteStatus, data, endpoint=endpoint, identifier=user_id)


async def update_user_status(transport: Transport, identifier: str, active: bool) -> RemoteStatus:
    """Set whether *identifier* is sharing its location.

    The service echoes the stored status; when it omits ``active`` the
    requested value is assumed.
    """
    user_id = require_identifier(identifier)
    endpoint = user_endpoint(user_id, "/status")
    data = await request_data(
        transport=transport,
        method="PUT",
        endpoint=endpoint,
        payload={"isActive": bool(active)},
    )
    return parse_model(RemoteStatus, data, endpoint=endpoint, identifier=user_id, active=bool(active))
