"""Location endpoints.

Endpoints:
  - GET  /api/users/{id}/location
  - POST /api/users/{id}/location
"""

from __future__ import annotations

import math
from typing import Any

from pyloctrack._api._common import parse_model, request_data, require_identifier, user_endpoint
from pyloctrack._transport import Transport
from pyloctrack.models.location import RemoteLocation


def _unwrap_location(data: Any) -> Any:
    # Some deployments nest the fix under "location".
    if isinstance(data, dict):
        nested = data.get("location")
        if isinstance(nested, dict):
            return nested
    return data


async def get_user_location(transport: Transport, identifier: str) -> RemoteLocation:
    user_id = require_identifier(identifier)
    endpoint = user_endpoint(user_id, "/location")
    data = await request_data(transport=transport, method="GET", endpoint=endpoint)
    return parse_model(RemoteLocation, _unwrap_location(data), endpoint=endpoint)


async def update_location(
    transport: Transport,
    identifier: str,
    latitude: float,
    longitude: float,
) -> RemoteLocation:
    """Publish a position for *identifier* and return the stored fix.

    When the acknowledgement carries no coordinates the submitted ones
    are used.
    """
    user_id = require_identifier(identifier)
    lat = float(latitude)
    lon = float(longitude)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError("latitude and longitude must be finite numbers")
    endpoint = user_endpoint(user_id, "/location")
    data = await request_data(
        transport=transport,
        method="POST",
        endpoint=endpoint,
        payload={"latitude": lat, "longitude": lon},
    )
    if not isinstance(data, dict):
        data = {}
    return parse_model(RemoteLocation, _unwrap_location(data), endpoint=endpoint, latitude=lat, longitude=lon)
