from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from ..vendors.models import Coordinates
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig

logger = logging.getLogger(__name__)


class GeocodingError(RuntimeError):
    """Raised when the geocoding service fails or returns an unusable payload."""


async def geocode_address(
    address: str,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
    client: httpx.AsyncClient | None = None,
) -> Coordinates | None:
    """
    Resolve a free-text address to coordinates with the Mapbox geocoder.

    Returns None for a blank address, a disabled config or an empty result.
    Raises GeocodingError on HTTP errors and malformed payloads.
    """
    if not address or not address.strip():
        return None
    if not config.enabled or not config.access_token:
        logger.debug("Geocoding disabled, skipping lookup for %r", address)
        return None

    url = f"{config.base_url}/{quote(address.strip(), safe='')}.json"
    params = {"access_token": config.access_token, "limit": config.limit}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.timeout) as own_client:
                response = await own_client.get(url, params=params)
        else:
            response = await client.get(url, params=params, timeout=config.timeout)
        response.raise_for_status()
        payload = response.json()
    except httpx.TimeoutException:
        raise
    except (httpx.HTTPError, ValueError) as exc:
        raise GeocodingError(f"geocoding request failed for {address!r}: {exc}") from exc

    features = payload.get("features") or []
    if not features:
        return None

    try:
        longitude, latitude = features[0]["center"][:2]
        return Coordinates(longitude=float(longitude), latitude=float(latitude))
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError(f"malformed geocoding payload for {address!r}") from exc
