from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from ..vendors.models import SENTINEL_COORDINATES, Coordinates, Vendor
from ..vendors.store import VendorStore, get_store
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig
from .mapbox_client import geocode_address

logger = logging.getLogger(__name__)

Geocoder = Callable[[str, GeocodingConfig], Awaitable[Coordinates | None]]


class GeocodeCache:
    """
    Lazily resolves vendor coordinates, at most once per vendor id.

    Successful lookups are written back to the vendor store. Failures,
    empty results and timeouts fall back to the 0,0 sentinel, which is
    memoized but never persisted.
    """

    def __init__(
        self,
        store: VendorStore,
        geocoder: Geocoder = geocode_address,
        config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self._config = config
        self._resolved: dict[str, Coordinates] = {}
        self._inflight: dict[str, asyncio.Future[Coordinates]] = {}
        self._hits = 0
        self._misses = 0
        self._failures = 0

    async def ensure_coordinates(self, vendor: Vendor) -> Coordinates:
        if vendor.coordinates is not None:
            return vendor.coordinates

        cached = self._resolved.get(vendor.id)
        if cached is not None:
            self._hits += 1
            return cached

        pending = self._inflight.get(vendor.id)
        if pending is not None:
            self._hits += 1
            return await asyncio.shield(pending)

        self._misses += 1
        task = asyncio.ensure_future(self._resolve(vendor))
        self._inflight[vendor.id] = task
        task.add_done_callback(lambda _: self._inflight.pop(vendor.id, None))
        return await asyncio.shield(task)

    async def ensure_all(self, vendors: Iterable[Vendor]) -> list[Vendor]:
        """Return copies of ``vendors`` that all carry coordinates."""
        vendors = list(vendors)
        coords = await asyncio.gather(*(self.ensure_coordinates(v) for v in vendors))
        return [
            v if v.coordinates is not None else v.with_coordinates(c)
            for v, c in zip(vendors, coords)
        ]

    async def _resolve(self, vendor: Vendor) -> Coordinates:
        coords: Coordinates | None = None
        try:
            coords = await asyncio.wait_for(
                self._geocoder(vendor.location_text, self._config),
                timeout=self._config.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Geocoding timed out after %.1fs for vendor %s (%r)",
                self._config.timeout, vendor.id, vendor.location_text,
            )
        except Exception:
            logger.warning(
                "Geocoding failed for vendor %s (%r), using fallback",
                vendor.id, vendor.location_text, exc_info=True,
            )

        if coords is None:
            self._failures += 1
            self._resolved[vendor.id] = SENTINEL_COORDINATES
            return SENTINEL_COORDINATES

        self._resolved[vendor.id] = coords
        try:
            await self._store.update_coordinates(vendor.id, coords)
        except Exception:
            logger.warning("Could not persist coordinates for vendor %s", vendor.id, exc_info=True)
        return coords

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._resolved),
            "hits": self._hits,
            "misses": self._misses,
            "failures": self._failures,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._resolved.clear()
        self._hits = 0
        self._misses = 0
        self._failures = 0


_cache: GeocodeCache | None = None


def get_geocode_cache() -> GeocodeCache:
    """Return the process-wide geocode cache bound to the shared vendor store."""
    global _cache
    if _cache is None:
        _cache = GeocodeCache(get_store())
    return _cache
