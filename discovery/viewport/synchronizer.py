from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable

from pydantic import BaseModel

from ..geocoding.cache import GeocodeCache
from ..vendors.models import Vendor, Viewport
from ..vendors.store import VendorStore
from .map_layer import MapLayer, MapView

logger = logging.getLogger(__name__)

REFRESH_ERROR = "Couldn't refresh vendors; showing the previous results."


class SyncState(str, Enum):
    idle = "idle"
    fetching = "fetching"


class SyncResult(BaseModel):
    committed: bool
    stale: bool = False
    error: str | None = None
    vendor_count: int = 0


class ViewportSynchronizer:
    """
    Keeps the map viewport and the displayed vendor set consistent.

    Every load or viewport move bumps a generation counter. A fetch only
    commits when it is still the latest request once it completes, so
    out-of-order completions for superseded viewports are dropped.
    """

    def __init__(
        self,
        store: VendorStore,
        geocoder: GeocodeCache,
        map_view: MapView | None = None,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self.map_view = map_view or MapView()
        self.state = SyncState.idle
        self.current_viewport: Viewport | None = None
        self.vendors: list[Vendor] = []
        self._generation = 0
        self.has_committed = False

    # ── Map lifecycle ────────────────────────────────────────────────────

    def mount_map(self) -> MapLayer:
        layer = self.map_view.mount()
        if self.current_viewport is None:
            self.current_viewport = self.map_view.config.default_viewport()
        return layer

    def on_map_load(self) -> MapLayer:
        layer = self.mount_map()
        layer.on_load(self.vendors)
        return layer

    def unmount_map(self) -> None:
        self.map_view.unmount()

    # ── Fetching ─────────────────────────────────────────────────────────

    async def initial_load(self) -> SyncResult:
        return await self._run(self._fetch_all)

    async def move(self, viewport: Viewport) -> SyncResult:
        self.current_viewport = viewport
        return await self._run(lambda: self._fetch_within(viewport))

    async def _run(self, fetch: Callable[[], Awaitable[list[Vendor]]]) -> SyncResult:
        self._generation += 1
        generation = self._generation
        self.state = SyncState.fetching

        try:
            vendors = await fetch()
        except Exception:
            if generation != self._generation:
                return SyncResult(committed=False, stale=True, vendor_count=len(self.vendors))
            logger.warning(
                "Vendor fetch failed, keeping %d previously displayed vendors",
                len(self.vendors), exc_info=True,
            )
            self.state = SyncState.idle
            return SyncResult(committed=False, error=REFRESH_ERROR, vendor_count=len(self.vendors))

        if generation != self._generation:
            logger.debug("Dropping stale vendor result (generation %d < %d)", generation, self._generation)
            return SyncResult(committed=False, stale=True, vendor_count=len(self.vendors))

        self._commit(vendors)
        return SyncResult(committed=True, vendor_count=len(vendors))

    def _commit(self, vendors: list[Vendor]) -> None:
        self.vendors = vendors
        self.has_committed = True
        layer = self.map_view.layer
        if layer is not None:
            layer.set_features(vendors)
        self.state = SyncState.idle

    async def _fetch_all(self) -> list[Vendor]:
        vendors = await self._store.fetch_all()
        return await self._geocoder.ensure_all(vendors)

    async def _fetch_within(self, viewport: Viewport) -> list[Vendor]:
        inside = await self._store.fetch_within(viewport)
        seen = {v.id for v in inside}
        missing = [v for v in await self._store.fetch_all() if v.coordinates is None and v.id not in seen]
        located = await self._geocoder.ensure_all(missing)
        return inside + [
            v for v in located if v.coordinates is not None and viewport.contains(v.coordinates)
        ]
