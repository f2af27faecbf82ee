from __future__ import annotations

import logging
from typing import Any, Iterable

from ..vendors.models import Vendor
from .config import DEFAULT_MAP_CONFIG, MapConfig

logger = logging.getLogger(__name__)


def _empty_collection() -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


def to_features(vendors: Iterable[Vendor]) -> dict[str, Any]:
    """GeoJSON points for vendors with usable (non-sentinel) coordinates."""
    features = []
    for v in vendors:
        if v.coordinates is None or v.coordinates.is_sentinel:
            continue
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [v.coordinates.longitude, v.coordinates.latitude],
            },
            "properties": {
                "id": v.id,
                "name": v.name,
                "price": v.price,
                "category": v.category,
            },
        })
    return {"type": "FeatureCollection", "features": features}


class MapLayer:
    """
    Server-side view of the rendered vendor layer.

    Marker updates are ignored until the base style has loaded and after
    the layer has been torn down.
    """

    def __init__(self, config: MapConfig = DEFAULT_MAP_CONFIG) -> None:
        self.config = config
        self.loaded = False
        self.removed = False
        self._features: dict[str, Any] = _empty_collection()

    @property
    def features(self) -> dict[str, Any]:
        return self._features

    @property
    def ready(self) -> bool:
        return self.loaded and not self.removed

    def set_features(self, vendors: Iterable[Vendor]) -> bool:
        if not self.ready:
            logger.debug("Map layer not ready (loaded=%s removed=%s), skipping update", self.loaded, self.removed)
            return False
        self._features = to_features(vendors)
        return True

    def on_load(self, vendors: Iterable[Vendor]) -> None:
        if self.removed:
            return
        self.loaded = True
        self.set_features(vendors)

    def remove(self) -> None:
        self.removed = True
        self._features = _empty_collection()


class MapView:
    """Holds at most one MapLayer for a mounted discovery view."""

    def __init__(self, config: MapConfig = DEFAULT_MAP_CONFIG) -> None:
        self.config = config
        self._layer: MapLayer | None = None

    @property
    def layer(self) -> MapLayer | None:
        return self._layer

    def mount(self) -> MapLayer:
        if self._layer is None or self._layer.removed:
            self._layer = MapLayer(self.config)
            logger.debug("Mounted new map layer")
        return self._layer

    def unmount(self) -> None:
        if self._layer is not None:
            self._layer.remove()
        self._layer = None
