from __future__ import annotations

from dataclasses import dataclass

from ..vendors.models import Viewport


@dataclass(frozen=True)
class MapConfig:
    # Roughly the five boroughs around the Queens, NY map centre
    center_longitude: float = -73.935242
    center_latitude: float = 40.730610
    zoom: int = 10
    default_south: float = 40.49
    default_north: float = 40.92
    default_west: float = -74.26
    default_east: float = -73.70
    style: str = "mapbox://styles/mapbox/streets-v11"

    def default_viewport(self) -> Viewport:
        return Viewport(
            south=self.default_south,
            north=self.default_north,
            west=self.default_west,
            east=self.default_east,
        )


DEFAULT_MAP_CONFIG = MapConfig()
