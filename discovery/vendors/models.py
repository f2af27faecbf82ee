from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from .taxonomy import OTHER, normalize_category, top_level

_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_price(price: float | str | None) -> float | None:
    """Return the first numeric amount in a display price, if any."""
    if price is None:
        return None
    if isinstance(price, (int, float)):
        return float(price)
    match = _PRICE_RE.search(price)
    if not match:
        return None
    return float(match.group(0).replace(",", ""))


def _to_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Accepts "2025-03-10" as well as full ISO timestamps
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"unsupported date value: {value!r}")


class Coordinates(BaseModel):
    longitude: float = Field(..., ge=-180.0, le=180.0)
    latitude: float = Field(..., ge=-90.0, le=90.0)

    @property
    def is_sentinel(self) -> bool:
        return self.longitude == 0.0 and self.latitude == 0.0


SENTINEL_COORDINATES = Coordinates(longitude=0.0, latitude=0.0)


class Vendor(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    category: str = OTHER
    location_text: str = Field(
        default="", validation_alias=AliasChoices("location_text", "location")
    )
    coordinates: Coordinates | None = None
    price: float | str | None = None
    unavailable_dates: set[date] = Field(default_factory=set)
    media: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("media", "images")
    )
    facets: dict[str, bool] = Field(default_factory=dict)
    description: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: object) -> str:
        return normalize_category(value)

    @field_validator("unavailable_dates", mode="before")
    @classmethod
    def _parse_dates(cls, value: object) -> set[date]:
        if value is None:
            return set()
        if isinstance(value, (str, date)):
            value = [value]
        return {_to_date(v) for v in value}

    @property
    def top_level_category(self) -> str:
        return top_level(self.category)

    @property
    def price_value(self) -> float | None:
        return parse_price(self.price)

    def with_coordinates(self, coordinates: Coordinates) -> Vendor:
        return self.model_copy(update={"coordinates": coordinates})


class Viewport(BaseModel):
    """Geographic bounding box currently visible on the map."""

    south: float = Field(..., ge=-90.0, le=90.0)
    north: float = Field(..., ge=-90.0, le=90.0)
    west: float = Field(..., ge=-180.0, le=180.0)
    east: float = Field(..., ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _check_order(self) -> Viewport:
        if self.south > self.north:
            raise ValueError("south must not be greater than north")
        return self

    def contains(self, coordinates: Coordinates) -> bool:
        if not self.south <= coordinates.latitude <= self.north:
            return False
        if self.west <= self.east:
            return self.west <= coordinates.longitude <= self.east
        # Box crossing the antimeridian
        return coordinates.longitude >= self.west or coordinates.longitude <= self.east
