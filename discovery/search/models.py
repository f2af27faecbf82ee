from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator

from ..vendors.models import Coordinates


class FilterState(BaseModel):
    query: str = ""
    category_filter: str | None = None
    location_substring: str = ""
    date_filter: date | None = None
    budget_ceiling: float | None = Field(default=None, ge=0.0)
    facet_selections: dict[str, set[str]] = Field(default_factory=dict)

    @field_validator("category_filter", mode="before")
    @classmethod
    def _blank_category_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("location_substring", mode="before")
    @classmethod
    def _strip_location(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class MediaItem(BaseModel):
    url: str
    kind: str


class VendorCard(BaseModel):
    id: str
    name: str
    category: str
    location: str
    price: float | str | None
    description: str
    coordinates: Coordinates | None
    media: list[MediaItem]


class CategoryGroup(BaseModel):
    category: str
    color: str
    vendors: list[VendorCard]


class SearchResponse(BaseModel):
    groups: list[CategoryGroup]
    total_vendors: int
    matching_vendors: int
    filters: FilterState
    query_params: list[tuple[str, str]]
    refresh_error: str | None = None


class MediaFailureRequest(BaseModel):
    vendor_id: str = Field(..., min_length=1)
    index: int = Field(..., ge=0)
