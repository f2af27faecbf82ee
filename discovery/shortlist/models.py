from __future__ import annotations

from pydantic import BaseModel, Field

from ..vendors.models import Vendor


class ShortlistCard(BaseModel):
    id: str
    name: str
    category: str
    image: str | None = None
    media: list[str] = Field(default_factory=list)

    @classmethod
    def from_vendor(cls, vendor: Vendor) -> ShortlistCard:
        return cls(
            id=vendor.id,
            name=vendor.name,
            category=vendor.top_level_category,
            image=vendor.media[0] if vendor.media else None,
            media=list(vendor.media),
        )


class ShortlistGroup(BaseModel):
    category: str
    vendors: list[ShortlistCard]


class ShortlistView(BaseModel):
    groups: list[ShortlistGroup]
    count: int


class BookingHandoff(BaseModel):
    vendor_ids: list[str]
    cards: list[ShortlistCard]


class ToggleResponse(BaseModel):
    vendor_id: str
    selected: bool
    count: int
