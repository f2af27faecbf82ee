from __future__ import annotations

import logging
from typing import Any, Iterable

import pandas as pd

from .config import DEFAULT_VENDOR_STORE_CONFIG, VendorStoreConfig
from .models import Coordinates, Vendor, Viewport

logger = logging.getLogger(__name__)

CORE_COLUMNS: list[str] = [
    "id",
    "name",
    "category",
    "location",
    "price",
    "description",
    "unavailable_dates",
    "images",
    "longitude",
    "latitude",
]

_TRUE_VALUES = {"true", "yes", "1", "y"}
_FALSE_VALUES = {"false", "no", "0", "n"}


class VendorStoreError(RuntimeError):
    """Raised when the vendor collection cannot be read or written."""


class VendorStore:
    """Interface of the vendor collection collaborator."""

    async def fetch_all(self) -> list[Vendor]:
        raise NotImplementedError

    async def fetch_within(self, viewport: Viewport) -> list[Vendor]:
        raise NotImplementedError

    async def update_coordinates(self, vendor_id: str, coordinates: Coordinates) -> None:
        raise NotImplementedError

    async def get(self, vendor_id: str) -> Vendor | None:
        raise NotImplementedError


class InMemoryVendorStore(VendorStore):
    """Vendor collection kept in process memory, keyed by vendor id."""

    def __init__(self, vendors: Iterable[Vendor] = ()) -> None:
        self._vendors: dict[str, Vendor] = {v.id: v for v in vendors}

    async def fetch_all(self) -> list[Vendor]:
        return list(self._vendors.values())

    async def fetch_within(self, viewport: Viewport) -> list[Vendor]:
        return [
            v
            for v in self._vendors.values()
            if v.coordinates is not None and viewport.contains(v.coordinates)
        ]

    async def update_coordinates(self, vendor_id: str, coordinates: Coordinates) -> None:
        vendor = self._vendors.get(vendor_id)
        if vendor is None:
            raise VendorStoreError(f"unknown vendor id {vendor_id!r}")
        self._vendors[vendor_id] = vendor.with_coordinates(coordinates)
        logger.debug("Stored coordinates for vendor %s", vendor_id)

    async def get(self, vendor_id: str) -> Vendor | None:
        return self._vendors.get(vendor_id)


def _split_list(value: Any, separator: str) -> list[str]:
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(separator) if part.strip()]


def _to_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    lower = str(value).strip().lower()
    if lower in _TRUE_VALUES:
        return True
    if lower in _FALSE_VALUES:
        return False
    return None


def _row_to_vendor(row: pd.Series, facet_columns: list[str], separator: str) -> Vendor:
    lng = row.get("longitude")
    lat = row.get("latitude")
    coordinates = None
    if pd.notna(lng) and pd.notna(lat):
        coordinates = Coordinates(longitude=float(lng), latitude=float(lat))

    price = row.get("price")
    if pd.isna(price):
        price = None
    elif pd.notna(pd.to_numeric(price, errors="coerce")):
        price = float(price)

    facets: dict[str, bool] = {}
    for col in facet_columns:
        flag = _to_bool(row.get(col))
        if flag is not None:
            facets[col] = flag

    return Vendor(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        category=row.get("category") if pd.notna(row.get("category")) else None,
        location=str(row["location"]) if pd.notna(row.get("location")) else "",
        coordinates=coordinates,
        price=price,
        description=str(row.get("description")) if pd.notna(row.get("description")) else "",
        unavailable_dates=_split_list(row.get("unavailable_dates"), separator),
        media=_split_list(row.get("images"), separator),
        facets=facets,
    )


def load_vendors(config: VendorStoreConfig = DEFAULT_VENDOR_STORE_CONFIG) -> list[Vendor]:
    """
    Read the seed vendor file into Vendor records.

    Columns outside CORE_COLUMNS are treated as boolean facets.
    """
    df = pd.read_csv(config.seed_path, dtype={"id": str, "price": str})
    if "id" not in df.columns:
        raise VendorStoreError(f"{config.seed_path} has no 'id' column")

    facet_columns = [c for c in df.columns if c not in CORE_COLUMNS]
    vendors = [_row_to_vendor(row, facet_columns, config.list_separator) for _, row in df.iterrows()]
    logger.info("Loaded %d vendors from %s", len(vendors), config.seed_path)
    return vendors


_store: InMemoryVendorStore | None = None


def get_store() -> InMemoryVendorStore:
    """Return the process-wide vendor store, seeding it on first call."""
    global _store
    if _store is None:
        _store = InMemoryVendorStore(load_vendors())
    return _store
