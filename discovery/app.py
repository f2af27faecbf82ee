from __future__ import annotations

import logging
import os
from typing import Any
from urllib.parse import urlencode

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .dependencies import SESSION_KEY, require_discovery_session
from .geocoding.cache import get_geocode_cache
from .geocoding.mapbox_client import GeocodingError, geocode_address
from .intent.models import VibeRequest, VibeResponse
from .intent.parser import intent_to_query_params, parse_vibe
from .search.compose import compose, count_vendors
from .search.models import (
    CategoryGroup,
    MediaFailureRequest,
    MediaItem,
    SearchResponse,
    VendorCard,
)
from .search.params import filter_state_from_params, filter_state_to_params
from .session import DiscoverySession, end_session, get_checkout
from .shortlist.models import (
    BookingHandoff,
    ShortlistGroup,
    ShortlistView,
    ToggleResponse,
)
from .vendors.config import DEFAULT_VENDOR_STORE_CONFIG
from .vendors.media import media_kind
from .vendors.models import SENTINEL_COORDINATES, Vendor, Viewport
from .vendors.store import get_store
from .vendors.taxonomy import CATEGORIES, CATEGORY_COLORS, OTHER, category_color
from .viewport.synchronizer import SyncResult

logger = logging.getLogger(__name__)

app = FastAPI(title="Vendor Discovery API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "partaibook-discovery-secret-change-in-production"),
)


def _card(vendor: Vendor, session: DiscoverySession) -> VendorCard:
    return VendorCard(
        id=vendor.id,
        name=vendor.name,
        category=vendor.category,
        location=vendor.location_text,
        price=vendor.price,
        description=vendor.description,
        coordinates=vendor.coordinates,
        media=[
            MediaItem(url=url, kind=media_kind(url))
            for url in session.media_failures.resolve(vendor)
        ],
    )


def _shortlist_view(session: DiscoverySession) -> ShortlistView:
    groups = [
        ShortlistGroup(category=category, vendors=cards)
        for category, cards in session.shortlist.view().items()
    ]
    return ShortlistView(groups=groups, count=len(session.shortlist))


async def _find_vendor(vendor_id: str, session: DiscoverySession) -> Vendor:
    vendor = next((v for v in session.vendors if v.id == vendor_id), None)
    if vendor is None:
        vendor = await get_store().get(vendor_id)
    if vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return vendor


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "categories": [
            {"name": name, "subcategories": subs, "color": CATEGORY_COLORS[name]}
            for name, subs in CATEGORIES.items()
        ],
        "fallback_category": OTHER,
    }


@app.get("/geocode")
async def geocode(address: str | None = Query(default=None)) -> dict[str, float]:
    if not address or not address.strip():
        raise HTTPException(status_code=400, detail="Address is required")
    try:
        coords = await geocode_address(address)
    except (GeocodingError, httpx.TimeoutException):
        logger.warning("Geocoding error for %r", address, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to geocode address")
    coords = coords or SENTINEL_COORDINATES
    return {"longitude": coords.longitude, "latitude": coords.latitude}


@app.get("/geocode/stats")
def geocode_stats() -> dict:
    return get_geocode_cache().stats()


# ── Search ───────────────────────────────────────────────────────────────


@app.get("/search", response_model=SearchResponse)
async def search(
    request: Request,
    session: DiscoverySession = Depends(require_discovery_session),
) -> SearchResponse:
    state = filter_state_from_params(request.query_params.multi_items())
    session.filters = state

    groups = compose(session.vendors, state)
    return SearchResponse(
        groups=[
            CategoryGroup(
                category=category,
                color=category_color(category),
                vendors=[_card(v, session) for v in vendors],
            )
            for category, vendors in groups.items()
        ],
        total_vendors=len(session.vendors),
        matching_vendors=count_vendors(groups),
        filters=state,
        query_params=filter_state_to_params(state),
        refresh_error=session.refresh_error,
    )


@app.post("/search/vibe", response_model=VibeResponse)
def search_vibe(body: VibeRequest) -> VibeResponse:
    intent = parse_vibe(body.text, default_to_other=True)
    params = intent_to_query_params(intent)
    url = f"/search?{urlencode(params)}" if params else "/search"
    return VibeResponse(intent=intent, query_params=params, url=url)


@app.get("/vendors/{vendor_id}", response_model=VendorCard)
async def vendor_detail(
    vendor_id: str,
    session: DiscoverySession = Depends(require_discovery_session),
) -> VendorCard:
    return _card(await _find_vendor(vendor_id, session), session)


@app.get("/spotlight", response_model=VendorCard)
async def spotlight(session: DiscoverySession = Depends(require_discovery_session)) -> VendorCard:
    spotlight_id = DEFAULT_VENDOR_STORE_CONFIG.spotlight_vendor_id
    if not spotlight_id:
        raise HTTPException(status_code=404, detail="No spotlight vendor configured")
    return _card(await _find_vendor(spotlight_id, session), session)


@app.post("/media/failures")
def media_failure(
    body: MediaFailureRequest,
    session: DiscoverySession = Depends(require_discovery_session),
) -> dict:
    session.media_failures.record(body.vendor_id, body.index)
    return {"status": "recorded", "failures": len(session.media_failures)}


# ── Map / viewport ───────────────────────────────────────────────────────


@app.post("/viewport", response_model=SyncResult)
async def move_viewport(
    body: Viewport,
    session: DiscoverySession = Depends(require_discovery_session),
) -> SyncResult:
    result = await session.synchronizer.move(body)
    if result.committed:
        session.refresh_error = None
    elif result.error:
        session.refresh_error = result.error
    return result


@app.post("/map/load")
def map_load(session: DiscoverySession = Depends(require_discovery_session)) -> dict[str, Any]:
    layer = session.synchronizer.on_map_load()
    viewport = session.synchronizer.current_viewport
    return {
        "loaded": layer.ready,
        "style": layer.config.style,
        "viewport": viewport.model_dump() if viewport else None,
        "features": len(layer.features["features"]),
    }


@app.get("/map/features")
def map_features(session: DiscoverySession = Depends(require_discovery_session)) -> dict[str, Any]:
    layer = session.synchronizer.map_view.layer
    if layer is None:
        return {"type": "FeatureCollection", "features": []}
    return layer.features


@app.delete("/map")
def map_unmount(session: DiscoverySession = Depends(require_discovery_session)) -> dict[str, str]:
    session.synchronizer.unmount_map()
    return {"status": "unmounted"}


# ── Shortlist ────────────────────────────────────────────────────────────


@app.get("/shortlist", response_model=ShortlistView)
def shortlist(session: DiscoverySession = Depends(require_discovery_session)) -> ShortlistView:
    return _shortlist_view(session)


@app.post("/shortlist/{vendor_id}/toggle", response_model=ToggleResponse)
def shortlist_toggle(
    vendor_id: str,
    session: DiscoverySession = Depends(require_discovery_session),
) -> ToggleResponse:
    selected = session.shortlist.toggle(vendor_id, session.vendors)
    return ToggleResponse(vendor_id=vendor_id, selected=selected, count=len(session.shortlist))


@app.delete("/shortlist/{vendor_id}", response_model=ShortlistView)
def shortlist_remove(
    vendor_id: str,
    session: DiscoverySession = Depends(require_discovery_session),
) -> ShortlistView:
    session.shortlist.remove(vendor_id)
    return _shortlist_view(session)


@app.delete("/shortlist", response_model=ShortlistView)
def shortlist_clear(session: DiscoverySession = Depends(require_discovery_session)) -> ShortlistView:
    session.shortlist.clear()
    return _shortlist_view(session)


@app.post("/shortlist/checkout", response_model=BookingHandoff)
def shortlist_checkout(session: DiscoverySession = Depends(require_discovery_session)) -> BookingHandoff:
    return session.shortlist.continue_to_booking(get_checkout())


# ── Session ──────────────────────────────────────────────────────────────


@app.delete("/session")
def end_discovery_session(request: Request) -> dict[str, str]:
    session_id = request.session.pop(SESSION_KEY, None)
    if session_id:
        end_session(session_id)
    return {"status": "ended"}
