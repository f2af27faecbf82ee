from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from discovery.app import app
from discovery.geocoding.cache import GeocodeCache
from discovery.geocoding.mapbox_client import GeocodingError
from discovery.session import clear_sessions, get_checkout
from discovery.vendors.config import VendorStoreConfig
from discovery.vendors.media import PLACEHOLDER_URL
from discovery.vendors.models import Coordinates
from discovery.vendors.store import get_store
from discovery.viewport.synchronizer import REFRESH_ERROR

client = TestClient(app)

MANHATTAN_BOX = {"south": 40.75, "north": 40.80, "west": -74.0, "east": -73.95}


@pytest.fixture(autouse=True)
def fresh_session():
    """Every test starts a new discovery session with geocoding stubbed out."""
    clear_sessions()
    cache = GeocodeCache(get_store(), AsyncMock(return_value=None))
    with patch("discovery.session.get_geocode_cache", return_value=cache):
        yield cache
    clear_sessions()


def _ids(body):
    return {g["category"]: [v["id"] for v in g["vendors"]] for g in body["groups"]}


# ── Public endpoints ─────────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    names = [c["name"] for c in body["categories"]]
    assert names[0] == "Cakes & Desserts"
    assert len(names) == 9
    assert body["fallback_category"] == "Other"
    assert body["categories"][0]["color"].startswith("#")


class TestGeocodeEndpoint:
    def test_requires_address(self):
        assert client.get("/geocode").status_code == 400
        assert client.get("/geocode", params={"address": "  "}).status_code == 400

    @patch("discovery.app.geocode_address", new_callable=AsyncMock)
    def test_returns_coordinates(self, mock_geocode):
        mock_geocode.return_value = Coordinates(longitude=-73.79, latitude=40.72)
        resp = client.get("/geocode", params={"address": "Queens, NY"})
        assert resp.json() == {"longitude": -73.79, "latitude": 40.72}

    @patch("discovery.app.geocode_address", new_callable=AsyncMock, return_value=None)
    def test_empty_result_is_origin(self, mock_geocode):
        resp = client.get("/geocode", params={"address": "Atlantis"})
        assert resp.json() == {"longitude": 0.0, "latitude": 0.0}

    @patch("discovery.app.geocode_address", new_callable=AsyncMock, side_effect=GeocodingError("boom"))
    def test_failure(self, mock_geocode):
        resp = client.get("/geocode", params={"address": "Queens, NY"})
        assert resp.status_code == 500


# ── Search ───────────────────────────────────────────────────────────────


class TestSearch:
    def test_unfiltered(self):
        body = client.get("/search").json()
        assert body["total_vendors"] == 9
        assert body["matching_vendors"] == 9
        assert list(_ids(body))[:2] == ["Cakes & Desserts", "Entertainment"]
        assert body["refresh_error"] is None

    def test_category_and_budget(self):
        resp = client.get("/search", params={"category": "Cakes & Desserts", "budget": "200"})
        body = resp.json()
        ids = _ids(body)
        assert ids["Cakes & Desserts"] == ["1", "2"]
        assert ids["Other"] == ["8"]
        assert ids["Entertainment"] == []
        assert body["matching_vendors"] == 3
        assert body["query_params"] == [["category", "Cakes & Desserts"], ["budget", "200"]]

    def test_vibe_sets_location(self):
        body = client.get("/search", params={"q": "cake party in Brooklyn"}).json()
        assert body["filters"]["location_substring"] == "Brooklyn"
        assert body["filters"]["category_filter"] is None
        assert sorted(v for ids in _ids(body).values() for v in ids) == ["1", "7"]

    def test_date_excludes_unavailable(self):
        body = client.get("/search", params={"date": "2025-03-10"}).json()
        flat = [v for ids in _ids(body).values() for v in ids]
        assert "1" not in flat and "3" not in flat
        assert body["matching_vendors"] == 7

    def test_facet(self):
        body = client.get("/search", params={"facet": "Cakes & Desserts:delivery"}).json()
        assert _ids(body)["Cakes & Desserts"] == ["1"]

    def test_groups_carry_color(self):
        body = client.get("/search").json()
        colors = {g["category"]: g["color"] for g in body["groups"]}
        assert colors["Cakes & Desserts"] == "#FFF9C4"

    def test_ungeocodable_vendor_still_listed(self):
        body = client.get("/search", params={"category": "Transport"}).json()
        card = next(g for g in body["groups"] if g["category"] == "Transport")["vendors"][0]
        assert card["id"] == "9"
        assert card["coordinates"] == {"longitude": 0.0, "latitude": 0.0}


class TestVibeSearch:
    def test_builds_search_url(self):
        resp = client.post("/search/vibe", json={"text": "finger food in Queens next saturday"})
        body = resp.json()
        assert body["query_params"] == {
            "category": "Catering & Food",
            "location": "Queens",
            "date": "next saturday",
        }
        assert body["url"].startswith("/search?category=Catering+%26+Food")

    def test_unmatched_defaults_to_other(self):
        body = client.post("/search/vibe", json={"text": "something fun"}).json()
        assert body["intent"]["category_guess"] == "Other"
        assert body["url"] == "/search?category=Other"

    def test_empty_text(self):
        body = client.post("/search/vibe", json={"text": ""}).json()
        assert body["url"] == "/search"

    def test_rejects_long_text(self):
        assert client.post("/search/vibe", json={"text": "x" * 1001}).status_code == 422


class TestVendorDetail:
    def test_media_kinds(self):
        body = client.get("/vendors/3").json()
        assert [m["kind"] for m in body["media"]] == ["image", "video"]

    def test_unknown_vendor(self):
        assert client.get("/vendors/999").status_code == 404

    def test_failed_media_uses_placeholder(self):
        resp = client.post("/media/failures", json={"vendor_id": "1", "index": 0})
        assert resp.json() == {"status": "recorded", "failures": 1}
        media = client.get("/vendors/1").json()["media"]
        assert media[0]["url"] == PLACEHOLDER_URL
        assert media[1]["url"] != PLACEHOLDER_URL

    def test_rejects_negative_media_index(self):
        assert client.post("/media/failures", json={"vendor_id": "1", "index": -1}).status_code == 422


class TestSpotlight:
    @patch("discovery.app.DEFAULT_VENDOR_STORE_CONFIG", VendorStoreConfig(spotlight_vendor_id="5"))
    def test_configured(self):
        body = client.get("/spotlight").json()
        assert body["name"] == "Balloon Bliss Co."

    @patch("discovery.app.DEFAULT_VENDOR_STORE_CONFIG", VendorStoreConfig(spotlight_vendor_id=""))
    def test_not_configured(self):
        assert client.get("/spotlight").status_code == 404


# ── Map / viewport ───────────────────────────────────────────────────────


class TestViewport:
    def test_move_refetches_within_bounds(self):
        resp = client.post("/viewport", json=MANHATTAN_BOX)
        assert resp.json()["committed"] is True
        assert resp.json()["vendor_count"] == 2

        body = client.get("/search").json()
        assert body["total_vendors"] == 2
        assert sorted(v for ids in _ids(body).values() for v in ids) == ["4", "5"]

    def test_invalid_box(self):
        bad = dict(MANHATTAN_BOX, south=41.0)
        assert client.post("/viewport", json=bad).status_code == 422

    def test_refresh_failure_keeps_vendors(self):
        with patch.object(type(get_store()), "fetch_within", side_effect=RuntimeError("down")):
            result = client.post("/viewport", json=MANHATTAN_BOX).json()
        assert result["error"] == REFRESH_ERROR
        body = client.get("/search").json()
        assert body["total_vendors"] == 9
        assert body["refresh_error"] == REFRESH_ERROR


class TestMap:
    def test_features_empty_before_load(self):
        assert client.get("/map/features").json()["features"] == []

    def test_load_pushes_located_vendors(self):
        body = client.post("/map/load").json()
        assert body["loaded"] is True
        assert body["viewport"]["south"] == 40.49
        # Vendor 9 only has the fallback coordinate
        assert body["features"] == 8
        ids = [f["properties"]["id"] for f in client.get("/map/features").json()["features"]]
        assert "9" not in ids

    def test_viewport_move_updates_loaded_map(self):
        client.post("/map/load")
        client.post("/viewport", json=MANHATTAN_BOX)
        features = client.get("/map/features").json()["features"]
        assert sorted(f["properties"]["id"] for f in features) == ["4", "5"]

    def test_unmount(self):
        client.post("/map/load")
        assert client.delete("/map").json() == {"status": "unmounted"}
        assert client.get("/map/features").json()["features"] == []


# ── Shortlist ────────────────────────────────────────────────────────────


class TestShortlist:
    def test_toggle_and_view(self):
        assert client.post("/shortlist/1/toggle").json() == {"vendor_id": "1", "selected": True, "count": 1}
        client.post("/shortlist/3/toggle")

        body = client.get("/shortlist").json()
        assert body["count"] == 2
        assert [g["category"] for g in body["groups"]] == ["Cakes & Desserts", "Entertainment"]

        assert client.post("/shortlist/1/toggle").json()["selected"] is False

    def test_unknown_vendor_ignored(self):
        body = client.post("/shortlist/999/toggle").json()
        assert body == {"vendor_id": "999", "selected": False, "count": 0}

    def test_remove_and_clear(self):
        for vendor_id in ("1", "3", "5"):
            client.post(f"/shortlist/{vendor_id}/toggle")
        assert client.delete("/shortlist/3").json()["count"] == 2
        assert client.delete("/shortlist").json() == {"groups": [], "count": 0}

    def test_checkout_does_not_clear(self):
        client.post("/shortlist/1/toggle")
        handoff = client.post("/shortlist/checkout").json()
        assert handoff["vendor_ids"] == ["1"]
        assert get_checkout().handoffs[-1].vendor_ids == ["1"]
        assert client.get("/shortlist").json()["count"] == 1

    def test_shortlist_is_per_session(self):
        client.post("/shortlist/1/toggle")
        other = TestClient(app)
        assert other.get("/shortlist").json()["count"] == 0


# ── Session ──────────────────────────────────────────────────────────────


def test_end_session_starts_fresh_discovery():
    client.post("/shortlist/1/toggle")
    assert client.delete("/session").json() == {"status": "ended"}
    assert client.get("/shortlist").json()["count"] == 0
