"""
Geocoding layer.

Responsibilities:
- Manage Mapbox geocoding configuration and credentials.
- Resolve free-text vendor locations to coordinates.
- Cache results per vendor and write successful lookups back to the store.
- Graceful fallback to a sentinel coordinate on failure or timeout.
"""
