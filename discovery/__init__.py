"""
Vendor discovery service.

Responsibilities:
- Parse free-text party vibes into structured filters.
- Compose category, date, location, budget and facet filters over vendors.
- Keep the map viewport and the displayed vendor set in sync.
- Track the per-session vendor shortlist and hand it to checkout.
"""
