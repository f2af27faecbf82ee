"""
Vendor collection.

Responsibilities:
- Define the Vendor, Coordinates and Viewport records.
- Load the seed vendor file into an in-memory store.
- Expose fetch-all, fetch-within-bounds and coordinate write-back.
"""
