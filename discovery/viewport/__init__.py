"""
Map viewport synchronization.

Responsibilities:
- Re-query vendors inside the bounds of every pan/zoom.
- Commit only the result of the most recent request.
- Push vendor point features to the map once it has loaded.
"""
