"""
Filter composition.

Responsibilities:
- Hold the per-session FilterState (category, location, date, budget, facets).
- Read and write FilterState as bookmarkable query parameters.
- Group vendors by category and apply every filter as a pure function.
"""
