"""
Vibe intent parsing.

Turns a free-text party description into a partial filter:
category guess, location substring and date guess.
Keyword and pattern matching only; the parser never raises.
"""
