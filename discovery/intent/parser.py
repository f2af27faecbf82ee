from __future__ import annotations

import logging
import re
from datetime import date

from ..vendors.taxonomy import CATEGORIES, OTHER
from .models import ParsedIntent

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Category keywords (ordered, first match wins)
# ---------------------------------------------------------------------------

_CATEGORY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("cake", "dessert"), "Cakes & Desserts"),
    (("finger food", "catering", "food"), "Catering & Food"),
    (("entertainment", "games", "activities"), "Entertainment"),
]


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(word) for word in keyword.split())
    return re.compile(rf"\b{body}s?\b", re.IGNORECASE)


_COMPILED_RULES: list[tuple[list[re.Pattern[str]], str]] = [
    ([_keyword_pattern(k) for k in keywords], category)
    for keywords, category in _CATEGORY_RULES
]

# ---------------------------------------------------------------------------
# Location / date patterns
# ---------------------------------------------------------------------------

_LOCATION_RE = re.compile(
    r"\bin\s+([A-Za-z][A-Za-z\s]*?)\s*"
    r"(?=[,.;:!?\d]|\b(?:on|for|with|next|this|at|by|around)\b|$)",
    re.IGNORECASE,
)

_NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b(?!/)")

_DATE_PHRASE_RE = re.compile(
    r"\b(\d{1,2}(?:st|nd|rd|th)?\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"
    r"|next\s+\w+)\b",
    re.IGNORECASE,
)


def guess_category(text: str, default_to_other: bool = False) -> str | None:
    for patterns, category in _COMPILED_RULES:
        if any(p.search(text) for p in patterns):
            return category

    lower = text.lower()
    for category in CATEGORIES:
        if category.lower() in lower:
            return category

    return OTHER if default_to_other else None


def guess_location(text: str) -> str | None:
    match = _LOCATION_RE.search(text)
    if not match:
        return None
    location = " ".join(match.group(1).split())
    return location or None


def guess_numeric_date(text: str, today: date | None = None) -> date | None:
    """Parse ``day/month[/year]`` (day first). Invalid dates yield None."""
    match = _NUMERIC_DATE_RE.search(text)
    if not match:
        return None

    day, month = int(match.group(1)), int(match.group(2))
    raw_year = match.group(3)
    if raw_year is None:
        year = (today or date.today()).year
    else:
        year = int(raw_year)
        if year < 100:
            year += 2000

    try:
        return date(year, month, day)
    except ValueError:
        logger.debug("Ignoring invalid date %r", match.group(0))
        return None


def guess_date_phrase(text: str) -> str | None:
    match = _DATE_PHRASE_RE.search(text)
    return match.group(0) if match else None


def parse_vibe(
    text: str | None,
    *,
    default_to_other: bool = False,
    today: date | None = None,
) -> ParsedIntent:
    """
    Turn a free-text vibe into category, location and date guesses.

    ``default_to_other`` selects the search-bar flow, where an unmatched
    category becomes ``Other``; the inline vibe filter leaves it unset.
    Never raises: unparseable text simply yields fewer guesses.
    """
    if not text or not text.strip():
        return ParsedIntent()

    numeric_date = guess_numeric_date(text, today)
    return ParsedIntent(
        category_guess=guess_category(text, default_to_other),
        location_guess=guess_location(text),
        date_guess=numeric_date,
        date_phrase=None if numeric_date else guess_date_phrase(text),
    )


def intent_to_query_params(intent: ParsedIntent) -> dict[str, str]:
    params: dict[str, str] = {}
    if intent.category_guess:
        params["category"] = intent.category_guess
    if intent.location_guess:
        params["location"] = intent.location_guess
    if intent.date_guess:
        params["date"] = intent.date_guess.isoformat()
    elif intent.date_phrase:
        params["date"] = intent.date_phrase
    return params
