"""Translate between discovery query parameters and FilterState.

Parameters: ``q`` (vibe text, ``vibe`` is accepted too), ``date`` (ISO
date), ``category``, ``location``, ``budget`` and repeated
``facet=<Category>:<facet>``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from ..intent.parser import guess_numeric_date, parse_vibe
from .models import FilterState

logger = logging.getLogger(__name__)

FACET_SEPARATOR = ":"


def _parse_date(raw: str, today: date | None) -> date | None:
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        pass
    parsed = guess_numeric_date(raw, today)
    if parsed is None:
        logger.debug("Ignoring unparseable date parameter %r", raw)
    return parsed


def _parse_budget(raw: str) -> float | None:
    try:
        value = float(raw.strip().lstrip("$").replace(",", ""))
    except ValueError:
        logger.debug("Ignoring non-numeric budget parameter %r", raw)
        return None
    return value if value >= 0 else None


def _parse_facets(values: Iterable[str]) -> dict[str, set[str]]:
    selections: dict[str, set[str]] = {}
    for raw in values:
        category, sep, facet = raw.rpartition(FACET_SEPARATOR)
        if not sep or not category.strip() or not facet.strip():
            logger.debug("Ignoring malformed facet parameter %r", raw)
            continue
        selections.setdefault(category.strip(), set()).add(facet.strip())
    return selections


def filter_state_from_params(
    params: Iterable[tuple[str, str]],
    today: date | None = None,
) -> FilterState:
    """
    Build a FilterState from query parameters.

    Location and date missing from the parameters are taken from the vibe
    text; the category is only ever set explicitly.
    """
    single: dict[str, str] = {}
    facets: list[str] = []
    for key, value in params:
        if key == "facet":
            facets.append(value)
        else:
            single[key] = value

    query = (single.get("q") or single.get("vibe") or "").strip()
    intent = parse_vibe(query, today=today)

    location = single.get("location", "").strip() or (intent.location_guess or "")
    date_filter = _parse_date(single["date"], today) if single.get("date") else intent.date_guess
    budget = _parse_budget(single["budget"]) if single.get("budget") else None

    return FilterState(
        query=query,
        category_filter=single.get("category") or None,
        location_substring=location,
        date_filter=date_filter,
        budget_ceiling=budget,
        facet_selections=_parse_facets(facets),
    )


def _format_budget(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def filter_state_to_params(state: FilterState) -> list[tuple[str, str]]:
    """Canonical, bookmarkable parameters for ``state``."""
    params: list[tuple[str, str]] = []
    if state.query:
        params.append(("q", state.query))
    if state.date_filter:
        params.append(("date", state.date_filter.isoformat()))
    if state.category_filter:
        params.append(("category", state.category_filter))
    if state.location_substring:
        params.append(("location", state.location_substring))
    if state.budget_ceiling is not None:
        params.append(("budget", _format_budget(state.budget_ceiling)))
    for category in sorted(state.facet_selections):
        for facet in sorted(state.facet_selections[category]):
            params.append(("facet", f"{category}{FACET_SEPARATOR}{facet}"))
    return params
