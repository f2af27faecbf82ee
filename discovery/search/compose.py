from __future__ import annotations

from typing import Iterable

import pandas as pd

from ..vendors.models import Vendor
from ..vendors.taxonomy import OTHER, sub_category
from .models import FilterState


def _frame(vendors: list[Vendor]) -> pd.DataFrame:
    """Project the fields the filters look at into a DataFrame."""
    return pd.DataFrame({
        "category": [v.category for v in vendors],
        "group": [v.top_level_category for v in vendors],
        "location_lower": [v.location_text.lower() for v in vendors],
        "price_value": pd.Series([v.price_value for v in vendors], dtype="float64"),
        "unavailable": [v.unavailable_dates for v in vendors],
        "facets": [v.facets for v in vendors],
    })


def _has_required_facets(row: pd.Series, selections: dict[str, set[str]]) -> bool:
    """A facet missing from the vendor counts as False."""
    required = selections.get(row["group"]) or set()
    facets: dict[str, bool] = row["facets"]
    return all(facets.get(name) is True for name in required)


def compose(vendors: Iterable[Vendor], state: FilterState) -> dict[str, list[Vendor]]:
    """
    Group vendors by top-level category and apply every active filter.

    Groups keep encounter order and stay present even when all of their
    vendors are filtered out. Vendors in the ``Other`` bucket are never
    hidden by the category filter or the budget ceiling.
    """
    vendors = list(vendors)
    if not vendors:
        return {}

    df = _frame(vendors)
    in_other_bucket = df["group"] == OTHER
    mask = pd.Series(True, index=df.index)

    # --- Category ---
    if state.category_filter:
        wanted = state.category_filter
        category_mask = (
            (df["category"] == wanted)
            | (df["group"] == wanted)
            | df["category"].str.contains(OTHER, regex=False)
        )
        child = sub_category(wanted)
        if child:
            category_mask = category_mask | df["category"].str.contains(child, regex=False)
        mask = mask & category_mask

    # --- Date availability ---
    if state.date_filter is not None:
        wanted_date = state.date_filter
        blocked = df["unavailable"].apply(lambda dates: wanted_date in dates).astype(bool)
        mask = mask & ~blocked

    # --- Location ---
    if state.location_substring:
        needle = state.location_substring.lower()
        mask = mask & df["location_lower"].str.contains(needle, regex=False)

    # --- Budget ---
    if state.budget_ceiling is not None:
        prices = df["price_value"]
        mask = mask & (prices.isna() | (prices <= state.budget_ceiling) | in_other_bucket)

    # --- Facets ---
    if any(state.facet_selections.values()):
        facet_mask = df.apply(
            _has_required_facets, axis=1, selections=state.facet_selections
        ).astype(bool)
        mask = mask & facet_mask

    groups: dict[str, list[Vendor]] = {}
    for group in df["group"].unique():
        keep = df.index[(df["group"] == group) & mask]
        groups[str(group)] = [vendors[i] for i in keep]
    return groups


def count_vendors(groups: dict[str, list[Vendor]]) -> int:
    return sum(len(v) for v in groups.values())
