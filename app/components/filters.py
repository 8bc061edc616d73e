"""Sidebar widgets that collect the raw search filter map."""

from __future__ import annotations

from typing import Any, Dict

import streamlit as st

PROPERTY_TYPES = ["All Types", "Apartment", "House", "Condo", "Townhouse", "Studio", "Loft"]
BEDROOM_OPTIONS = ["Any", "1", "2", "3", "4", "5"]
BATHROOM_OPTIONS = ["Any", "1", "2", "3", "4"]
PRICE_CEILING = 500_000

SORT_OPTIONS = {
    "newest": "Newest First",
    "price-low": "Price: Low to High",
    "price-high": "Price: High to Low",
    "bedrooms": "Most Bedrooms",
    "area": "Largest Area",
}


def _index(options: list[str], value: Any) -> int:
    value = str(value) if value is not None else None
    return options.index(value) if value in options else 0


def render_filters(initial: Dict[str, Any]) -> Dict[str, Any]:
    """Render the filter form and return the raw values.

    Untouched widgets come back as empty strings or sentinels ("Any"); the
    backend normalizer treats those as absent.
    """

    st.sidebar.header("Filters")
    city = st.sidebar.text_input("City or neighbourhood", value=str(initial.get("city") or ""))
    prop_type = st.sidebar.selectbox(
        "Property type", PROPERTY_TYPES, index=_index(PROPERTY_TYPES, initial.get("type"))
    )
    low, high = st.sidebar.slider(
        "Monthly rent (KES)",
        min_value=0,
        max_value=PRICE_CEILING,
        value=(int(initial.get("minPrice") or 0), int(initial.get("maxPrice") or PRICE_CEILING)),
        step=5_000,
    )
    bedrooms = st.sidebar.selectbox(
        "Bedrooms", BEDROOM_OPTIONS, index=_index(BEDROOM_OPTIONS, initial.get("bedrooms"))
    )
    bathrooms = st.sidebar.selectbox(
        "Bathrooms", BATHROOM_OPTIONS, index=_index(BATHROOM_OPTIONS, initial.get("bathrooms"))
    )
    available_only = st.sidebar.checkbox("Available only", value=bool(initial.get("availableOnly")))

    return {
        "city": city,
        "type": prop_type,
        # the slider ends mean "no bound"
        "minPrice": low if low > 0 else None,
        "maxPrice": high if high < PRICE_CEILING else None,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "availableOnly": available_only or None,
    }


def render_sort(current: str) -> str:
    keys = list(SORT_OPTIONS)
    return st.selectbox(
        "Sort by",
        keys,
        index=keys.index(current) if current in keys else 0,
        format_func=lambda key: SORT_OPTIONS[key],
    )
