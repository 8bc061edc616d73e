"""Streamlit components for listing cards."""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, Optional

import streamlit as st


def format_price(value: Optional[float]) -> str:
    return f"KES {float(value or 0):,.0f}"


def status_badge(status: str | None) -> str:
    label = (status or "draft").lower()
    return f"status-badge status-{label}"


def render_property_card(
    property_data: Dict,
    on_click: Callable[[], None],
    key: Optional[str] = None,
) -> None:
    key = key or property_data.get("id")
    images = property_data.get("images") or []
    status = property_data.get("status") or "draft"
    image_html = f"<img src='{escape(images[0])}' class='property-card__image'/>" if images else ""

    card_html = f"""
        <div class="property-card">
            {image_html}
            <div class="property-card__header">
                <span class="{status_badge(status)}">{escape(status)}</span>
                <span class="property-card__type">{escape(property_data.get('type') or 'Property')}</span>
            </div>
            <h3>{escape(property_data.get('title') or 'Untitled listing')}</h3>
            <p class="property-card__meta">{escape(property_data.get('location') or '')}</p>
            <p class="property-card__meta">{property_data.get('bedrooms') or 0} bd · {property_data.get('bathrooms') or 0} ba · {property_data.get('area') or '-'} sqft</p>
            <p class="property-card__value">{format_price(property_data.get('price'))}/month</p>
        </div>
    """
    with st.container():
        st.markdown(card_html, unsafe_allow_html=True)
        st.button("View details", key=f"open-{key}", on_click=on_click)
