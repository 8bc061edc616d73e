"""Plotly chart helpers for Streamlit UI."""

from __future__ import annotations

from typing import Dict, List

import plotly.graph_objects as go


def render_price_histogram(properties: List[Dict], title: str = "Rent distribution") -> go.Figure:
    prices = [p.get("price") or 0 for p in properties]
    fig = go.Figure(go.Histogram(x=prices, nbinsx=min(20, max(1, len(prices))), marker_color="#1565C0"))
    fig.update_layout(
        title=title,
        margin=dict(l=10, r=10, t=40, b=30),
        height=280,
        xaxis_title="Monthly rent (KES)",
        yaxis_title="Listings",
        template="plotly_white",
    )
    return fig


def render_status_donut(summary: Dict) -> go.Figure:
    labels = ["Active", "Rented", "Draft"]
    values = [summary.get("active", 0), summary.get("rented", 0), summary.get("draft", 0)]
    fig = go.Figure(
        go.Pie(labels=labels, values=values, hole=0.55, marker=dict(colors=["#22c55e", "#3b82f6", "#9ca3af"]))
    )
    fig.update_layout(margin=dict(l=0, r=0, t=10, b=10), height=240, showlegend=True)
    return fig
