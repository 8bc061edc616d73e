"""Tabular components for the owner dashboard."""

from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st

from .cards import format_price


def listings_frame(listings: List[dict]) -> pd.DataFrame:
    if not listings:
        return pd.DataFrame(columns=["Title", "Location", "Rent", "Status", "Listed"])
    df = pd.DataFrame(listings)
    df["Rent"] = df["price"].apply(format_price)
    df["Listed"] = pd.to_datetime(df.get("createdAt"), errors="coerce", utc=True).dt.strftime("%Y-%m-%d")
    df["Listed"] = df["Listed"].fillna("—")
    df = df.rename(columns={"title": "Title", "location": "Location", "status": "Status"})
    return df[["Title", "Location", "Rent", "Status", "Listed"]]


def render_listings_table(listings: List[dict]) -> None:
    if not listings:
        st.info("You have not listed any properties yet.")
        return
    st.dataframe(listings_frame(listings), hide_index=True, width="stretch")
