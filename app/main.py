"""Streamlit UI for the direct-to-owner rental marketplace."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import sys

import requests
import streamlit as st
from dotenv import load_dotenv
from pydantic import ValidationError

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import BackendClient
from app.components.cards import format_price, render_property_card
from app.components.charts import render_price_histogram, render_status_donut
from app.components.filters import render_filters, render_sort
from app.components.tables import render_listings_table
from rentals.errors import AuthError, ListingStoreError, PermissionDeniedError, PropertyNotFoundError
from rentals.models.property import PropertyCreate, PropertyStatus, PropertyUpdate
from rentals.models.user import RegisterRequest
from rentals.services.listing_service import RequestSequencer

OWNER_ERRORS = (PropertyNotFoundError, PermissionDeniedError, ListingStoreError, requests.RequestException)

st.set_page_config(page_title="Direct Rentals", layout="wide", page_icon="🏠")

FOOTER_HTML = "<p class='disclaimer'>Listings are posted directly by owners. Contact owners by email; no agents, no fees.</p>"


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def load_styles() -> None:
    css_path = Path(__file__).resolve().parent / "assets" / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)


def navigate_to(property_id: str) -> None:
    st.query_params.clear()
    st.query_params["property_id"] = property_id


def navigate_home() -> None:
    st.query_params.clear()


def results_headline(count: int, filters: Dict) -> str:
    noun = (filters.get("type") or "").lower()
    if noun in ("", "all types"):
        noun = "property" if count == 1 else "properties"
    elif count != 1:
        noun = f"{noun}s"
    place = f" in {filters['city']}" if filters.get("city") else ""
    if count == 0:
        return f"No {noun} found{place}"
    return f"Found {count} {noun}{place}"


def render_search_page() -> None:
    st.title("Find your next home")
    backend = get_backend_client()

    raw_filters = render_filters(dict(st.query_params))
    sort = render_sort(st.session_state.get("sort", "newest"))
    st.session_state["sort"] = sort

    # The client is shared by every session; each session tracks its own searches.
    sequencer = st.session_state.setdefault("search_sequencer", RequestSequencer())
    result = backend.search(raw_filters, sort, sequencer)
    if result is None:
        result = st.session_state.get("last_search")
        if result is None:
            return
    else:
        st.session_state["last_search"] = result
    if not result.ok:
        st.error(f"Could not load listings right now. {result.error or ''}".strip())
        return

    st.subheader(results_headline(result.total, raw_filters))
    if not result.properties:
        st.info("Try widening your price range or clearing some filters.")
        st.markdown(FOOTER_HTML, unsafe_allow_html=True)
        return

    properties = [record.model_dump(mode="json", by_alias=True) for record in result.properties]
    with st.expander("Rent distribution", expanded=False):
        st.plotly_chart(render_price_histogram(properties), use_container_width=True)

    columns = st.columns(3)
    for idx, prop in enumerate(properties):
        with columns[idx % 3]:
            render_property_card(prop, on_click=lambda pid=prop["id"]: navigate_to(pid), key=prop["id"])

    st.markdown(FOOTER_HTML, unsafe_allow_html=True)


def render_detail_page(property_id: str) -> None:
    backend = get_backend_client()
    st.button("← Back to search", on_click=navigate_home)
    try:
        prop = backend.get_property(property_id)
    except ValueError:
        st.warning("This listing no longer exists.")
        return
    except (ListingStoreError, requests.RequestException) as exc:
        st.error(f"Could not load this listing right now. {exc}")
        return

    header_col, price_col = st.columns([3, 1])
    with header_col:
        st.markdown(f"## {prop.get('title')}")
        st.caption(prop.get("fullAddress") or prop.get("location"))
    with price_col:
        st.metric("Monthly rent", format_price(prop.get("price")))
        st.metric("Status", (prop.get("status") or "draft").title())

    images = prop.get("images") or []
    if images:
        st.image(images, width=320)

    facts = st.columns(4)
    facts[0].metric("Bedrooms", prop.get("bedrooms") or 0)
    facts[1].metric("Bathrooms", prop.get("bathrooms") or 0)
    facts[2].metric("Area (sqft)", prop.get("area") or "-")
    facts[3].metric("Year built", prop.get("yearBuilt") or "-")

    if prop.get("description"):
        st.markdown("### About this home")
        st.write(prop["description"])
    if prop.get("amenities"):
        st.markdown("### Amenities")
        st.write(", ".join(prop["amenities"]))
    if prop.get("available"):
        st.caption(f"Available from {prop['available']}")

    st.markdown("### Contact the owner")
    owner_email = prop.get("ownerEmail")
    st.write(prop.get("ownerName") or "Owner")
    if owner_email:
        st.markdown(f"[{owner_email}](mailto:{owner_email}?subject={prop.get('title')})")
    else:
        st.write("No email available")


def _listing_form(prefix: str, existing: Optional[Dict] = None) -> Optional[Dict]:
    existing = existing or {}
    with st.form(f"{prefix}-form"):
        title = st.text_input("Title", value=existing.get("title", ""))
        location = st.text_input("City / neighbourhood", value=existing.get("location", ""))
        full_address = st.text_input("Full address", value=existing.get("fullAddress", ""))
        prop_type = st.text_input("Type", value=existing.get("type", "Apartment"))
        price = st.number_input("Monthly rent (KES)", min_value=0, value=int(existing.get("price") or 0), step=1000)
        cols = st.columns(3)
        bedrooms = cols[0].number_input("Bedrooms", min_value=0, value=int(existing.get("bedrooms") or 0))
        bathrooms = cols[1].number_input("Bathrooms", min_value=0.0, value=float(existing.get("bathrooms") or 0), step=0.5)
        area = cols[2].number_input("Area (sqft)", min_value=0, value=int(existing.get("area") or 0))
        description = st.text_area("Description", value=existing.get("description", ""))
        draft = st.checkbox("Save as draft", value=existing.get("status") == PropertyStatus.DRAFT.value)
        submitted = st.form_submit_button("Save listing")
    if not submitted:
        return None
    return {
        "title": title,
        "location": location,
        "fullAddress": full_address,
        "type": prop_type,
        "price": price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "area": area,
        "description": description,
        "draft": draft,
    }


def render_dashboard_page(owner_id: str) -> None:
    backend = get_backend_client()
    st.button("← Back to search", on_click=navigate_home)
    st.title("My listings")

    try:
        data = backend.owner_listings(owner_id)
    except (ListingStoreError, requests.RequestException) as exc:
        st.error(f"Could not load your listings right now. {exc}")
        return
    summary = data.get("summary", {})
    stat_cols = st.columns(4)
    stat_cols[0].metric("Total", summary.get("total", 0))
    stat_cols[1].metric("Active", summary.get("active", 0), f"{summary.get('draft', 0)} drafts")
    stat_cols[2].metric("Rented", summary.get("rented", 0))
    with stat_cols[3]:
        st.plotly_chart(render_status_donut(summary), use_container_width=True)

    render_listings_table(data.get("items", []))

    with st.expander("Add a listing"):
        values = _listing_form("create")
        if values is not None:
            draft = values.pop("draft")
            try:
                backend.create_listing(owner_id, PropertyCreate(**values), draft=draft)
                st.success("Listing saved")
            except (ValueError, *OWNER_ERRORS) as exc:
                st.error(str(exc))

    for item in data.get("items", []):
        with st.expander(f"Edit: {item.get('title')}"):
            values = _listing_form(f"edit-{item['id']}", item)
            if values is not None:
                draft = values.pop("draft")
                if draft:
                    values["status"] = PropertyStatus.DRAFT.value
                elif item.get("status") == PropertyStatus.DRAFT.value:
                    values["status"] = PropertyStatus.ACTIVE.value
                try:
                    backend.update_listing(owner_id, item["id"], PropertyUpdate(**values))
                    st.success("Listing updated")
                except OWNER_ERRORS as exc:
                    st.error(str(exc))
            uploads = st.file_uploader(
                "Add photos", type=["jpg", "jpeg", "png", "webp"], accept_multiple_files=True, key=f"photos-{item['id']}"
            )
            if uploads and st.button("Upload photos", key=f"upload-{item['id']}"):
                try:
                    outcome = backend.upload_images(
                        owner_id, item["id"], [(f.name, f.getvalue(), f.type or "image/jpeg") for f in uploads]
                    )
                except OWNER_ERRORS as exc:
                    st.error(str(exc))
                else:
                    if outcome["failed"]:
                        st.warning(f"{outcome['failed']} photo(s) could not be uploaded")
                    st.success(f"{outcome['uploaded']} photo(s) added")
            if item.get("status") == PropertyStatus.ACTIVE.value and st.button("Mark as rented", key=f"rent-{item['id']}"):
                try:
                    backend.update_listing(owner_id, item["id"], PropertyUpdate(status=PropertyStatus.RENTED))
                except OWNER_ERRORS as exc:
                    st.error(str(exc))
                else:
                    st.rerun()
            if st.button("Delete listing", key=f"delete-{item['id']}"):
                try:
                    backend.delete_listing(owner_id, item["id"])
                except OWNER_ERRORS as exc:
                    st.error(str(exc))
                else:
                    st.rerun()


def render_account_panel() -> None:
    backend = get_backend_client()
    session = st.session_state.get("auth")
    st.sidebar.header("Account")
    if session:
        st.sidebar.write(f"Signed in as {session.get('displayName') or session.get('email')}")
        if st.sidebar.button("My listings"):
            st.query_params.clear()
            st.query_params["owner"] = session["userId"]
        if st.sidebar.button("Sign out"):
            st.session_state.pop("auth", None)
            navigate_home()
        return

    mode = st.sidebar.radio("Account action", ["Sign in", "Register"], horizontal=True, label_visibility="collapsed")
    with st.sidebar.form("auth-form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if mode == "Register":
            first_name = st.text_input("First name")
            last_name = st.text_input("Last name")
            user_type = st.selectbox("I am a", ["seeker", "owner"])
        submitted = st.form_submit_button(mode)
    if not submitted:
        return
    try:
        if mode == "Register":
            st.session_state["auth"] = backend.register(
                RegisterRequest(
                    email=email, password=password, first_name=first_name, last_name=last_name, user_type=user_type
                )
            )
        else:
            st.session_state["auth"] = backend.login(email, password)
        st.rerun()
    except (AuthError, ValidationError, requests.RequestException) as exc:
        st.sidebar.error(str(exc))


load_styles()
params = st.query_params
render_account_panel()
property_id = params.get("property_id")
owner_id = params.get("owner")

if property_id:
    render_detail_page(property_id)
elif owner_id:
    render_dashboard_page(owner_id)
else:
    render_search_page()
