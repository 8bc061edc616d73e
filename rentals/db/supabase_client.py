"""Helper to create a Supabase client when credentials are provided."""

from __future__ import annotations

import os

from ..utils.logging import get_logger, kv

LOGGER = get_logger("db.supabase")

DEFAULT_BUCKET = "property-images"


def supabase_bucket() -> str:
    return os.getenv("SUPABASE_BUCKET", DEFAULT_BUCKET)


def create_supabase_client():  # pragma: no cover - needs live credentials
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        LOGGER.info("Supabase credentials not configured; skipping client creation")
        return None
    try:
        from supabase import create_client

        return create_client(url, key)
    except Exception as exc:
        LOGGER.error(kv("supabase_client_failed", error=exc))
        return None
