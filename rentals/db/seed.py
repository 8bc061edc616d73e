"""Seed the Supabase ``properties`` and ``users`` tables from the CSV demo data."""

from __future__ import annotations

from dotenv import load_dotenv

from ..utils.logging import get_logger, kv
from .csv_repo import CSVRepository
from .mappers import property_to_row, user_to_row
from .supabase_client import create_supabase_client
from .supabase_repo import TBL_PROP, TBL_USERS

LOGGER = get_logger("db.seed")


def seed() -> None:
    load_dotenv()
    client = create_supabase_client()
    if client is None:
        raise RuntimeError("SUPABASE_URL and a Supabase key must be configured to seed")

    source = CSVRepository()
    LOGGER.info("Loading users")
    users = [user_to_row(profile) for profile in source.list_users()]
    if users:
        client.table(TBL_USERS).upsert(users).execute()

    LOGGER.info("Loading properties")
    rows = [property_to_row(record) for record in source.fetch_all()]
    if rows:
        client.table(TBL_PROP).upsert(rows).execute()
    LOGGER.info(kv("seed_complete", users=len(users), properties=len(rows)))


if __name__ == "__main__":  # pragma: no cover
    seed()
