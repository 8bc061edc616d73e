"""Repository abstraction over the CSV demo data or a Supabase project."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

from ..models.property import PropertyRecord
from ..models.user import UserProfile
from ..utils.logging import get_logger, kv
from .csv_repo import CSVRepository
from .supabase_client import create_supabase_client
from .supabase_repo import SupabaseRepository

LOGGER = get_logger("db.repo")

DB_MODE = os.getenv("DB_MODE", "csv").lower()


class Repo:
    def __init__(self, mode: Optional[str] = None) -> None:
        self.mode = (mode or DB_MODE).lower()
        self._csv_repo: Optional[CSVRepository] = None
        self._sb_repo: Optional[SupabaseRepository] = None
        if self.mode == "supabase":
            client = create_supabase_client()
            if client is not None:
                self._sb_repo = SupabaseRepository(client)
                LOGGER.info("Repository running in Supabase mode")
            else:
                LOGGER.warning("Supabase unavailable; falling back to CSV")
                self.mode = "csv"
        if self.mode != "supabase":
            self.mode = "csv"
            self._csv_repo = CSVRepository()
            LOGGER.info("Repository running in CSV mode")

    @property
    def store(self):
        if self._sb_repo is not None:
            return self._sb_repo
        return self._ensure_csv()

    # ------------------------------------------------------------------
    # Listings
    def fetch_all(self) -> List[PropertyRecord]:
        return self.store.fetch_all()

    def fetch_by_owner(self, owner_id: str) -> List[PropertyRecord]:
        return self.store.fetch_by_owner(owner_id)

    def get_property(self, property_id: str) -> Optional[PropertyRecord]:
        return self.store.get_property(property_id)

    def add_property(self, data: Dict[str, Any]) -> PropertyRecord:
        record = self.store.add_property(data)
        LOGGER.info(kv("property_added", id=record.id, owner=record.owner_id, status=record.status.value))
        return record

    def update_property(self, property_id: str, changes: Dict[str, Any]) -> PropertyRecord:
        record = self.store.update_property(property_id, changes)
        LOGGER.info(kv("property_updated", id=property_id, fields=",".join(sorted(changes))))
        return record

    def delete_property(self, property_id: str) -> None:
        self.store.delete_property(property_id)
        LOGGER.info(kv("property_deleted", id=property_id))

    # ------------------------------------------------------------------
    # Users and identity
    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self.store.get_user(user_id)

    def save_user(self, profile: UserProfile) -> None:
        self.store.save_user(profile)

    def sign_up(self, email: str, password: str, display_name: str) -> str:
        return self.store.sign_up(email, password, display_name)

    def sign_in(self, email: str, password: str) -> Tuple[str, str]:
        return self.store.sign_in(email, password)

    def sign_out(self) -> None:
        self.store.sign_out()

    # ------------------------------------------------------------------
    # Storage
    def upload_image(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        return self.store.upload_image(path, data, content_type)

    # ------------------------------------------------------------------
    def _ensure_csv(self) -> CSVRepository:
        if self._csv_repo is None:
            self._csv_repo = CSVRepository()
        return self._csv_repo


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton


def reset_repository() -> None:
    global _repo_singleton
    _repo_singleton = None
