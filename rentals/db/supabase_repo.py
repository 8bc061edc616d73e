"""Listing store backed by Supabase tables, auth and storage."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..errors import AuthError, ListingStoreError, PropertyNotFoundError
from ..models.property import PropertyRecord
from ..models.user import UserProfile
from ..utils.logging import get_logger, kv
from .mappers import map_property_row, map_user_row, property_to_row, user_to_row
from .supabase_client import supabase_bucket

LOGGER = get_logger("db.supabase_repo")

TBL_PROP = "properties"
TBL_USERS = "users"


class SupabaseRepository:
    def __init__(self, client, bucket: Optional[str] = None) -> None:
        self.client = client
        self.bucket = bucket or supabase_bucket()

    def _execute(self, action: str, builder):
        try:
            return builder.execute()
        except Exception as exc:
            LOGGER.error(kv("supabase_request_failed", action=action, error=exc))
            raise ListingStoreError(f"{action} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Listings
    def fetch_all(self) -> List[PropertyRecord]:
        resp = self._execute("fetch_all", self.client.table(TBL_PROP).select("*"))
        return [map_property_row(row) for row in resp.data or []]

    def fetch_by_owner(self, owner_id: str) -> List[PropertyRecord]:
        resp = self._execute(
            "fetch_by_owner",
            self.client.table(TBL_PROP).select("*").eq("owner_id", owner_id),
        )
        records = [map_property_row(row) for row in resp.data or []]
        return sorted(records, key=lambda r: r.created_ts, reverse=True)

    def get_property(self, property_id: str) -> Optional[PropertyRecord]:
        resp = self._execute(
            "get_property",
            self.client.table(TBL_PROP).select("*").eq("id", property_id).limit(1),
        )
        rows = resp.data or []
        return map_property_row(rows[0]) if rows else None

    def add_property(self, data: Dict[str, Any]) -> PropertyRecord:
        now = datetime.now(timezone.utc)
        record = PropertyRecord.model_validate(
            {**data, "id": uuid.uuid4().hex, "created_at": now, "updated_at": now}
        )
        self._execute("add_property", self.client.table(TBL_PROP).insert(property_to_row(record)))
        return record

    def update_property(self, property_id: str, changes: Dict[str, Any]) -> PropertyRecord:
        current = self.get_property(property_id)
        if current is None:
            raise PropertyNotFoundError(property_id)
        record = PropertyRecord.model_validate(
            {**current.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
        )
        row = property_to_row(record)
        row.pop("id", None)
        row.pop("created_at", None)
        self._execute("update_property", self.client.table(TBL_PROP).update(row).eq("id", property_id))
        return record

    def delete_property(self, property_id: str) -> None:
        resp = self._execute("delete_property", self.client.table(TBL_PROP).delete().eq("id", property_id))
        if not resp.data:
            raise PropertyNotFoundError(property_id)

    # ------------------------------------------------------------------
    # Users
    def get_user(self, user_id: str) -> Optional[UserProfile]:
        resp = self._execute(
            "get_user",
            self.client.table(TBL_USERS).select("*").eq("id", user_id).limit(1),
        )
        rows = resp.data or []
        return map_user_row(rows[0]) if rows else None

    def save_user(self, profile: UserProfile) -> None:
        self._execute("save_user", self.client.table(TBL_USERS).upsert(user_to_row(profile)))

    # ------------------------------------------------------------------
    # Identity
    def sign_up(self, email: str, password: str, display_name: str) -> str:
        try:
            resp = self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"display_name": display_name}}}
            )
        except Exception as exc:
            raise AuthError(str(exc)) from exc
        if resp.user is None:
            raise AuthError("Registration did not return a user")
        return resp.user.id

    def sign_in(self, email: str, password: str) -> Tuple[str, str]:
        try:
            resp = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise AuthError(str(exc)) from exc
        if resp.user is None or resp.session is None:
            raise AuthError("Invalid email or password")
        return resp.user.id, resp.session.access_token

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as exc:
            raise AuthError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Storage
    def upload_image(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(path=path, file=data, file_options={"content-type": content_type})
        except Exception as exc:
            raise ListingStoreError(f"upload failed: {exc}") from exc
        return bucket.get_public_url(path)
