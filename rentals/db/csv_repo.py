"""CSV-backed listing store used for local development and tests.

Listings and user profiles are loaded from the demo CSVs once and then held in
memory; writes are not persisted back to disk.
"""

from __future__ import annotations

import hashlib
import secrets
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ..errors import AuthError, PropertyNotFoundError
from ..models.property import PropertyRecord
from ..models.user import UserProfile
from ..utils.io import load_csv, save_upload
from ..utils.logging import get_logger, kv
from .mappers import map_property_row, map_user_row

LOGGER = get_logger("db.csv")

P_FILE = "properties.csv"
U_FILE = "users.csv"

_PBKDF2_ROUNDS = 120_000


def _records(name: str) -> List[Dict[str, Any]]:
    try:
        df = load_csv(name)
    except FileNotFoundError:
        LOGGER.warning(kv("csv_missing", name=name))
        return []
    df = df.astype(object).where(pd.notnull(df), None)
    return df.to_dict("records")


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)


class CSVRepository:
    def __init__(self, upload_root: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._upload_root = upload_root
        self._properties: Dict[str, PropertyRecord] = {}
        for row in _records(P_FILE):
            record = map_property_row(row)
            if record.id:
                self._properties[record.id] = record
        self._users: Dict[str, UserProfile] = {}
        for row in _records(U_FILE):
            profile = map_user_row(row)
            if profile.id:
                self._users[profile.id] = profile
        self._credentials: Dict[str, Tuple[str, bytes, bytes]] = {}
        LOGGER.info(kv("csv_loaded", properties=len(self._properties), users=len(self._users)))

    # ------------------------------------------------------------------
    # Listings
    def fetch_all(self) -> List[PropertyRecord]:
        with self._lock:
            return list(self._properties.values())

    def fetch_by_owner(self, owner_id: str) -> List[PropertyRecord]:
        with self._lock:
            owned = [record for record in self._properties.values() if record.owner_id == owner_id]
        return sorted(owned, key=lambda r: r.created_ts, reverse=True)

    def get_property(self, property_id: str) -> Optional[PropertyRecord]:
        with self._lock:
            return self._properties.get(property_id)

    def add_property(self, data: Dict[str, Any]) -> PropertyRecord:
        now = datetime.now(timezone.utc)
        record = PropertyRecord.model_validate(
            {**data, "id": uuid.uuid4().hex, "created_at": now, "updated_at": now}
        )
        with self._lock:
            self._properties[record.id] = record
        return record

    def update_property(self, property_id: str, changes: Dict[str, Any]) -> PropertyRecord:
        with self._lock:
            current = self._properties.get(property_id)
            if current is None:
                raise PropertyNotFoundError(property_id)
            merged = {**current.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
            record = PropertyRecord.model_validate(merged)
            self._properties[property_id] = record
            return record

    def delete_property(self, property_id: str) -> None:
        with self._lock:
            if self._properties.pop(property_id, None) is None:
                raise PropertyNotFoundError(property_id)

    # ------------------------------------------------------------------
    # Users
    def get_user(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(self) -> List[UserProfile]:
        with self._lock:
            return list(self._users.values())

    def save_user(self, profile: UserProfile) -> None:
        with self._lock:
            self._users[profile.id] = profile

    # ------------------------------------------------------------------
    # Identity
    def sign_up(self, email: str, password: str, display_name: str) -> str:
        key = email.strip().lower()
        with self._lock:
            if key in self._credentials or any(u.email.lower() == key for u in self._users.values()):
                raise AuthError("Email address is already in use")
            salt = secrets.token_bytes(16)
            user_id = uuid.uuid4().hex
            self._credentials[key] = (user_id, salt, _hash_password(password, salt))
        LOGGER.info(kv("sign_up", user_id=user_id, display_name=display_name))
        return user_id

    def sign_in(self, email: str, password: str) -> Tuple[str, str]:
        with self._lock:
            entry = self._credentials.get(email.strip().lower())
        if entry is None:
            raise AuthError("Invalid email or password")
        user_id, salt, digest = entry
        if not secrets.compare_digest(digest, _hash_password(password, salt)):
            raise AuthError("Invalid email or password")
        return user_id, secrets.token_urlsafe(24)

    def sign_out(self) -> None:
        LOGGER.debug("sign_out")

    # ------------------------------------------------------------------
    # Storage
    def upload_image(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        return save_upload(path, data, root=self._upload_root)
