"""Listing detail with the owner's contact email."""

from __future__ import annotations

from typing import Optional

from ..errors import ListingStoreError, PropertyNotFoundError
from ..models.property import PropertyDetail
from ..utils.logging import get_logger, kv

LOGGER = get_logger("services.contact")


class ContactService:
    def __init__(self, repository):
        self.repository = repository

    def owner_email(self, owner_id: str) -> Optional[str]:
        if not owner_id:
            return None
        try:
            profile = self.repository.get_user(owner_id)
        except ListingStoreError as exc:
            LOGGER.warning(kv("owner_lookup_failed", owner=owner_id, error=exc))
            return None
        if profile is None or not profile.email:
            LOGGER.info(kv("owner_email_missing", owner=owner_id))
            return None
        return profile.email

    def property_detail(self, property_id: str) -> PropertyDetail:
        record = self.repository.get_property(property_id)
        if record is None:
            raise PropertyNotFoundError(property_id)
        return PropertyDetail(**record.model_dump(), owner_email=self.owner_email(record.owner_id))
