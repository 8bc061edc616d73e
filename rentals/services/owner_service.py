"""Owner dashboard operations: an owner's own listings and their lifecycle."""

from __future__ import annotations

from typing import List

from ..errors import PermissionDeniedError, PropertyNotFoundError
from ..models.property import OwnerSummary, PropertyCreate, PropertyRecord, PropertyStatus, PropertyUpdate
from ..models.user import UserProfile
from ..utils.logging import get_logger, kv

LOGGER = get_logger("services.owner")


def summarize(records: List[PropertyRecord]) -> OwnerSummary:
    summary = OwnerSummary(total=len(records))
    for record in records:
        if record.status == PropertyStatus.ACTIVE:
            summary.active += 1
        elif record.status == PropertyStatus.RENTED:
            summary.rented += 1
        else:
            summary.draft += 1
    return summary


class OwnerService:
    def __init__(self, repository):
        self.repository = repository

    def list_listings(self, owner_id: str) -> List[PropertyRecord]:
        return self.repository.fetch_by_owner(owner_id)

    def summary(self, owner_id: str) -> OwnerSummary:
        return summarize(self.list_listings(owner_id))

    def create_listing(self, owner: UserProfile, payload: PropertyCreate, draft: bool = False) -> PropertyRecord:
        data = payload.model_dump()
        data.update(
            owner_id=owner.id,
            owner_name=owner.display_name,
            status=PropertyStatus.DRAFT if draft else PropertyStatus.ACTIVE,
        )
        return self.repository.add_property(data)

    def update_listing(self, owner_id: str, property_id: str, changes: PropertyUpdate) -> PropertyRecord:
        self.owned_listing(owner_id, property_id)
        return self.repository.update_property(property_id, changes.model_dump(exclude_unset=True, exclude_none=True))

    def add_images(self, owner_id: str, property_id: str, urls: List[str]) -> PropertyRecord:
        record = self.owned_listing(owner_id, property_id)
        return self.repository.update_property(property_id, {"images": record.images + list(urls)})

    def delete_listing(self, owner_id: str, property_id: str) -> None:
        self.owned_listing(owner_id, property_id)
        self.repository.delete_property(property_id)

    def owned_listing(self, owner_id: str, property_id: str) -> PropertyRecord:
        record = self.repository.get_property(property_id)
        if record is None:
            raise PropertyNotFoundError(property_id)
        if record.owner_id != owner_id:
            LOGGER.warning(kv("foreign_listing_access", owner=owner_id, property=property_id))
            raise PermissionDeniedError(f"Listing {property_id} belongs to another owner")
        return record
