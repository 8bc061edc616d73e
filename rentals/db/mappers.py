from typing import Any, Dict, Optional

from ..models.property import PropertyRecord
from ..models.user import UserProfile
from ..utils.coerce import to_str


def map_property_row(r: Dict[str, Any], doc_id: Optional[str] = None) -> PropertyRecord:
    """Map a raw store row (camelCase or snake_case) onto a ``PropertyRecord``."""

    data = dict(r)
    data["id"] = to_str(doc_id) or to_str(r.get("id"))
    if "fullAddress" not in data and "address" in data:
        data["full_address"] = r.get("address")
    return PropertyRecord.model_validate(data)


def map_user_row(r: Dict[str, Any], doc_id: Optional[str] = None) -> UserProfile:
    data = dict(r)
    data["id"] = to_str(doc_id) or to_str(r.get("id")) or to_str(r.get("uid"))
    return UserProfile.model_validate(data)


def property_to_row(record: PropertyRecord) -> Dict[str, Any]:
    """Serialise a record for writing; keys are snake_case column names."""

    return record.model_dump(mode="json")


def user_to_row(profile: UserProfile) -> Dict[str, Any]:
    return profile.model_dump(mode="json")
