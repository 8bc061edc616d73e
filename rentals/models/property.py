"""Pydantic models representing rental listings and search inputs."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..utils.coerce import to_datetime, to_float, to_int, to_list, to_str

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertyStatus(str, Enum):
    ACTIVE = "active"
    RENTED = "rented"
    DRAFT = "draft"


class SortKey(str, Enum):
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    BEDROOMS = "bedrooms"
    AREA = "area"

    @classmethod
    def parse(cls, value: object) -> "SortKey":
        """Resolve a sort option, falling back to newest for unknown values."""

        if isinstance(value, cls):
            return value
        try:
            return cls(to_str(value).lower())
        except ValueError:
            return cls.NEWEST


class PropertyRecord(BaseModel):
    """A listing as held by the store.

    Missing numbers default to zero and missing text to an empty string so the
    search code can compare records without guarding every field.
    """

    model_config = CAMEL_CONFIG

    id: str
    title: str = ""
    price: float = 0.0
    location: str = ""
    full_address: str = ""
    type: str = ""
    bedrooms: int = 0
    bathrooms: float = 0.0
    area: int = 0
    images: List[str] = Field(default_factory=list)
    status: PropertyStatus = PropertyStatus.DRAFT
    owner_id: str = ""
    owner_name: str = ""
    description: str = ""
    amenities: List[str] = Field(default_factory=list)
    year_built: Optional[int] = None
    available: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "title", "location", "full_address", "type", "owner_id", "owner_name", "description", mode="before")
    @classmethod
    def _text(cls, v):
        return to_str(v)

    @field_validator("price", "bathrooms", mode="before")
    @classmethod
    def _decimal(cls, v):
        return to_float(v) or 0.0

    @field_validator("bedrooms", "area", mode="before")
    @classmethod
    def _whole(cls, v):
        return to_int(v) or 0

    @field_validator("year_built", mode="before")
    @classmethod
    def _year(cls, v):
        return to_int(v)

    @field_validator("available", mode="before")
    @classmethod
    def _available(cls, v):
        return to_str(v) or None

    @field_validator("images", "amenities", mode="before")
    @classmethod
    def _lists(cls, v):
        return to_list(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        if isinstance(v, PropertyStatus):
            return v
        value = to_str(v).lower()
        if value in {s.value for s in PropertyStatus}:
            return value
        return PropertyStatus.DRAFT

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp(cls, v):
        return to_datetime(v)

    @property
    def created_ts(self) -> float:
        return self.created_at.timestamp() if self.created_at else 0.0


class FilterSpec(BaseModel):
    """Search criteria; ``None`` means the field imposes no constraint."""

    model_config = CAMEL_CONFIG

    city: Optional[str] = None
    type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    available_only: bool = False

    @property
    def is_identity(self) -> bool:
        return not self.available_only and all(
            value is None
            for value in (self.city, self.type, self.min_price, self.max_price, self.bedrooms, self.bathrooms)
        )


class PropertyCreate(BaseModel):
    model_config = CAMEL_CONFIG

    title: str
    price: float = Field(..., ge=0)
    location: str
    full_address: str = ""
    type: str
    bedrooms: int = Field(0, ge=0)
    bathrooms: float = Field(0, ge=0)
    area: int = Field(0, ge=0)
    description: str = ""
    amenities: List[str] = Field(default_factory=list)
    year_built: Optional[int] = None
    available: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class PropertyUpdate(BaseModel):
    model_config = CAMEL_CONFIG

    title: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    full_address: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    area: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    year_built: Optional[int] = None
    available: Optional[str] = None
    images: Optional[List[str]] = None
    status: Optional[PropertyStatus] = None


class PropertyDetail(PropertyRecord):
    owner_email: Optional[str] = None


class PropertyListResponse(BaseModel):
    items: List[PropertyRecord]
    total: int


class OwnerSummary(BaseModel):
    model_config = CAMEL_CONFIG

    total: int = 0
    active: int = 0
    rented: int = 0
    draft: int = 0
