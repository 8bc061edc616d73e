"""Pydantic models for marketplace users and auth sessions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.coerce import to_bool, to_datetime, to_str
from .property import CAMEL_CONFIG

UserType = Literal["owner", "seeker"]


class UserProfile(BaseModel):
    model_config = CAMEL_CONFIG

    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    user_type: UserType = "seeker"
    created_at: Optional[datetime] = None
    verified: bool = False

    @field_validator("id", "email", "first_name", "last_name", mode="before")
    @classmethod
    def _text(cls, v):
        return to_str(v)

    @field_validator("user_type", mode="before")
    @classmethod
    def _user_type(cls, v):
        value = to_str(v).lower()
        return value if value in ("owner", "seeker") else "seeker"

    @field_validator("created_at", mode="before")
    @classmethod
    def _created(cls, v):
        return to_datetime(v)

    @field_validator("verified", mode="before")
    @classmethod
    def _verified(cls, v):
        return to_bool(v)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class RegisterRequest(BaseModel):
    model_config = CAMEL_CONFIG

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    first_name: str
    last_name: str
    user_type: UserType = "seeker"


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthSession(BaseModel):
    model_config = CAMEL_CONFIG

    user_id: str
    email: str
    display_name: str = ""
    access_token: Optional[str] = None
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
