from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


@dataclass(slots=True)
class User:
    id: UUID
    email: str
    username: Optional[str]
    password_hash: str
    is_admin: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[UUID] = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


@dataclass(slots=True)
class UserAuditEntry:
    id: int
    user_id: UUID
    action: str
    performed_by: Optional[UUID]
    performed_at: datetime


class NewUser(BaseModel):
    """Registration payload; hashing the password is the caller's job."""

    email: str = Field(min_length=3, max_length=255)
    username: Optional[str] = Field(default=None, max_length=100)
    password_hash: str = Field(min_length=1)
    is_admin: bool = False
    is_verified: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v
