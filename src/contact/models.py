from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


@dataclass(slots=True)
class ContactMessage:
    id: UUID
    name: str
    email: str
    subject: Optional[str]
    message: str
    created_at: datetime
    deleted_at: Optional[datetime] = None


class NewContactMessage(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255)
    subject: Optional[str] = Field(default=None, max_length=300)
    message: str = Field(min_length=1, max_length=10_000)
