from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

MIN_EFFECTIVE_DATE = date(1900, 1, 1)


@dataclass(slots=True)
class AboutMe:
    id: UUID
    revision: int
    content_markdown: str
    effective_date: date
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class NewAboutMe(BaseModel):
    """A new content version. The revision number is assigned by the store."""

    model_config = {"extra": "forbid"}

    content_markdown: str = Field(min_length=1)
    effective_date: date

    @field_validator("effective_date")
    @classmethod
    def validate_effective_date(cls, v: date) -> date:
        if v < MIN_EFFECTIVE_DATE:
            raise ValueError("Date must be after January 1, 1900")
        return v
