from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from src.blog.slug import slugify


@dataclass(slots=True)
class BlogPost:
    id: UUID
    title: str
    slug: str
    excerpt: str
    content_markdown: str
    cover_image_url: Optional[str]
    tags: List[str] = field(default_factory=list)
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    published: bool = False
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.tags is None:
            self.tags = []


class NewBlogPost(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    excerpt: str
    content_markdown: str = Field(min_length=1)
    cover_image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    published: bool = False
    published_at: Optional[datetime] = None

    @model_validator(mode="after")
    def fill_slug(self) -> "NewBlogPost":
        # Slug is generated from the title when the author leaves it out.
        slug = (self.slug or "").strip() or slugify(self.title)
        if not slug:
            raise ValueError("Slug cannot be empty")
        self.slug = slug
        return self


class BlogPostUpdate(BaseModel):
    """Partial update: None keeps the stored value."""

    title: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content_markdown: Optional[str] = Field(default=None, min_length=1)
    cover_image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    published: Optional[bool] = None
    published_at: Optional[datetime] = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Slug cannot be empty")
        return v
