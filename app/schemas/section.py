"""
Pydantic schemas for section-related requests and responses
"""
from pydantic import Field, field_validator
from typing import List, Optional
from uuid import UUID

from app.schemas.base import CamelModel


def _unique_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen = []
    for tag in tags:
        if tag not in seen:
            seen.append(tag)
    return seen


class SectionCreate(CamelModel):
    """Schema for creating a section (a default empty page is created with it)"""
    chapter_id: UUID
    title: str = Field(..., min_length=1)
    mood: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = None
    song_url: Optional[str] = None
    order: int

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags):
        return _unique_tags(tags)


class SectionUpdate(CamelModel):
    """Partial section update"""
    chapter_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1)
    mood: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = None
    song_url: Optional[str] = None
    order: Optional[int] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags):
        return _unique_tags(tags)


class SectionResponse(CamelModel):
    """Section as returned to readers and admins"""
    id: UUID
    chapter_id: UUID
    title: str
    mood: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = None
    song_url: Optional[str] = None
    order: int


class SectionOrder(CamelModel):
    """One (section, new order) assignment"""
    id: UUID
    order: int


class SectionReorderRequest(CamelModel):
    """Body of PATCH /api/sections/reorder"""
    section_orders: List[SectionOrder]


class SectionReorderResponse(CamelModel):
    success: bool = True
