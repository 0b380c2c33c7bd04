"""
Pydantic schemas for chapter-related requests and responses
"""
from pydantic import Field
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class ChapterCreate(CamelModel):
    """Schema for creating a chapter"""
    title: str = Field(..., min_length=1, description="Chapter title")
    description: Optional[str] = None
    cover_image: Optional[str] = None
    song_url: Optional[str] = None
    order: int = Field(..., description="Display rank among chapters")


class ChapterUpdate(CamelModel):
    """Partial chapter update"""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    song_url: Optional[str] = None
    order: Optional[int] = None


class ChapterResponse(CamelModel):
    """Chapter as returned to readers and admins"""
    id: UUID
    title: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    song_url: Optional[str] = None
    order: int


class ChapterProgress(CamelModel):
    """Chapter completion badge state for one reader"""
    completed: bool
    in_progress: bool
    total_sections: int
    completed_sections: int
