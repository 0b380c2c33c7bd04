"""
Pydantic schemas for page-related requests and responses
"""
from pydantic import Field
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class PageCreate(CamelModel):
    """Schema for adding a page to a section"""
    section_id: UUID
    content: str = ""
    page_number: int = Field(..., ge=1, description="Reading position within the section")


class PageUpdate(CamelModel):
    """Partial page update"""
    content: Optional[str] = None
    page_number: Optional[int] = Field(None, ge=1)


class PageResponse(CamelModel):
    id: UUID
    section_id: UUID
    content: str
    page_number: int
