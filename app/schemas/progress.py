"""
Pydantic schemas for reading progress
"""
from pydantic import Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from app.schemas.base import CamelModel


class ProgressUpsert(CamelModel):
    """Body of POST /api/reading-progress"""
    user_id: UUID
    section_id: UUID
    page_id: Optional[UUID] = None
    current_page_number: int = Field(1, ge=1, description="1-based page number")
    completed: bool = False
    visited_pages: Optional[List[str]] = None


class ReadingProgressResponse(CamelModel):
    """Persisted progress row"""
    id: UUID
    user_id: UUID
    section_id: UUID
    page_id: Optional[UUID] = None
    current_page_number: int
    completed: bool
    last_read_at: datetime
    visited_pages: Optional[List[str]] = None


class CompletionPolicy:
    """How a progress write treats an already completed section"""

    # Store exactly what the reader sent. Revisiting page 1 of a finished
    # section writes completed=false again.
    OVERWRITE = "overwrite"

    # A completed section stays completed until its progress is reset.
    MONOTONIC = "monotonic"

    ALL = (OVERWRITE, MONOTONIC)
