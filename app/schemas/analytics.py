"""
Pydantic schemas for analytics events
"""
from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.schemas.base import CamelModel


class AnalyticsEventCreate(CamelModel):
    """Event posted by the reader while navigating"""
    user_id: UUID
    page_id: UUID
    section_id: UUID
    chapter_id: UUID
    event_type: str = Field(..., pattern="^(page_view|section_completed)$")
    duration: Optional[int] = Field(None, ge=0, description="Dwell time in milliseconds")


class AnalyticsEventResponse(CamelModel):
    id: UUID
    user_id: UUID
    page_id: UUID
    section_id: UUID
    chapter_id: UUID
    event_type: str
    duration: Optional[int] = None
    timestamp: datetime
