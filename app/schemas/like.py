"""
Pydantic schemas for section likes
"""
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.schemas.base import CamelModel


class LikeRequest(CamelModel):
    user_id: Optional[UUID] = None


class LikedSectionResponse(CamelModel):
    id: UUID
    user_id: UUID
    section_id: UUID
    liked_at: datetime


class LikeStatus(CamelModel):
    is_liked: bool


class LikeCount(CamelModel):
    count: int
