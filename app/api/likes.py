"""
Section like API endpoints
"""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List, Optional

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas.like import LikeRequest, LikedSectionResponse, LikeStatus, LikeCount
from app.schemas.section import SectionResponse
from app.services.like_service import like_service

router = APIRouter(prefix="/api", tags=["likes"])
logger = logging.getLogger(__name__)


@router.post("/sections/{section_id}/like", response_model=LikedSectionResponse)
async def like_section(section_id: UUID, request: LikeRequest, db: Session = Depends(get_db)):
    """Like a section; liking twice returns the same like"""
    return like_service.like_section(db, request.user_id, section_id)


@router.delete("/sections/{section_id}/like", status_code=204)
async def unlike_section(
    section_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Remove a like; succeeds whether or not the like existed"""
    like_service.unlike_section(db, user_id, section_id)
    return Response(status_code=204)


@router.get("/sections/{section_id}/like-status", response_model=LikeStatus)
async def get_like_status(
    section_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    if user_id is None:
        raise ValidationError("User ID required")

    return LikeStatus(is_liked=like_service.is_liked(db, user_id, section_id))


@router.get("/sections/{section_id}/like-count", response_model=LikeCount)
async def get_like_count(section_id: UUID, db: Session = Depends(get_db)):
    return LikeCount(count=like_service.like_count(db, section_id))


@router.get("/users/{user_id}/liked-sections", response_model=List[SectionResponse])
async def get_liked_sections(user_id: UUID, db: Session = Depends(get_db)):
    """Sections the reader liked, most recent first"""
    return like_service.liked_sections(db, user_id)
