"""
Chapter management and chapter progress API endpoints
"""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List, Optional

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas.chapter import ChapterCreate, ChapterUpdate, ChapterResponse, ChapterProgress
from app.schemas.section import SectionResponse
from app.services.content_service import content_service
from app.services.completion_service import completion_service

router = APIRouter(prefix="/api/chapters", tags=["chapters"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[ChapterResponse])
async def list_chapters(db: Session = Depends(get_db)):
    """List chapters in display order"""
    return content_service.list_chapters(db)


@router.post("", response_model=ChapterResponse, status_code=201)
async def create_chapter(chapter: ChapterCreate, db: Session = Depends(get_db)):
    """Create a chapter (admin)"""
    return content_service.create_chapter(db, chapter)


@router.get("/{chapter_id}", response_model=ChapterResponse)
async def get_chapter(chapter_id: UUID, db: Session = Depends(get_db)):
    return content_service.get_chapter(db, chapter_id)


@router.patch("/{chapter_id}", response_model=ChapterResponse)
async def update_chapter(chapter_id: UUID, changes: ChapterUpdate, db: Session = Depends(get_db)):
    return content_service.update_chapter(db, chapter_id, changes)


@router.delete("/{chapter_id}", status_code=204)
async def delete_chapter(chapter_id: UUID, db: Session = Depends(get_db)):
    """
    Delete a chapter

    Cascades to its sections, their pages, and every reading progress row,
    like and analytics event that referenced them.
    """
    content_service.delete_chapter(db, chapter_id)
    return Response(status_code=204)


@router.get("/{chapter_id}/sections", response_model=List[SectionResponse])
async def list_chapter_sections(chapter_id: UUID, db: Session = Depends(get_db)):
    """Sections of a chapter in display order"""
    return content_service.list_sections(db, chapter_id)


@router.get("/{chapter_id}/progress", response_model=ChapterProgress)
async def get_chapter_progress(
    chapter_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """
    Get a reader's completion state for a chapter

    Returns:
    - completed: every section finished
    - inProgress: started but not finished
    - totalSections / completedSections
    """
    if user_id is None:
        raise ValidationError("User ID required")

    return completion_service.get_chapter_progress(db, user_id, chapter_id)
