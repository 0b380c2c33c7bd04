"""
Reading progress API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List, Optional

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas.progress import ProgressUpsert, ReadingProgressResponse
from app.services.progress_service import progress_service

router = APIRouter(prefix="/api", tags=["reading-progress"])
logger = logging.getLogger(__name__)


@router.get("/reading-progress", response_model=List[ReadingProgressResponse])
async def list_reading_progress(
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """All progress rows of a reader, most recently read first"""
    if user_id is None:
        raise ValidationError("User ID required")

    return progress_service.get_user_progress(db, user_id)


@router.post("/reading-progress", response_model=ReadingProgressResponse)
async def save_reading_progress(progress: ProgressUpsert, db: Session = Depends(get_db)):
    """
    Upsert the reader's progress for a section

    - Keyed on (userId, sectionId); never creates a second row
    - completed is stored as sent under the default policy
    - 401 with invalidSession when the user no longer exists
    """
    return progress_service.upsert_progress(db, progress)


@router.get("/reading-progress/last", response_model=Optional[ReadingProgressResponse])
async def get_last_read_section(
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Most recently read section for "Resume Reading", or null"""
    if user_id is None:
        raise ValidationError("User ID required")

    return progress_service.get_last_read(db, user_id)


@router.get("/users/{user_id}/progress", response_model=List[ReadingProgressResponse])
async def get_user_progress(user_id: UUID, db: Session = Depends(get_db)):
    return progress_service.get_user_progress(db, user_id)
