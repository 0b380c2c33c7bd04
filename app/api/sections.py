"""
Section management API endpoints
"""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List, Optional

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas.section import (
    SectionCreate, SectionUpdate, SectionResponse,
    SectionReorderRequest, SectionReorderResponse
)
from app.schemas.page import PageResponse
from app.schemas.progress import ReadingProgressResponse
from app.services.content_service import content_service
from app.services.progress_service import progress_service

router = APIRouter(prefix="/api/sections", tags=["sections"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[SectionResponse])
async def list_sections(db: Session = Depends(get_db)):
    """All sections, grouped by chapter and ordered within it"""
    return content_service.list_all_sections(db)


@router.post("", response_model=SectionResponse, status_code=201)
async def create_section(section: SectionCreate, db: Session = Depends(get_db)):
    """
    Create a section with a default empty first page

    - Section and page are committed together
    - If the page cannot be written, no section is created
    """
    return content_service.create_section(db, section)


# Must be registered before /{section_id} so "reorder" is not parsed as an id
@router.patch("/reorder", response_model=SectionReorderResponse)
async def reorder_sections(request: SectionReorderRequest, db: Session = Depends(get_db)):
    """
    Reassign display orders within one chapter

    Rejected as a whole when a section is missing, sections span several
    chapters, or order values repeat.
    """
    content_service.reorder_sections(db, request.section_orders)
    return SectionReorderResponse(success=True)


@router.get("/{section_id}", response_model=SectionResponse)
async def get_section(section_id: UUID, db: Session = Depends(get_db)):
    return content_service.get_section(db, section_id)


@router.patch("/{section_id}", response_model=SectionResponse)
async def update_section(section_id: UUID, changes: SectionUpdate, db: Session = Depends(get_db)):
    return content_service.update_section(db, section_id, changes)


@router.delete("/{section_id}", status_code=204)
async def delete_section(section_id: UUID, db: Session = Depends(get_db)):
    """Delete a section with its pages, progress rows, likes and analytics events"""
    content_service.delete_section(db, section_id)
    return Response(status_code=204)


@router.get("/{section_id}/pages", response_model=List[PageResponse])
async def list_section_pages(section_id: UUID, db: Session = Depends(get_db)):
    """Pages of a section in reading order"""
    return content_service.list_pages(db, section_id)


@router.get("/{section_id}/progress", response_model=Optional[ReadingProgressResponse])
async def get_section_progress(
    section_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Reader's progress row for this section, or null if never opened"""
    if user_id is None:
        raise ValidationError("User ID required")

    return progress_service.get_progress(db, user_id, section_id)


@router.delete("/{section_id}/progress", status_code=204)
async def reset_section_progress(
    section_id: UUID,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Forget a reader's progress in this section (clears a sticky completed flag)"""
    progress_service.reset_progress(db, user_id, section_id)
    return Response(status_code=204)
