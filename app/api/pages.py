"""
Page management API endpoints
"""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List

from app.database import get_db
from app.schemas.page import PageCreate, PageUpdate, PageResponse
from app.services.content_service import content_service

router = APIRouter(prefix="/api/pages", tags=["pages"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[PageResponse])
async def list_pages(db: Session = Depends(get_db)):
    return content_service.list_all_pages(db)


@router.post("", response_model=PageResponse, status_code=201)
async def create_page(page: PageCreate, db: Session = Depends(get_db)):
    """Add a page to a section; page numbers are unique within the section"""
    return content_service.create_page(db, page)


@router.get("/{page_id}", response_model=PageResponse)
async def get_page(page_id: UUID, db: Session = Depends(get_db)):
    return content_service.get_page(db, page_id)


@router.patch("/{page_id}", response_model=PageResponse)
async def update_page(page_id: UUID, changes: PageUpdate, db: Session = Depends(get_db)):
    return content_service.update_page(db, page_id, changes)


@router.delete("/{page_id}", status_code=204)
async def delete_page(page_id: UUID, db: Session = Depends(get_db)):
    """Delete a page; readers positioned on it lose their progress row for the section"""
    content_service.delete_page(db, page_id)
    return Response(status_code=204)
