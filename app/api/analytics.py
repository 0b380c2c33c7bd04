"""
Analytics event API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas.analytics import AnalyticsEventCreate, AnalyticsEventResponse
from app.services.analytics_service import analytics_service

router = APIRouter(prefix="/api", tags=["analytics"])
logger = logging.getLogger(__name__)


@router.post("/analytics", response_model=AnalyticsEventResponse, status_code=201)
async def record_analytics_event(event: AnalyticsEventCreate, db: Session = Depends(get_db)):
    """
    Record a reader event

    - page_view: duration is the dwell time on the page being left (ms)
    - section_completed: sent once per visit when the last page is reached
    """
    return analytics_service.record_event(db, event)
