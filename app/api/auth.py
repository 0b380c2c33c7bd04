"""
Session validation API endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas.auth import SessionValidateRequest, SessionValidateResponse, SessionUser
from app.services.user_service import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/validate", response_model=SessionValidateResponse)
async def validate_session(request: SessionValidateRequest, db: Session = Depends(get_db)):
    """
    Check that a locally stored session still maps to a user

    Returns 401 with invalidSession when it does not, so the reader logs out.
    """
    user = user_service.require_user(db, request.user_id)
    return SessionValidateResponse(valid=True, user=SessionUser.model_validate(user))
