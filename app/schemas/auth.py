"""
Pydantic schemas for session validation
"""
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class SessionValidateRequest(CamelModel):
    user_id: Optional[UUID] = None


class SessionUser(CamelModel):
    id: UUID
    username: str
    role: str


class SessionValidateResponse(CamelModel):
    valid: bool
    user: SessionUser
