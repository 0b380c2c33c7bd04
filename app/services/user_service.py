"""
User lookups shared by every reader-side write
"""
import logging
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session

from app.exceptions import InvalidSessionError, ValidationError
from app.models import User

logger = logging.getLogger(__name__)


class UserService:
    """Resolves the user behind a request"""

    def get_user(self, db: Session, user_id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def require_user(self, db: Session, user_id: Optional[UUID]) -> User:
        """
        Resolve a user or reject the request as an invalid session

        A reader whose account was deleted (or whose local session is corrupt)
        keeps sending its stale id; the client logs out when it sees
        invalidSession in the error payload.

        Raises:
            ValidationError: user_id missing
            InvalidSessionError: user_id does not resolve to a user
        """
        if user_id is None:
            raise ValidationError("User ID required")

        user = self.get_user(db, user_id)
        if not user:
            logger.warning(f"Rejected request for unknown user {user_id}")
            raise InvalidSessionError()
        return user


# Global instance
user_service = UserService()
