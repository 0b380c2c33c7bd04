"""
Section like service
"""
import logging
from typing import List
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models import LikedSection, Section
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class LikeService:
    """Likes are idempotent: one row per (user, section) no matter how often a reader likes"""

    def _find(self, db: Session, user_id: UUID, section_id: UUID) -> LikedSection:
        return db.query(LikedSection).filter(
            LikedSection.user_id == user_id,
            LikedSection.section_id == section_id
        ).first()

    def like_section(self, db: Session, user_id: UUID, section_id: UUID) -> LikedSection:
        """
        Like a section, returning the existing like if there already is one

        Raises:
            InvalidSessionError: user no longer exists
            NotFoundError: section does not exist
        """
        user_service.require_user(db, user_id)

        if not db.query(Section.id).filter(Section.id == section_id).first():
            raise NotFoundError("Section not found")

        existing = self._find(db, user_id, section_id)
        if existing:
            return existing

        like = LikedSection(user_id=user_id, section_id=section_id)
        db.add(like)
        try:
            db.commit()
        except IntegrityError:
            # Lost an insert race against a concurrent like; keep theirs
            db.rollback()
            existing = self._find(db, user_id, section_id)
            if existing is None:
                raise
            return existing

        db.refresh(like)
        logger.info(f"Section liked: user={user_id}, section={section_id}")
        return like

    def unlike_section(self, db: Session, user_id: UUID, section_id: UUID) -> None:
        user_service.require_user(db, user_id)

        deleted = db.query(LikedSection).filter(
            LikedSection.user_id == user_id,
            LikedSection.section_id == section_id
        ).delete(synchronize_session=False)
        db.commit()

        if deleted:
            logger.info(f"Section unliked: user={user_id}, section={section_id}")

    def is_liked(self, db: Session, user_id: UUID, section_id: UUID) -> bool:
        return self._find(db, user_id, section_id) is not None

    def like_count(self, db: Session, section_id: UUID) -> int:
        return db.query(func.count(LikedSection.id)).filter(
            LikedSection.section_id == section_id
        ).scalar() or 0

    def liked_sections(self, db: Session, user_id: UUID) -> List[Section]:
        """Sections a user liked, most recently liked first"""
        return (
            db.query(Section)
            .join(LikedSection, LikedSection.section_id == Section.id)
            .filter(LikedSection.user_id == user_id)
            .order_by(LikedSection.liked_at.desc())
            .all()
        )


# Global instance
like_service = LikeService()
