"""
Reading progress tracking service
One row per (user, section), always written by upsert
"""
import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import NotFoundError, ValidationError
from app.models import Page, ReadingProgress, Section
from app.models.reading_progress import utcnow
from app.schemas.progress import CompletionPolicy, ProgressUpsert
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Service for recording how far each reader got in each section

    Absence of a row is a normal state (the reader never opened the section)
    and is returned as None, never raised.
    """

    def __init__(self, completion_policy: str = CompletionPolicy.OVERWRITE):
        if completion_policy not in CompletionPolicy.ALL:
            raise ValueError(f"Unknown completion policy: {completion_policy}")
        self.completion_policy = completion_policy

    def get_progress(self, db: Session, user_id: UUID, section_id: UUID) -> Optional[ReadingProgress]:
        return db.query(ReadingProgress).filter(
            ReadingProgress.user_id == user_id,
            ReadingProgress.section_id == section_id
        ).first()

    def get_user_progress(self, db: Session, user_id: UUID) -> List[ReadingProgress]:
        """All progress rows for a user, most recently read first"""
        return (
            db.query(ReadingProgress)
            .filter(ReadingProgress.user_id == user_id)
            .order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .all()
        )

    def get_last_read(self, db: Session, user_id: UUID) -> Optional[ReadingProgress]:
        """
        Row to offer for "Resume Reading"

        Ties on last_read_at are broken by id so repeated calls agree.
        """
        return (
            db.query(ReadingProgress)
            .filter(ReadingProgress.user_id == user_id)
            .order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .first()
        )

    def upsert_progress(
        self,
        db: Session,
        data: ProgressUpsert,
        policy: Optional[str] = None
    ) -> ReadingProgress:
        """
        Insert or update the progress row for (user, section)

        Args:
            db: Database session
            data: Validated upsert payload
            policy: Completion policy override for this write

        Returns:
            The persisted row

        Raises:
            InvalidSessionError: user no longer exists
            NotFoundError: section or page does not exist
            ValidationError: page belongs to another section
        """
        policy = policy or self.completion_policy
        user_service.require_user(db, data.user_id)

        section = db.query(Section).filter(Section.id == data.section_id).first()
        if not section:
            raise NotFoundError("Section not found")

        if data.page_id is not None:
            page = db.query(Page).filter(Page.id == data.page_id).first()
            if not page:
                raise NotFoundError("Page not found")
            if page.section_id != data.section_id:
                raise ValidationError("Page does not belong to this section")

        existing = self.get_progress(db, data.user_id, data.section_id)

        if existing is None:
            progress = ReadingProgress(
                user_id=data.user_id,
                section_id=data.section_id,
                page_id=data.page_id,
                current_page_number=data.current_page_number,
                completed=data.completed,
                visited_pages=data.visited_pages or []
            )
            db.add(progress)
            try:
                db.commit()
            except IntegrityError:
                # Another request inserted the same (user, section) first;
                # the unique constraint rejected ours, so fall back to an update
                db.rollback()
                existing = self.get_progress(db, data.user_id, data.section_id)
                if existing is None:
                    raise
                logger.info(
                    f"Concurrent first write for user={data.user_id}, "
                    f"section={data.section_id}; retrying as update"
                )
                progress = self._apply_update(db, existing, data, policy)
        else:
            progress = self._apply_update(db, existing, data, policy)

        db.refresh(progress)

        logger.info(
            f"Progress saved: user={data.user_id}, section={data.section_id}, "
            f"page={progress.current_page_number}, completed={progress.completed}"
        )
        return progress

    def _apply_update(
        self,
        db: Session,
        progress: ReadingProgress,
        data: ProgressUpsert,
        policy: str
    ) -> ReadingProgress:
        completed = data.completed
        if policy == CompletionPolicy.MONOTONIC and progress.completed and not completed:
            completed = True

        progress.page_id = data.page_id
        progress.current_page_number = data.current_page_number
        progress.completed = completed
        progress.last_read_at = utcnow()
        if data.visited_pages is not None:
            progress.visited_pages = data.visited_pages

        db.commit()
        return progress

    def reset_progress(self, db: Session, user_id: UUID, section_id: UUID) -> bool:
        """
        Forget a reader's progress in one section

        Returns:
            True if a row was removed
        """
        user_service.require_user(db, user_id)

        progress = self.get_progress(db, user_id, section_id)
        if progress is None:
            return False

        db.delete(progress)
        db.commit()
        logger.info(f"Progress reset: user={user_id}, section={section_id}")
        return True


# Global instance
progress_service = ProgressService(completion_policy=settings.PROGRESS_COMPLETION_POLICY)
