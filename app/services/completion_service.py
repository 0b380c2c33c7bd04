"""
Chapter completion aggregation service
Derives chapter badge state from section-level reading progress
"""
import logging
from typing import Dict, Iterable, Union
from uuid import UUID
from sqlalchemy.orm import Session

from app.models import ReadingProgress, Section

logger = logging.getLogger(__name__)


class CompletionService:
    """
    Service for computing a reader's chapter-level completion

    Nothing is cached: every call recomputes from the stored progress rows,
    so the result is idempotent and independent of write order.

    Rules:
    - completed: every section of the chapter has a completed row
    - inProgress: some row is unfinished, or some but not all sections are completed
    - a chapter without sections is neither completed nor in progress
    """

    def summarize(
        self,
        total_sections: int,
        completed_flags: Iterable[bool]
    ) -> Dict[str, Union[bool, int]]:
        """
        Apply the completion rules to a chapter's progress rows

        Args:
            total_sections: Number of sections in the chapter
            completed_flags: The completed flag of each existing progress row

        Returns:
            Dictionary with completed, in_progress, total_sections, completed_sections
        """
        if total_sections == 0:
            return {
                "completed": False,
                "in_progress": False,
                "total_sections": 0,
                "completed_sections": 0
            }

        flags = list(completed_flags)
        completed_sections = sum(1 for f in flags if f)
        in_progress_sections = sum(1 for f in flags if not f)

        return {
            "completed": completed_sections == total_sections and total_sections > 0,
            "in_progress": (
                in_progress_sections > 0
                or (completed_sections > 0 and completed_sections < total_sections)
            ),
            "total_sections": total_sections,
            "completed_sections": completed_sections
        }

    def get_chapter_progress(
        self,
        db: Session,
        user_id: UUID,
        chapter_id: UUID
    ) -> Dict[str, Union[bool, int]]:
        """
        Get chapter completion status for a user

        Args:
            db: Database session
            user_id: Reader UUID
            chapter_id: Chapter UUID

        Returns:
            Dictionary with completed, in_progress, total_sections, completed_sections
        """
        section_ids = [
            row[0] for row in db.query(Section.id).filter(Section.chapter_id == chapter_id).all()
        ]

        if not section_ids:
            return self.summarize(0, [])

        flags = [
            row[0]
            for row in db.query(ReadingProgress.completed).filter(
                ReadingProgress.user_id == user_id,
                ReadingProgress.section_id.in_(section_ids)
            ).all()
        ]

        summary = self.summarize(len(section_ids), flags)

        logger.debug(
            f"Chapter progress: user={user_id}, chapter={chapter_id}, "
            f"completed={summary['completed_sections']}/{summary['total_sections']}, "
            f"in_progress={summary['in_progress']}"
        )
        return summary


# Global instance
completion_service = CompletionService()
