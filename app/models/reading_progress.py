"""
ReadingProgress model - where a reader is within a section
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint, Uuid
from app.database import Base
import uuid


def utcnow():
    return datetime.now(timezone.utc)


class ReadingProgress(Base):
    """
    Reading progress table - at most one row per (user, section), written by upsert
    """
    __tablename__ = "reading_progress"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)
    page_id = Column(Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=True)
    current_page_number = Column(Integer, nullable=False, default=1)
    completed = Column(Boolean, nullable=False, default=False)
    last_read_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    visited_pages = Column(JSON, default=list)  # Not used by completion logic

    __table_args__ = (
        UniqueConstraint("user_id", "section_id", name="uq_reading_progress_user_section"),
    )

    def __repr__(self):
        return (
            f"<ReadingProgress(user_id={self.user_id}, section_id={self.section_id}, "
            f"page={self.current_page_number}, completed={self.completed})>"
        )
