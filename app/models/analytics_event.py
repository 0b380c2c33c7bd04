"""
AnalyticsEvent model - page views and section completions sent by readers
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Uuid
from app.database import Base
from app.models.reading_progress import utcnow
import uuid


class AnalyticsEvent(Base):
    """
    Analytics events table - write side only; dashboards live elsewhere
    """
    __tablename__ = "analytics_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    page_id = Column(Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)
    chapter_id = Column(Uuid, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    event_type = Column(String(32), nullable=False)  # page_view | section_completed
    duration = Column(Integer)  # milliseconds
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<AnalyticsEvent(type={self.event_type}, page_id={self.page_id}, duration={self.duration})>"
