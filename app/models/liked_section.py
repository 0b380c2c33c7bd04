"""
LikedSection model - a reader's like on a section
"""
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from app.database import Base
from app.models.reading_progress import utcnow
import uuid


class LikedSection(Base):
    """
    Liked sections table - a like is idempotent, never cumulative
    """
    __tablename__ = "liked_sections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True)
    liked_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "section_id", name="uq_liked_sections_user_section"),
    )

    def __repr__(self):
        return f"<LikedSection(user_id={self.user_id}, section_id={self.section_id})>"
