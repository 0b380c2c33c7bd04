"""
Section model - a readable unit inside a chapter
"""
from sqlalchemy import Column, Integer, Text, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Section(Base):
    """
    Sections table - owns pages; order is a display rank within the chapter
    """
    __tablename__ = "sections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id = Column(
        Uuid,
        ForeignKey("chapters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(Text, nullable=False)
    mood = Column(JSON, default=list)  # ["nostalgic", "warm"]
    tags = Column(JSON, default=list)
    thumbnail = Column(Text)
    song_url = Column(Text)  # Section-specific song overrides the chapter playlist
    order = Column(Integer, nullable=False)

    chapter = relationship("Chapter", back_populates="sections")
    pages = relationship(
        "Page",
        back_populates="section",
        order_by="Page.page_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Section(id={self.id}, chapter_id={self.chapter_id}, order={self.order})>"
