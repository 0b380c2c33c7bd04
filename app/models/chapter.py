"""
Chapter model - top level of the chapter -> section -> page tree
"""
from sqlalchemy import Column, Integer, Text, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Chapter(Base):
    """
    Chapters table - ordered collection of sections
    """
    __tablename__ = "chapters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text)
    cover_image = Column(Text)
    song_url = Column(Text)  # Background playlist for the whole chapter
    order = Column(Integer, nullable=False)

    sections = relationship(
        "Section",
        back_populates="chapter",
        order_by="Section.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Chapter(id={self.id}, title={self.title}, order={self.order})>"
