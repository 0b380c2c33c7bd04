"""
Page model - rich text content of a section
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Page(Base):
    """
    Pages table - page_number defines reading order and may have gaps
    """
    __tablename__ = "pages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    section_id = Column(
        Uuid,
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False, default="")  # HTML with inline embed markers
    page_number = Column(Integer, nullable=False)

    section = relationship("Section", back_populates="pages")

    __table_args__ = (
        UniqueConstraint("section_id", "page_number", name="uq_pages_section_page_number"),
    )

    def __repr__(self):
        return f"<Page(id={self.id}, section_id={self.section_id}, page_number={self.page_number})>"
