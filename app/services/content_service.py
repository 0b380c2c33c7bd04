"""
Content hierarchy service: chapters -> sections -> pages
"""
import logging
from typing import Any, Callable, Dict, List, Type
from uuid import UUID
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ContentWriteError, NotFoundError, ValidationError
from app.models import Chapter, Section, Page
from app.schemas.base import CamelModel
from app.schemas.chapter import ChapterCreate, ChapterUpdate, ChapterResponse
from app.schemas.section import SectionCreate, SectionUpdate, SectionOrder, SectionResponse
from app.schemas.page import PageCreate, PageUpdate, PageResponse
from app.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ContentService:
    """
    Authoritative store for the chapter/section/page tree

    Listings are served through the Redis cache when it is available; every
    write invalidates the listings it affects. Deletes rely on ON DELETE
    CASCADE foreign keys, so removing a chapter or section also removes its
    pages, reading progress, likes and analytics events.
    """

    # ------------------------------------------------------------------ #
    # Listings
    # ------------------------------------------------------------------ #

    def _cached_listing(
        self,
        key: str,
        loader: Callable[[], List[Any]],
        schema: Type[CamelModel]
    ) -> List[Dict[str, Any]]:
        cached = cache_service.get(key)
        if cached is not None:
            return cached

        items = [
            schema.model_validate(row).model_dump(mode="json", by_alias=True)
            for row in loader()
        ]
        cache_service.set(key, items)
        return items

    def list_chapters(self, db: Session) -> List[Dict[str, Any]]:
        return self._cached_listing(
            cache_service.chapters_key(),
            lambda: db.query(Chapter).order_by(Chapter.order, Chapter.id).all(),
            ChapterResponse
        )

    def list_all_sections(self, db: Session) -> List[Dict[str, Any]]:
        return self._cached_listing(
            cache_service.all_sections_key(),
            lambda: db.query(Section).order_by(Section.chapter_id, Section.order, Section.id).all(),
            SectionResponse
        )

    def list_sections(self, db: Session, chapter_id: UUID) -> List[Dict[str, Any]]:
        """Sections of a chapter by display order; unknown chapters simply have none"""
        return self._cached_listing(
            cache_service.chapter_sections_key(chapter_id),
            lambda: self._sections_of(db, chapter_id),
            SectionResponse
        )

    def list_all_pages(self, db: Session) -> List[Page]:
        return db.query(Page).order_by(Page.section_id, Page.page_number).all()

    def list_pages(self, db: Session, section_id: UUID) -> List[Dict[str, Any]]:
        return self._cached_listing(
            cache_service.section_pages_key(section_id),
            lambda: db.query(Page)
            .filter(Page.section_id == section_id)
            .order_by(Page.page_number)
            .all(),
            PageResponse
        )

    def _sections_of(self, db: Session, chapter_id: UUID) -> List[Section]:
        return (
            db.query(Section)
            .filter(Section.chapter_id == chapter_id)
            .order_by(Section.order, Section.id)
            .all()
        )

    # ------------------------------------------------------------------ #
    # Chapters
    # ------------------------------------------------------------------ #

    def get_chapter(self, db: Session, chapter_id: UUID) -> Chapter:
        chapter = db.query(Chapter).filter(Chapter.id == chapter_id).first()
        if not chapter:
            raise NotFoundError("Chapter not found")
        return chapter

    def create_chapter(self, db: Session, data: ChapterCreate) -> Chapter:
        chapter = Chapter(**data.model_dump())
        db.add(chapter)
        db.commit()
        db.refresh(chapter)

        cache_service.delete(cache_service.chapters_key())
        logger.info(f"Chapter created: {chapter.id} (order={chapter.order})")
        return chapter

    def update_chapter(self, db: Session, chapter_id: UUID, data: ChapterUpdate) -> Chapter:
        chapter = self.get_chapter(db, chapter_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(chapter, field, value)

        db.commit()
        db.refresh(chapter)

        cache_service.delete(cache_service.chapters_key())
        logger.info(f"Chapter updated: {chapter.id}")
        return chapter

    def delete_chapter(self, db: Session, chapter_id: UUID) -> None:
        chapter = self.get_chapter(db, chapter_id)

        db.delete(chapter)
        db.commit()

        cache_service.clear_content_cache()
        logger.info(f"Chapter deleted with its sections and pages: {chapter_id}")

    # ------------------------------------------------------------------ #
    # Sections
    # ------------------------------------------------------------------ #

    def get_section(self, db: Session, section_id: UUID) -> Section:
        section = db.query(Section).filter(Section.id == section_id).first()
        if not section:
            raise NotFoundError("Section not found")
        return section

    def _build_default_page(self, section_id: UUID) -> Page:
        return Page(section_id=section_id, content="", page_number=1)

    def create_section(self, db: Session, data: SectionCreate) -> Section:
        """
        Create a section together with its first, empty page

        Both rows are written in one transaction: if the page insert fails
        nothing is committed and no page-less section is ever visible.

        Raises:
            NotFoundError: chapter does not exist
            ContentWriteError: the section or its default page could not be written
        """
        self.get_chapter(db, data.chapter_id)

        payload = data.model_dump()
        payload["mood"] = payload["mood"] or []
        payload["tags"] = payload["tags"] or []

        try:
            section = Section(**payload)
            db.add(section)
            db.flush()

            db.add(self._build_default_page(section.id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create section with default page, rolled back: {str(e)}")
            raise ContentWriteError("Server error creating section")

        db.refresh(section)
        self._invalidate_section_listings(section.chapter_id, section.id)
        logger.info(f"Section created: {section.id} in chapter {section.chapter_id}")
        return section

    def update_section(self, db: Session, section_id: UUID, data: SectionUpdate) -> Section:
        section = self.get_section(db, section_id)
        changes = data.model_dump(exclude_unset=True)

        previous_chapter_id = section.chapter_id
        if changes.get("chapter_id") is not None and changes["chapter_id"] != previous_chapter_id:
            self.get_chapter(db, changes["chapter_id"])

        for field, value in changes.items():
            if field in ("mood", "tags") and value is None:
                value = []
            setattr(section, field, value)

        db.commit()
        db.refresh(section)

        self._invalidate_section_listings(previous_chapter_id)
        if section.chapter_id != previous_chapter_id:
            self._invalidate_section_listings(section.chapter_id)
        logger.info(f"Section updated: {section.id}")
        return section

    def delete_section(self, db: Session, section_id: UUID) -> None:
        section = self.get_section(db, section_id)
        chapter_id = section.chapter_id

        db.delete(section)
        db.commit()

        self._invalidate_section_listings(chapter_id, section_id)
        logger.info(f"Section deleted with its pages: {section_id}")

    def reorder_sections(self, db: Session, assignments: List[SectionOrder]) -> None:
        """
        Apply new display orders to sections of one chapter, all or nothing

        Args:
            db: Database session
            assignments: (section id, new order) pairs

        Raises:
            ValidationError: empty payload, sections from several chapters,
                duplicate order values (within the payload or against
                sections of the chapter left out of it) or duplicate section ids
            NotFoundError: a referenced section does not exist
        """
        if not assignments:
            raise ValidationError("sectionOrders must be a non-empty array")

        section_ids = [a.id for a in assignments]
        if len(set(section_ids)) != len(section_ids):
            raise ValidationError("Each section may appear only once")

        sections = db.query(Section).filter(Section.id.in_(section_ids)).all()
        if len(sections) != len(section_ids):
            raise NotFoundError("One or more sections not found")

        chapter_ids = {s.chapter_id for s in sections}
        if len(chapter_ids) > 1:
            raise ValidationError("All sections must belong to the same chapter")

        orders = [a.order for a in assignments]
        if len(set(orders)) != len(orders):
            raise ValidationError("Order values must be unique")

        # Sections left out of the payload keep their order, so they count too
        chapter_id = chapter_ids.pop()
        untouched_orders = {
            row[0]
            for row in db.query(Section.order).filter(
                Section.chapter_id == chapter_id,
                Section.id.notin_(section_ids)
            ).all()
        }
        if untouched_orders.intersection(orders):
            raise ValidationError("Order values must be unique")

        by_id = {s.id: s for s in sections}
        for assignment in assignments:
            by_id[assignment.id].order = assignment.order
        db.commit()

        self._invalidate_section_listings(chapter_id)
        logger.info(f"Reordered {len(assignments)} sections in chapter {chapter_id}")

    def _invalidate_section_listings(self, chapter_id: UUID, section_id: UUID = None) -> None:
        keys = [cache_service.all_sections_key(), cache_service.chapter_sections_key(chapter_id)]
        if section_id is not None:
            keys.append(cache_service.section_pages_key(section_id))
        cache_service.delete(*keys)

    # ------------------------------------------------------------------ #
    # Pages
    # ------------------------------------------------------------------ #

    def get_page(self, db: Session, page_id: UUID) -> Page:
        page = db.query(Page).filter(Page.id == page_id).first()
        if not page:
            raise NotFoundError("Page not found")
        return page

    def create_page(self, db: Session, data: PageCreate) -> Page:
        self.get_section(db, data.section_id)

        page = Page(**data.model_dump())
        db.add(page)
        self._commit_page(db, page.section_id, page.page_number)
        db.refresh(page)

        cache_service.delete(cache_service.section_pages_key(page.section_id))
        logger.info(f"Page {page.page_number} created in section {page.section_id}")
        return page

    def update_page(self, db: Session, page_id: UUID, data: PageUpdate) -> Page:
        page = self.get_page(db, page_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(page, field, value)

        self._commit_page(db, page.section_id, page.page_number)
        db.refresh(page)

        cache_service.delete(cache_service.section_pages_key(page.section_id))
        logger.info(f"Page updated: {page.id}")
        return page

    def delete_page(self, db: Session, page_id: UUID) -> None:
        page = self.get_page(db, page_id)
        section_id = page.section_id

        db.delete(page)
        db.commit()

        cache_service.delete(cache_service.section_pages_key(section_id))
        logger.info(f"Page deleted: {page_id} from section {section_id}")

    def _commit_page(self, db: Session, section_id: UUID, page_number: int) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Duplicate page number {page_number} in section {section_id}")
            raise ConflictError("Page number already exists in this section")


# Global instance
content_service = ContentService()
