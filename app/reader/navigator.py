"""
Section navigation state machine for the reader

Tracks which page of which section is on screen, persists reading progress
on every page change and decides where "next" leads at section boundaries.
"""

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

import httpx

from app.exceptions import InvalidSessionError
from app.reader.api_client import ReaderApiError
from app.reader.session import ReaderSession
from app.schemas.progress import CompletionPolicy

logger = logging.getLogger(__name__)

# Failures that must not interrupt reading
WRITE_ERRORS = (ReaderApiError, httpx.HTTPError)


class NavigationOutcome(str, Enum):
    NONE = "none"
    PAGE = "page"
    NEXT_SECTION = "next_section"
    HOME = "home"


class SectionNavigator:
    """
    Reader-side controller for one reading session.

    State is viewing(page_index) with 0 <= page_index < total_pages. Every
    change of page_index, including the first page shown after opening a
    section, writes progress with completed = is_last_page. Writes are
    optimistic: a failed write is logged and navigation carries on.

    With the default overwrite policy, going back to page 1 of a finished
    section writes completed=false. The monotonic policy keeps sending
    completed=true for sections this navigator has seen completed.
    """

    def __init__(
        self,
        session: ReaderSession,
        api: Any,
        completion_policy: str = CompletionPolicy.OVERWRITE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if completion_policy not in CompletionPolicy.ALL:
            raise ValueError(f"Unknown completion policy: {completion_policy}")

        self.session = session
        self.api = api
        self.completion_policy = completion_policy
        self._clock = clock

        self.section: Optional[Dict[str, Any]] = None
        self.pages: List[Dict[str, Any]] = []
        self.chapter_sections: List[Dict[str, Any]] = []
        self.page_index = 0
        self.edit_mode = False
        self.location = "section"

        self._progress_restored = False
        self._completion_sent = False
        self._page_started_at: Optional[float] = None
        self._previous_page_id: Optional[str] = None
        self._completed_sections: Set[str] = set()

    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #

    @property
    def section_id(self) -> Optional[str]:
        return self.section["id"] if self.section else None

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Optional[Dict[str, Any]]:
        if 0 <= self.page_index < self.total_pages:
            return self.pages[self.page_index]
        return None

    @property
    def is_first_page(self) -> bool:
        return self.page_index == 0

    @property
    def is_last_page(self) -> bool:
        return self.page_index == self.total_pages - 1

    @property
    def section_position(self) -> int:
        for i, s in enumerate(self.chapter_sections):
            if s["id"] == self.section_id:
                return i
        return -1

    @property
    def is_last_section_in_chapter(self) -> bool:
        return bool(self.chapter_sections) and self.section_position == len(self.chapter_sections) - 1

    @property
    def next_section(self) -> Optional[Dict[str, Any]]:
        position = self.section_position
        if 0 <= position < len(self.chapter_sections) - 1:
            return self.chapter_sections[position + 1]
        return None

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def open_section(self, section_id: Any) -> None:
        """
        Show a section from its first page, or from the saved position

        Any change of section identity starts fresh: page index 0, no
        restoration done yet, no completion event sent yet.
        """
        self._flush_dwell_time()

        self.section = self.api.get_section(section_id)
        self.pages = self._sorted(self.api.get_pages(section_id))
        self.chapter_sections = sorted(
            self.api.get_chapter_sections(self.section["chapterId"]),
            key=lambda s: s["order"],
        )

        self.page_index = 0
        self.edit_mode = False
        self.location = "section"
        self._progress_restored = False
        self._completion_sent = False
        self._page_started_at = None
        self._previous_page_id = None

        saved = self._load_saved_progress()
        if saved is not None:
            self._restore(saved)

        logger.debug(f"Opened section {self.section_id} at page index {self.page_index}")
        self._on_page_change()

    def restore_progress(self, saved: Optional[Dict[str, Any]]) -> bool:
        """
        Jump to a saved position, at most once per section visit

        Refetched progress arriving after the first restoration is ignored so
        the reader is not thrown back while paging.
        """
        before = self.page_index
        if not self._restore(saved):
            return False
        if self.page_index != before:
            self._on_page_change()
        return True

    def prev_page(self) -> NavigationOutcome:
        if self.page_index <= 0:
            return NavigationOutcome.NONE

        self.page_index -= 1
        self.edit_mode = False
        self.session.touch()
        self._on_page_change()
        return NavigationOutcome.PAGE

    def next_page(self) -> NavigationOutcome:
        if self.total_pages > 0 and not self.is_last_page:
            self.page_index += 1
            self.edit_mode = False
            self.session.touch()
            self._on_page_change()
            return NavigationOutcome.PAGE

        self.session.touch()
        upcoming = self.next_section
        if upcoming is None:
            # Last page of the last section: back to the chapter list
            self._flush_dwell_time()
            self.location = "home"
            return NavigationOutcome.HOME

        self.open_section(upcoming["id"])
        return NavigationOutcome.NEXT_SECTION

    def refresh_pages(self, pages: List[Dict[str, Any]]) -> None:
        """
        Replace the page list after a refetch (an admin may have deleted pages)

        A page index beyond the new end is clamped to the last page.
        """
        previous_page_id = self.current_page["id"] if self.current_page else None

        self.pages = self._sorted(pages)
        if self.total_pages == 0:
            self.page_index = 0
        elif self.page_index >= self.total_pages:
            self.page_index = self.total_pages - 1

        current_page_id = self.current_page["id"] if self.current_page else None
        if current_page_id is not None and current_page_id != previous_page_id:
            self._on_page_change()

    def enter_edit_mode(self) -> None:
        if self.session.is_admin:
            self.edit_mode = True

    def close(self) -> None:
        """Leaving the reader: report dwell time on the page still on screen"""
        self._flush_dwell_time()

    # ------------------------------------------------------------------ #
    # Side effects
    # ------------------------------------------------------------------ #

    @staticmethod
    def _sorted(pages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return sorted(pages or [], key=lambda p: p["pageNumber"])

    def _restore(self, saved: Optional[Dict[str, Any]]) -> bool:
        if not saved or self._progress_restored or self.total_pages == 0:
            return False

        if saved.get("completed"):
            self._completed_sections.add(self.section_id)

        saved_index = max(0, (saved.get("currentPageNumber") or 1) - 1)
        self.page_index = min(saved_index, self.total_pages - 1)
        self._progress_restored = True
        return True

    def _load_saved_progress(self) -> Optional[Dict[str, Any]]:
        if not self.session.is_active:
            return None
        try:
            return self.api.get_progress(self.section_id)
        except InvalidSessionError:
            self._end_session()
            return None
        except WRITE_ERRORS as e:
            logger.warning(f"Could not load saved progress for section {self.section_id}: {e}")
            return None

    def _on_page_change(self) -> None:
        page = self.current_page
        if page is None or not self.session.is_active:
            return

        self._flush_dwell_time()
        self._page_started_at = self._clock()
        self._previous_page_id = page["id"]

        is_last_page = self.is_last_page
        completed = is_last_page
        if (
            self.completion_policy == CompletionPolicy.MONOTONIC
            and self.section_id in self._completed_sections
        ):
            completed = True

        self._save_progress(page, completed)

        if is_last_page:
            self._completed_sections.add(self.section_id)
            if not self._completion_sent:
                self._completion_sent = True
                self._track(page["id"], "section_completed", 0)

    def _flush_dwell_time(self) -> None:
        if self._previous_page_id is None or self._page_started_at is None:
            return

        duration_ms = int((self._clock() - self._page_started_at) * 1000)
        page_id = self._previous_page_id
        self._previous_page_id = None
        self._page_started_at = None
        self._track(page_id, "page_view", duration_ms)

    def _save_progress(self, page: Dict[str, Any], completed: bool) -> None:
        try:
            self.api.save_progress(
                self.section_id,
                page["id"],
                page["pageNumber"],
                completed,
            )
        except InvalidSessionError:
            self._end_session()
        except WRITE_ERRORS as e:
            logger.error(
                f"Failed to save reading progress for section {self.section_id}, "
                f"page {page['pageNumber']}: {e}"
            )

    def _track(self, page_id: str, event_type: str, duration_ms: int) -> None:
        if self.section is None or not self.session.is_active:
            return
        try:
            self.api.track_event(
                page_id,
                self.section_id,
                self.section["chapterId"],
                event_type,
                duration_ms,
            )
        except InvalidSessionError:
            self._end_session()
        except WRITE_ERRORS as e:
            logger.warning(f"Failed to send {event_type} event for page {page_id}: {e}")

    def _end_session(self) -> None:
        logger.warning(f"Session of user {self.session.user_id} is no longer valid, stopping writes")
        self.session.logout("invalid session")
