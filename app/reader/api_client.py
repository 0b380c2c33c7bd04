"""
HTTP client used by the reader to talk to the journal API
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx

from app.exceptions import InvalidSessionError
from app.reader.session import ReaderSession

logger = logging.getLogger(__name__)


class ReaderApiError(Exception):
    """Non-2xx response that is not a session invalidation"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ReaderApiClient:
    """
    Thin JSON client bound to one reader session.

    Any response flagged with invalidSession ends the session locally before
    InvalidSessionError is raised, mirroring a forced logout.
    """

    def __init__(
        self,
        session: ReaderSession,
        base_url: str = "http://localhost:8000",
        http: Optional[httpx.Client] = None,
        timeout_s: float = 10.0,
    ) -> None:
        self.session = session
        self.http = http or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout_s)

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        r = self.http.request(method, path, **kwargs)

        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {}
            if not isinstance(payload, dict):
                payload = {}

            message = payload.get("error") or r.reason_phrase
            if payload.get("invalidSession"):
                self.session.logout("invalid session")
                raise InvalidSessionError(message)
            raise ReaderApiError(r.status_code, message)

        self.session.touch()

        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    @property
    def _user_params(self) -> Dict[str, str]:
        return {"userId": str(self.session.user_id)}

    # content

    def get_section(self, section_id: UUID) -> Dict[str, Any]:
        return self._request("GET", f"/api/sections/{section_id}")

    def get_pages(self, section_id: UUID) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/sections/{section_id}/pages")

    def get_chapter_sections(self, chapter_id: UUID) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/chapters/{chapter_id}/sections")

    # progress

    def get_progress(self, section_id: UUID) -> Optional[Dict[str, Any]]:
        return self._request("GET", f"/api/sections/{section_id}/progress", params=self._user_params)

    def save_progress(
        self,
        section_id: UUID,
        page_id: Optional[UUID],
        current_page_number: int,
        completed: bool,
    ) -> Dict[str, Any]:
        payload = {
            "userId": str(self.session.user_id),
            "sectionId": str(section_id),
            "pageId": str(page_id) if page_id else None,
            "currentPageNumber": current_page_number,
            "completed": completed,
        }
        return self._request("POST", "/api/reading-progress", json=payload)

    def get_last_read(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/api/reading-progress/last", params=self._user_params)

    def get_chapter_progress(self, chapter_id: UUID) -> Dict[str, Any]:
        return self._request("GET", f"/api/chapters/{chapter_id}/progress", params=self._user_params)

    # engagement

    def track_event(
        self,
        page_id: UUID,
        section_id: UUID,
        chapter_id: UUID,
        event_type: str,
        duration_ms: int,
    ) -> Dict[str, Any]:
        payload = {
            "userId": str(self.session.user_id),
            "pageId": str(page_id),
            "sectionId": str(section_id),
            "chapterId": str(chapter_id),
            "eventType": event_type,
            "duration": duration_ms,
        }
        return self._request("POST", "/api/analytics", json=payload)

    def like(self, section_id: UUID) -> Dict[str, Any]:
        return self._request(
            "POST", f"/api/sections/{section_id}/like", json={"userId": str(self.session.user_id)}
        )

    def unlike(self, section_id: UUID) -> None:
        self._request("DELETE", f"/api/sections/{section_id}/like", params=self._user_params)
