"""
Reader session: who is reading, passed explicitly to the client and navigator
"""
import asyncio
import logging
import time
from typing import Callable, List, Optional
from uuid import UUID

from app.config import settings

logger = logging.getLogger(__name__)


class ReaderSession:
    """
    Logged-in reader identity with an inactivity timeout

    The session ends when logout() is called (for example after the server
    reports invalidSession) or when no activity was recorded for
    inactivity_timeout seconds.
    """

    def __init__(
        self,
        user_id: UUID,
        username: Optional[str] = None,
        role: str = "reader",
        inactivity_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.user_id = user_id
        self.username = username
        self.role = role
        self.inactivity_timeout = (
            settings.SESSION_INACTIVITY_TIMEOUT_SECONDS
            if inactivity_timeout is None else inactivity_timeout
        )
        self._clock = clock
        self._last_activity = clock()
        self._logged_out = False
        self.logout_reason: Optional[str] = None
        self._logout_callbacks: List[Callable[["ReaderSession"], None]] = []

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def expires_in(self) -> float:
        """Seconds until the inactivity timeout fires (0 when already due)"""
        return max(0.0, self._last_activity + self.inactivity_timeout - self._clock())

    @property
    def is_active(self) -> bool:
        if self._logged_out:
            return False
        if self.expires_in <= 0:
            self.logout("inactivity")
            return False
        return True

    def touch(self) -> None:
        """Record reader activity, pushing the inactivity deadline back"""
        if self.is_active:
            self._last_activity = self._clock()

    def on_logout(self, callback: Callable[["ReaderSession"], None]) -> None:
        self._logout_callbacks.append(callback)

    def logout(self, reason: str = "logout") -> None:
        if self._logged_out:
            return

        self._logged_out = True
        self.logout_reason = reason
        logger.info(f"Reader session ended for user {self.user_id}: {reason}")

        for callback in self._logout_callbacks:
            callback(self)

    async def watch_inactivity(self) -> None:
        """
        Sleep until the inactivity deadline and end the session

        Activity recorded meanwhile moves the deadline, so the watcher sleeps
        again instead of logging out. Cancel the task to stop watching.
        """
        while not self._logged_out:
            remaining = self.expires_in
            if remaining <= 0:
                self.logout("inactivity")
                return
            await asyncio.sleep(remaining)
