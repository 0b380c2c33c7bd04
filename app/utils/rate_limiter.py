"""
Rate limiting middleware for API endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Callable, Deque, Dict
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding window rate limiter

    Readers post a progress write and an analytics event on every page turn,
    so clients are keyed by userId when the request carries one.
    """

    def __init__(
        self,
        requests_per_minute: int = 120,
        requests_per_hour: int = 3000,
        enabled: bool = True,
        clock: Callable[[], float] = time.time
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.enabled = enabled
        self._clock = clock

        # {client_id: deque of request timestamps}, oldest first
        self.minute_window: Dict[str, Deque[float]] = defaultdict(deque)
        self.hour_window: Dict[str, Deque[float]] = defaultdict(deque)

    def _get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        user_id = request.query_params.get("userId")
        if user_id:
            return f"user:{user_id}"

        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    @staticmethod
    def _cleanup_old_entries(tracker: Dict[str, Deque[float]], cutoff: float) -> None:
        """Drop timestamps older than the window, and clients with none left"""
        for client_id in list(tracker.keys()):
            window = tracker[client_id]
            while window and window[0] <= cutoff:
                window.popleft()

            if not window:
                del tracker[client_id]

    @property
    def tracked_clients(self) -> int:
        return len(set(self.minute_window) | set(self.hour_window))

    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits

        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        if not self.enabled:
            return

        client_id = self._get_client_id(request)
        now = self._clock()

        self._cleanup_old_entries(self.minute_window, now - 60)
        self._cleanup_old_entries(self.hour_window, now - 3600)

        if len(self.minute_window.get(client_id, ())) >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded (minute): {client_id}")
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Limit: {self.requests_per_minute} requests per minute"
            )

        if len(self.hour_window.get(client_id, ())) >= self.requests_per_hour:
            logger.warning(f"Rate limit exceeded (hour): {client_id}")
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Limit: {self.requests_per_hour} requests per hour"
            )

        minute = self.minute_window[client_id]
        hour = self.hour_window[client_id]
        minute.append(now)
        hour.append(now)

        logger.debug(f"Rate limit check passed: {client_id} (minute: {len(minute)}, hour: {len(hour)})")


# Global instance
from app.config import settings
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    enabled=settings.RATE_LIMIT_ENABLED
)
