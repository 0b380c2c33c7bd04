"""
Redis cache utility for read-mostly content listings
"""
import redis
import json
import logging
from typing import Optional, Any
from uuid import UUID
from app.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-based cache for chapter, section and page listings

    Only admin-authored content is cached. Reading progress, likes and the
    chapter completion aggregate are always read from the database.
    """

    def __init__(self, url: str = None, enabled: bool = None):
        self.redis_client = None

        enabled = settings.CACHE_ENABLED if enabled is None else enabled
        if not enabled:
            logger.info("Content cache disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    @staticmethod
    def chapters_key() -> str:
        return "content:chapters"

    @staticmethod
    def all_sections_key() -> str:
        return "content:sections"

    @staticmethod
    def chapter_sections_key(chapter_id: UUID) -> str:
        return f"content:chapter:{chapter_id}:sections"

    @staticmethod
    def section_pages_key(section_id: UUID) -> str:
        return f"content:section:{section_id}:pages"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.debug(f"Cache hit: {key}")
                return json.loads(value)
            logger.debug(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(
        self,
        key: str,
        value: Any,
        ttl: int = None
    ) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)

        Returns:
            Success status
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.CONTENT_CACHE_TTL
            serialized = json.dumps(value)
            self.redis_client.setex(key, ttl, serialized)
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def delete(self, *keys: str) -> bool:
        """Delete keys from cache"""
        if not self.redis_client or not keys:
            return False

        try:
            self.redis_client.delete(*keys)
            logger.debug(f"Cache delete: {', '.join(keys)}")
            return True
        except Exception as e:
            logger.error(f"Cache delete error: {str(e)}")
            return False

    def clear_content_cache(self) -> bool:
        """Drop every cached listing; used after cascading deletes"""
        if not self.redis_client:
            return False

        try:
            keys = self.redis_client.keys("content:*")
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} content cache entries")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService()
