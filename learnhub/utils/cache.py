"""
Redis cache utility for leaderboard reads
"""
import redis
import json
import logging
from typing import Optional, Any
from learnhub.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-based read-through cache

    Only read-only views (the leaderboard) are cached. Point totals used for
    read-modify-write always come from the database.
    """

    LEADERBOARD_PREFIX = "leaderboard"

    def __init__(self, url: str = None):
        try:
            self.redis_client = redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def leaderboard_key(self, limit: int) -> str:
        return f"{self.LEADERBOARD_PREFIX}:top:{limit}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Returns:
            Cached value or None (also None on any Redis error)
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

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds (default from settings)
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.LEADERBOARD_CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value, default=str))
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def clear_leaderboard_cache(self) -> bool:
        """Drop every cached leaderboard page"""
        if not self.redis_client:
            return False

        try:
            keys = list(self.redis_client.scan_iter(match=f"{self.LEADERBOARD_PREFIX}:*"))
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} leaderboard cache entries")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService()
