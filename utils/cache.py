import redis
import json
import logging
from typing import Optional, Any

logger = logging.getLogger(__name__)

# Cache TTL settings (in seconds)
CACHE_TTL_SHORT = 300  # 5 minutes
CACHE_TTL_MEDIUM = 600  # 10 minutes

BROWSE_CACHE_PATTERN = "users:browse:*"

# Set by init_cache(); None means caching and rate limiting are disabled
redis_client = None


def _warn_if_rate_limit_disabled(app):
    if app.config.get('RATE_LIMIT_ENABLED'):
        logger.warning("RATE_LIMIT_ENABLED is set but Redis is unavailable; auth rate limiting is off")


def init_cache(app):
    """Connect to REDIS_URL if configured; degrade to no caching otherwise"""
    global redis_client

    redis_url = app.config.get('REDIS_URL')
    if not redis_url:
        logger.info("REDIS_URL not set; caching disabled")
        redis_client = None
        _warn_if_rate_limit_disabled(app)
        return None

    try:
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
        redis_client = client
        logger.info("Redis connected successfully at %s", redis_url)
    except redis.RedisError as e:
        logger.warning("Redis connection failed: %s. Caching will be disabled.", e)
        redis_client = None
        _warn_if_rate_limit_disabled(app)
    return redis_client


class CacheManager:
    """Manager for Redis caching operations"""

    @staticmethod
    def client():
        return redis_client

    @staticmethod
    def is_available() -> bool:
        """Check if Redis is available"""
        return redis_client is not None

    @staticmethod
    def get(key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/error
        """
        if not CacheManager.is_available():
            return None

        try:
            value = redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Cache get error for key '{key}': {str(e)}")
            return None

    @staticmethod
    def set(key: str, value: Any, ttl: int = CACHE_TTL_MEDIUM) -> bool:
        """
        Set value in cache with TTL

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not CacheManager.is_available():
            return False

        try:
            redis_client.setex(
                key,
                ttl,
                json.dumps(value, default=str)  # default=str handles datetime, etc.
            )
            logger.debug(f"Cached key '{key}' with TTL {ttl}s")
            return True
        except redis.RedisError as e:
            logger.error(f"Cache set error for key '{key}': {str(e)}")
            return False

    @staticmethod
    def delete_pattern(pattern: str) -> int:
        """
        Delete all keys matching a pattern

        Args:
            pattern: Pattern to match (e.g., 'users:browse:*')

        Returns:
            Number of keys deleted
        """
        if not CacheManager.is_available():
            return 0

        try:
            keys = list(redis_client.scan_iter(match=pattern))
            if keys:
                deleted = redis_client.delete(*keys)
                logger.debug(f"Deleted {deleted} cache keys matching '{pattern}'")
                return deleted
            return 0
        except redis.RedisError as e:
            logger.error(f"Cache delete pattern error for '{pattern}': {str(e)}")
            return 0

    @staticmethod
    def invalidate_user_cache(user_id: str):
        """
        Invalidate all cache entries that embed a user's profile or ratings

        Browse pages are dropped wholesale since they are sorted by rating.
        """
        patterns = [
            build_rating_average_cache_key(user_id),
            BROWSE_CACHE_PATTERN,
        ]

        for pattern in patterns:
            CacheManager.delete_pattern(pattern)

        logger.info(f"Invalidated cache for user {user_id}")


# Cache key builders
def build_browse_cache_key(page: int, per_page: int, skill: Optional[str],
                           location: Optional[str], search: Optional[str]) -> str:
    """Build cache key for a page of the public user directory"""
    return f"users:browse:{page}:{per_page}:{skill or ''}:{location or ''}:{search or ''}".lower()


def build_rating_average_cache_key(user_id: str) -> str:
    """Build cache key for a user's rating summary"""
    return f"ratings:average:{user_id}"
