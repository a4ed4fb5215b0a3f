"""Generic Redis cache operations"""
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from splitledger.config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Generic service for Redis cache operations.

    Cache failures never fail the caller: they are logged and reported as a
    miss / False.
    """

    _redis_client: Optional[redis.Redis] = None

    @classmethod
    async def get_redis_client(cls) -> redis.Redis:
        """
        Get or create Redis client singleton.

        Returns:
            Redis client instance
        """
        if cls._redis_client is None:
            cls._redis_client = redis.from_url(
                get_settings().redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        return cls._redis_client

    @classmethod
    async def get(cls, key: str) -> Optional[str]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value if exists, None otherwise
        """
        try:
            client = await cls.get_redis_client()
            return await client.get(key)
        except RedisError as e:
            logger.warning("Cache get error for key '%s': %s", key, e)
            return None

    @classmethod
    async def set(cls, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: settings.cache_ttl_seconds)

        Returns:
            True if successful, False otherwise
        """
        if ttl is None:
            ttl = get_settings().cache_ttl_seconds

        try:
            client = await cls.get_redis_client()
            await client.setex(key, ttl, value)
            return True
        except RedisError as e:
            logger.warning("Cache set error for key '%s': %s", key, e)
            return False
