"""
Redis cache backend with connection pooling.

Uses redis-py's asyncio client. Keys are ``{prefix}{fingerprint}``; entries
expire after ``ttl_seconds`` when set, otherwise they persist.
"""

from typing import Any, Optional

import structlog
from redis.asyncio import ConnectionPool as AsyncConnectionPool
from redis.asyncio import Redis as AsyncRedis

from elelem.cache.base import fingerprint
from elelem.config import Settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """
    Process-wide async Redis connection pool.
    """

    _async_pool: Optional[AsyncConnectionPool] = None

    @classmethod
    def get_async_client(cls, settings: Settings) -> AsyncRedis:
        """
        Get asynchronous Redis client with connection pooling.

        Args:
            settings: Application settings

        Returns:
            AsyncRedis client instance
        """
        if cls._async_pool is None:
            cls._async_pool = AsyncConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            logger.info("Initialized Redis async connection pool")

        return AsyncRedis(connection_pool=cls._async_pool)

    @classmethod
    async def close_async_pool(cls) -> None:
        """Close async connection pool (cleanup on shutdown)."""
        if cls._async_pool is not None:
            await cls._async_pool.disconnect()
            cls._async_pool = None
            logger.info("Closed Redis async connection pool")


class RedisCache:
    """
    ElelemCache stored in Redis.

    Attributes:
        redis: Async Redis client (decode_responses=True expected)
        ttl_seconds: Entry lifetime, None for no expiry
        key_prefix: Namespace prepended to every fingerprint
    """

    def __init__(
        self,
        redis: AsyncRedis,
        ttl_seconds: Optional[int] = None,
        key_prefix: str = "elelem:",
    ):
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        return cls(
            RedisClient.get_async_client(settings),
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            key_prefix=settings.CACHE_KEY_PREFIX,
        )

    def _redis_key(self, key: Any) -> str:
        return f"{self.key_prefix}{fingerprint(key)}"

    async def read(self, key: Any) -> Optional[str]:
        value = await self.redis.get(self._redis_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def write(self, key: Any, value: str) -> None:
        redis_key = self._redis_key(key)
        if self.ttl_seconds is not None:
            await self.redis.set(redis_key, value, ex=self.ttl_seconds)
        else:
            await self.redis.set(redis_key, value)
        logger.debug("Cache entry written", key=redis_key, ttl_seconds=self.ttl_seconds)

    def __repr__(self) -> str:
        return f"RedisCache(prefix={self.key_prefix!r}, ttl_seconds={self.ttl_seconds})"
