"""
Cache backends.

- base.py: ElelemCache protocol, fingerprint(), NullCache
- memory.py: InMemoryCache
- redis_cache.py: RedisCache and the pooled RedisClient

get_cache() picks a backend: Redis when a client is given, then a custom
cache, then the null cache that never hits.
"""

from typing import Optional

from redis.asyncio import Redis as AsyncRedis

from elelem.cache.base import ElelemCache, NullCache, fingerprint
from elelem.cache.memory import InMemoryCache
from elelem.cache.redis_cache import RedisCache, RedisClient
from elelem.config import Settings


def get_cache(
    redis: Optional[AsyncRedis] = None,
    custom: Optional[ElelemCache] = None,
    ttl_seconds: Optional[int] = None,
) -> ElelemCache:
    """
    Resolve the cache to use from the available backends.

    Args:
        redis: Async Redis client
        custom: Caller-supplied ElelemCache implementation
        ttl_seconds: Entry lifetime for the Redis backend
    """
    if redis is not None:
        return RedisCache(redis, ttl_seconds=ttl_seconds)
    if custom is not None:
        return custom
    return NullCache()


def cache_from_settings(settings: Settings) -> ElelemCache:
    """Build the cache selected by CACHE_BACKEND."""
    if settings.CACHE_BACKEND == "redis":
        return RedisCache.from_settings(settings)
    if settings.CACHE_BACKEND == "memory":
        return InMemoryCache()
    return NullCache()


__all__ = [
    "ElelemCache",
    "NullCache",
    "InMemoryCache",
    "RedisCache",
    "RedisClient",
    "fingerprint",
    "get_cache",
    "cache_from_settings",
]
