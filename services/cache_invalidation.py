"""
Cache Invalidation Side Channel

Catalogue mutations change what the public listing pages show. The engine does
not hold any cache itself: after a mutation commits it emits the affected
named keys (see enums/cache_key.py) to every registered subscriber.

Subscribers are async callables taking a list of CacheKey. A failing subscriber
is logged and skipped; invalidation never fails the mutation that triggered it.

The bundled RedisCacheInvalidator deletes "<CACHE_KEY_PREFIX>:<key>" entries
from a shared Redis instance used by the presentation layer.
"""

import logging
from typing import Awaitable, Callable, Iterable

from redis.asyncio import Redis
from redis.exceptions import RedisError

import config
from enums.cache_key import CacheKey

logger = logging.getLogger(__name__)

CacheSubscriber = Callable[[list[CacheKey]], Awaitable[None]]


class CacheInvalidationService:
    _subscribers: list[CacheSubscriber] = []

    @classmethod
    def subscribe(cls, subscriber: CacheSubscriber) -> None:
        if subscriber not in cls._subscribers:
            cls._subscribers.append(subscriber)

    @classmethod
    def unsubscribe(cls, subscriber: CacheSubscriber) -> None:
        if subscriber in cls._subscribers:
            cls._subscribers.remove(subscriber)

    @classmethod
    def clear_subscribers(cls) -> None:
        cls._subscribers = []

    @classmethod
    async def emit(cls, keys: Iterable[CacheKey]) -> list[CacheKey]:
        """
        Notify every subscriber that the given cache entries are stale.

        Keys are de-duplicated, order preserved. Returns the emitted keys.
        """
        unique_keys = list(dict.fromkeys(keys))
        if not unique_keys:
            return []

        if not getattr(config, "CACHE_INVALIDATION_ENABLED", True):
            logger.debug(f"Cache invalidation disabled, dropping keys {[key.value for key in unique_keys]}")
            return unique_keys

        logger.info(f"Invalidating cache keys: {', '.join(key.value for key in unique_keys)}")
        for subscriber in list(cls._subscribers):
            try:
                await subscriber(unique_keys)
            except Exception as e:
                logger.error(f"Cache invalidation subscriber {subscriber!r} failed: {e}")
        return unique_keys


class RedisCacheInvalidator:
    """Subscriber that deletes the named entries from Redis."""

    def __init__(self, redis: Redis, prefix: str | None = None):
        self.redis = redis
        self.prefix = prefix if prefix is not None else config.CACHE_KEY_PREFIX

    def redis_key(self, key: CacheKey) -> str:
        return f"{self.prefix}:{key.value}"

    async def __call__(self, keys: list[CacheKey]) -> None:
        redis_keys = [self.redis_key(key) for key in keys]
        try:
            deleted = await self.redis.delete(*redis_keys)
        except RedisError as e:
            logger.warning(f"Redis cache invalidation failed for {redis_keys}: {e}")
            raise
        logger.debug(f"Deleted {deleted} cached entries: {redis_keys}")

    @staticmethod
    def from_config() -> "RedisCacheInvalidator":
        redis = Redis(host=config.REDIS_HOST, port=config.REDIS_PORT, password=config.REDIS_PASSWORD)
        return RedisCacheInvalidator(redis)
