"""Redis connection pool and fault-tolerant cache helpers.

The cache is an optimisation only: the helpers here log backend failures
and degrade to a miss / no-op instead of raising to the caller. Only an
explicit ``cache_invalidate_all(raise_errors=True)`` surfaces them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from .cache_keys import CACHE_NAMESPACES

logger = logging.getLogger(__name__)

redis_pool: redis.Redis | None = None

CACHE_ERRORS = (redis.RedisError, OSError)


async def init_redis(url: str, socket_timeout: float = 2.0) -> None:
    """Create the shared Redis connection pool."""
    global redis_pool
    redis_pool = redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )
    logger.info("Redis pool initialised: %s", url.rsplit("@", 1)[-1])


async def close_redis() -> None:
    """Gracefully close the Redis pool."""
    global redis_pool
    if redis_pool is not None:
        await redis_pool.aclose()
        redis_pool = None
        logger.info("Redis pool closed")


async def get_redis_pool() -> redis.Redis:
    """Return the active Redis connection (raises if not initialised)."""
    if redis_pool is None:
        msg = "Redis pool has not been initialised"
        raise RuntimeError(msg)
    return redis_pool


async def cache_get(key: str) -> Any | None:
    """Retrieve a JSON-deserialised value from Redis, or *None* on miss."""
    pool = await get_redis_pool()
    try:
        raw = await pool.get(key)
    except CACHE_ERRORS as exc:
        logger.warning("Cache read failed for %s: %s", key, exc)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding undecodable cache entry %s", key)
        return None


async def cache_set(key: str, value: Any, ttl: int) -> None:
    """Store a JSON-serialised value in Redis with a TTL (best effort)."""
    pool = await get_redis_pool()
    try:
        await pool.set(key, json.dumps(value, default=str), ex=ttl)
    except CACHE_ERRORS as exc:
        logger.warning("Cache write failed for %s: %s", key, exc)


async def cache_invalidate_all(*, raise_errors: bool = False) -> int:
    """Delete every key in this service's namespaces; return how many.

    Backend failures are logged and swallowed unless *raise_errors* is set,
    in which case the Redis error propagates after logging so callers that
    promise a cleared cache can report the failure.
    """
    pool = await get_redis_pool()
    deleted = 0
    try:
        for pattern in CACHE_NAMESPACES:
            batch: list[str] = []
            async for key in pool.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += await pool.delete(*batch)
                    batch.clear()
            if batch:
                deleted += await pool.delete(*batch)
    except CACHE_ERRORS as exc:
        logger.error("Cache invalidation failed after %d keys: %s", deleted, exc)
        if raise_errors:
            raise
        return deleted
    logger.info("Cache invalidated: %d keys removed", deleted)
    return deleted
