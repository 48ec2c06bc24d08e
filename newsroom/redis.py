"""Redis connection management and small JSON cache helpers."""

import json
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from newsroom.logging_config import get_logger

logger = get_logger(__name__)

_redis: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    """Get the shared Redis connection. Must be initialized first via init_redis()."""
    if _redis is None:
        raise RuntimeError("Redis not initialized; app not started")
    return _redis


async def init_redis(url: str = "redis://localhost:6379/0") -> aioredis.Redis:
    """Initialize the global Redis connection."""
    global _redis
    _redis = aioredis.from_url(url, decode_responses=True)
    await _redis.ping()
    return _redis


async def close_redis() -> None:
    """Close the Redis connection."""
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def cache_get_json(key: str) -> Any | None:
    """Read a cached JSON value; None on miss or when Redis is unavailable."""
    try:
        raw = await get_redis().get(key)
    except RuntimeError:
        return None
    except RedisError as e:
        logger.warning("cache_read_failed", key=key, error=str(e))
        return None
    if raw is None:
        return None
    return json.loads(raw)


async def cache_set_json(key: str, value: Any, ttl_seconds: int) -> None:
    """Store a JSON value with a TTL; silently skipped without Redis."""
    try:
        await get_redis().setex(key, ttl_seconds, json.dumps(value, default=str))
    except RuntimeError:
        return
    except RedisError as e:
        logger.warning("cache_write_failed", key=key, error=str(e))

