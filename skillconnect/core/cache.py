"""
skillconnect/core/cache.py

Async Redis Cache

Owns the shared async Redis client and the helpers every service layer uses:
- Namespaced key builders (plain and paginated)
- JSON read/write that never fails the request on cache errors
- Pattern-based invalidation for list/search keys
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from skillconnect.core.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Redis Client Initialization
# ---------------------------------------------------
redis_client: redis.Redis | None = None  # type: ignore[type-arg]

try:
    redis_client = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        decode_responses=True,
    )
    logger.info(
        f"[REDIS ASYNC] Initialized async Redis client for {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
    )
except redis.RedisError as e:
    logger.error(f"[REDIS ASYNC] Initialization failed: {e}")
    redis_client = None

CACHE_PREFIX = settings.CACHE_PREFIX
DEFAULT_CACHE_TTL = settings.DEFAULT_CACHE_TTL


# ---------------------------------------------------
# Key Builders
# ---------------------------------------------------
def cache_key(namespace: str, identifier: Any) -> str:
    return f"{CACHE_PREFIX}{namespace}:{identifier}"


def paginated_cache_key(namespace: str, identifier: Any, skip: int, limit: int) -> str:
    return f"{CACHE_PREFIX}{namespace}:{identifier}:skip={skip}:limit={limit}"


# ---------------------------------------------------
# Read / Write / Invalidate
# ---------------------------------------------------
async def cache_get_json(cache: Any, key: str) -> Any | None:
    """Return the decoded JSON value for `key`, or None on miss or cache error."""
    if not cache:
        return None
    try:
        data = await cache.get(key)
    except Exception as e:
        logger.error(f"[CACHE READ ERROR] {key}: {e}")
        return None
    if not data:
        return None
    logger.debug(f"[CACHE HIT] {key}")
    return json.loads(data)


async def cache_set_json(cache: Any, key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> None:
    if not cache:
        return
    try:
        await cache.set(key, json.dumps(value), ex=ttl)
        logger.debug(f"[CACHE SET] {key}")
    except Exception as e:
        logger.error(f"[CACHE WRITE ERROR] {key}: {e}")


async def invalidate(cache: Any, keys: list[str], patterns: list[str] | None = None) -> None:
    """Delete explicit keys and every key matching the given patterns."""
    if not cache:
        return
    try:
        if keys:
            await cache.delete(*keys)
        deleted = 0
        for pattern in patterns or []:
            async for key in cache.scan_iter(match=pattern):
                await cache.delete(key)
                deleted += 1
        logger.debug(f"[CACHE] Invalidated keys={keys} patterns={patterns} ({deleted} matched)")
    except Exception as e:
        logger.error(f"[CACHE ERROR] Invalidation failed for keys={keys} patterns={patterns}: {e}")
