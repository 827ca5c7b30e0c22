"""
Redis caching utilities for the Supplies Inventory service.

Caches the dashboard summary between inventory changes. Cache failures are
logged and treated as misses so the service keeps working without Redis.
"""
import json
import logging
from typing import Optional, Any
import redis

from .config import REDIS_URL, CACHE_ENABLED

logger = logging.getLogger(__name__)

# Initialize Redis client
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

DASHBOARD_CACHE_KEY = "inventory:dashboard"


def get_cache(key: str) -> Optional[Any]:
    """
    Get a value from Redis cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found
    """
    if not CACHE_ENABLED:
        return None
    try:
        value = redis_client.get(key)
        if value:
            return json.loads(value)
        return None
    except redis.RedisError as e:
        logger.warning(f"Cache get error: {e}")
        return None

def set_cache(key: str, value: Any, ttl: int = 300) -> bool:
    """
    Set a value in Redis cache with TTL.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time to live in seconds

    Returns:
        True if successful, False otherwise
    """
    if not CACHE_ENABLED:
        return False
    try:
        redis_client.setex(key, ttl, json.dumps(value))
        return True
    except redis.RedisError as e:
        logger.warning(f"Cache set error: {e}")
        return False

def versioned_key(prefix: str) -> Optional[str]:
    """
    Resolve the key under which the current generation of `prefix` lives.

    Each invalidation bumps `{prefix}:version`, so a value computed before an
    invalidation is written under a key no later reader asks for.

    Returns:
        "{prefix}:{version}", or None if caching is disabled or Redis is unreachable
    """
    if not CACHE_ENABLED:
        return None
    try:
        version = redis_client.get(f"{prefix}:version") or 0
        return f"{prefix}:{version}"
    except redis.RedisError as e:
        logger.warning(f"Cache version error: {e}")
        return None

def invalidate(prefix: str) -> bool:
    """
    Retire every value cached under `prefix` by advancing its version.

    Returns:
        True if successful, False otherwise
    """
    if not CACHE_ENABLED:
        return False
    try:
        redis_client.incr(f"{prefix}:version")
        return True
    except redis.RedisError as e:
        logger.warning(f"Cache invalidate error: {e}")
        return False
