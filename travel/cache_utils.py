"""
Cache utilities for the travel and landing apps
Provides helper functions for caching data
"""

import hashlib
from django.core.cache import cache
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


def get_cache_key(prefix, *args, **kwargs):
    """
    Generate a unique cache key from prefix and arguments

    Example:
        get_cache_key('landing', section='hero')
        → 'landing:section:hero'
    """
    parts = [prefix]

    for arg in args:
        parts.append(str(arg))

    # Sorted for consistency
    for key in sorted(kwargs.keys()):
        value = kwargs[key]
        if value is not None:
            parts.append(f"{key}:{value}")

    cache_key = ':'.join(parts)

    # Hash if too long (memcached has 250 char limit)
    if len(cache_key) > 200:
        hash_suffix = hashlib.md5(cache_key.encode()).hexdigest()[:8]
        cache_key = f"{prefix}:{hash_suffix}"

    return cache_key


def get_or_set_cache(key, callback, timeout=None):
    """
    Get value from cache, or compute and cache it

    Args:
        key: Cache key
        callback: Function to call if cache miss
        timeout: Cache timeout in seconds
    """
    value = cache.get(key)

    if value is not None:
        logger.debug(f"Cache HIT: {key}")
        return value

    logger.debug(f"Cache MISS: {key}")
    value = callback()

    if timeout is None:
        timeout = settings.CACHE_TTL.get('default', 300)

    cache.set(key, value, timeout)
    return value


def invalidate_cache(keys=None):
    """
    Invalidate specific cache keys

    Example:
        invalidate_cache(keys=['categories:tree', 'landing:section:hero'])
    """
    for key in keys or []:
        cache.delete(key)
        logger.info(f"Cache invalidated: {key}")
