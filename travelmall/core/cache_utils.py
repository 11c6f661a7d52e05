"""
Caching utilities for storefront queries
Uses Redis (django-redis) in production, local memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
STOREFRONT_HOME_CACHE_TTL = getattr(settings, 'STOREFRONT_CACHE_TTL', 300)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
REPORTS_CACHE_TTL = 600  # 10 minutes

STOREFRONT_HOME_KEY = 'storefront_home'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Note: This requires Redis with SCAN command support; other backends
    rely on TTL expiry
    """
    if not getattr(settings, 'REDIS_URL', ''):
        logger.debug(f"Pattern invalidation skipped for {pattern}: no Redis cache configured")
        return
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def get_cached_storefront_home():
    return cache.get(STOREFRONT_HOME_KEY)


def cache_storefront_home(data, ttl=STOREFRONT_HOME_CACHE_TTL):
    cache.set(STOREFRONT_HOME_KEY, data, ttl)
    logger.debug("Cached storefront home payload")


def invalidate_storefront_cache():
    """Invalidate storefront home payload and product listings"""
    try:
        cache.delete(STOREFRONT_HOME_KEY)
        invalidate_cache_pattern("products_list")
        logger.info("Invalidated storefront cache")
    except Exception as e:
        logger.warning(f"Could not invalidate storefront cache: {str(e)}")


def invalidate_reports_cache():
    invalidate_cache_pattern("sales_report")
