"""
Cache invalidation signals
Automatically invalidate storefront/report caches when data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_storefront_cache, invalidate_reports_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

STOREFRONT_MODELS = ['TravelProduct', 'ProductImage', 'Category', 'Banner', 'HeroSlide', 'MainPageSection']
REPORT_MODELS = ['Order', 'OrderItem']


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_storefront_on_change(sender, instance, **kwargs):
    """Invalidate storefront cache when products or design blocks change"""
    if is_suspended():
        return

    if sender.__name__ in STOREFRONT_MODELS:
        try:
            # Invalidate after commit so the cache is not refilled with stale rows
            transaction.on_commit(invalidate_storefront_cache)
        except Exception as e:
            logger.warning(f"Error in invalidate_storefront_on_change signal: {e}")


@receiver([post_save, post_delete])
def invalidate_reports_on_change(sender, instance, **kwargs):
    """Invalidate sales report cache when orders change"""
    if is_suspended():
        return

    if sender.__name__ in REPORT_MODELS:
        try:
            transaction.on_commit(invalidate_reports_cache)
        except Exception as e:
            logger.warning(f"Error in invalidate_reports_on_change signal: {e}")
