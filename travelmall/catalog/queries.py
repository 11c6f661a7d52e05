"""Storefront product queries shared by catalog and design views"""
from .models import TravelProduct


def published_products():
    return TravelProduct.objects.filter(status='published').prefetch_related('images', 'categories')


def get_best_sellers(limit=8):
    return list(published_products().filter(is_best_seller=True).order_by('-updated_at')[:limit])


def get_time_deals(limit=8):
    return list(published_products().filter(is_time_deal=True).order_by('-updated_at')[:limit])


def get_regions():
    """Distinct regions of published products, alphabetical"""
    return list(
        TravelProduct.objects.filter(status='published')
        .exclude(region='')
        .values_list('region', flat=True)
        .distinct()
        .order_by('region')
    )
