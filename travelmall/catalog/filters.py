import django_filters
from django.db.models import Q
from .models import TravelProduct


class ProductFilter(django_filters.FilterSet):
    """Storefront and back-office filter for TravelProduct using django-filter"""

    # Basic search - title, descriptions, region and tags
    search = django_filters.CharFilter(method='filter_search', label='Search')

    region = django_filters.CharFilter(field_name='region', lookup_expr='iexact')
    category = django_filters.NumberFilter(field_name='categories__id', lookup_expr='exact', distinct=True)
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    best_seller = django_filters.BooleanFilter(field_name='is_best_seller')
    time_deal = django_filters.BooleanFilter(field_name='is_time_deal')
    min_price = django_filters.NumberFilter(field_name='price_adult', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price_adult', lookup_expr='lte')

    # Duration buckets: '1-3', '4-7', '8+'
    duration = django_filters.CharFilter(method='filter_duration', label='Duration')

    sort_by = django_filters.CharFilter(method='filter_sort', label='Sort')

    class Meta:
        model = TravelProduct
        fields = ['search', 'region', 'category', 'status', 'best_seller', 'time_deal',
                  'min_price', 'max_price', 'duration', 'sort_by']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the title, descriptions or region"""
        if not value:
            return queryset

        search_words = [w for w in value.strip().split() if w]
        if not search_words:
            return queryset

        for word in search_words:
            queryset = queryset.filter(
                Q(title__icontains=word) |
                Q(short_description__icontains=word) |
                Q(description__icontains=word) |
                Q(region__icontains=word)
            )
        return queryset.distinct()

    def filter_duration(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        if value.endswith('+'):
            try:
                return queryset.filter(duration_days__gte=int(value[:-1]))
            except ValueError:
                return queryset
        if '-' in value:
            low, _, high = value.partition('-')
            try:
                return queryset.filter(duration_days__gte=int(low), duration_days__lte=int(high))
            except ValueError:
                return queryset
        return queryset

    def filter_sort(self, queryset, name, value):
        ordering = {
            'price-asc': ['price_adult', '-created_at'],
            'price-desc': ['-price_adult', '-created_at'],
            'newest': ['-created_at'],
            'popular': ['-is_best_seller', '-created_at'],
        }.get(value)
        if ordering:
            return queryset.order_by(*ordering)
        return queryset
