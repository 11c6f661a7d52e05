import django_filters
from django.db.models import Q
from .models import Order

SORTABLE_FIELDS = ['created_at', 'updated_at', 'total_amount']


class OrderFilter(django_filters.FilterSet):
    """Back-office order list filter using django-filter"""

    # Comma separated list, e.g. ?status=paid,completed
    status = django_filters.CharFilter(method='filter_status', label='Status')
    start_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    search = django_filters.CharFilter(method='filter_search', label='Search')
    min_amount = django_filters.NumberFilter(field_name='total_amount', lookup_expr='gte')
    max_amount = django_filters.NumberFilter(field_name='total_amount', lookup_expr='lte')
    payment_method = django_filters.CharFilter(field_name='payment__method', lookup_expr='exact')
    payment_status = django_filters.CharFilter(field_name='payment__status', lookup_expr='exact')
    product = django_filters.NumberFilter(field_name='items__product_id', lookup_expr='exact', distinct=True)

    class Meta:
        model = Order
        fields = ['status', 'start_date', 'end_date', 'search', 'min_amount', 'max_amount',
                  'payment_method', 'payment_status', 'product']

    def filter_status(self, queryset, name, value):
        statuses = [s.strip() for s in (value or '').split(',') if s.strip()]
        if not statuses:
            return queryset
        return queryset.filter(status__in=statuses)

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_number__icontains=value) |
            Q(customer_name__icontains=value) |
            Q(customer_email__icontains=value) |
            Q(customer_phone__icontains=value)
        )


def apply_order_sorting(queryset, sort_by=None, sort_order=None):
    """?sort_by=created_at|updated_at|total_amount&sort_order=asc|desc (default newest first)"""
    field = sort_by if sort_by in SORTABLE_FIELDS else 'created_at'
    prefix = '' if sort_order == 'asc' else '-'
    return queryset.order_by(f'{prefix}{field}', f'{prefix}id')
