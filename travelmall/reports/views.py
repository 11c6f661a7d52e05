import csv
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.core.cache import cache
from django.db.models import Sum, Count, Q, F, DecimalField
from django.db.models.functions import TruncDate, TruncWeek, TruncMonth
from django.http import HttpResponse
from django.utils import timezone

from travelmall.catalog.models import TravelProduct
from travelmall.core.cache_utils import make_cache_key, REPORTS_CACHE_TTL
from travelmall.orders.models import Order, OrderItem
from travelmall.promotions.models import Coupon

logger = logging.getLogger('travelmall.reports')

EXCLUDED_STATUSES = ['cancelled', 'refunded']
PERIOD_TRUNC = {
    'daily': TruncDate,
    'weekly': TruncWeek,
    'monthly': TruncMonth,
}


class ReportParamError(ValueError):
    pass


def _parse_range(request):
    """date_from/date_to (YYYY-MM-DD), defaulting to the last 30 days"""
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    try:
        if not date_from:
            date_from = (timezone.localdate() - timedelta(days=30))
        else:
            date_from = datetime.strptime(date_from, '%Y-%m-%d').date()

        if not date_to:
            date_to = timezone.localdate()
        else:
            date_to = datetime.strptime(date_to, '%Y-%m-%d').date()
    except ValueError:
        raise ReportParamError('Invalid date format, use YYYY-MM-DD')

    if date_from > date_to:
        raise ReportParamError('date_from must be on or before date_to')

    period = request.query_params.get('period', 'daily')
    if period not in PERIOD_TRUNC:
        raise ReportParamError('period must be daily, weekly or monthly')
    return date_from, date_to, period


def _period_label(value, period):
    if isinstance(value, datetime):
        value = timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if period == 'weekly':
        year, week, _ = value.isocalendar()
        return f"{year}-W{week:02d}"
    if period == 'monthly':
        return value.strftime('%Y-%m')
    return value.isoformat()


def _average(total, count):
    if not count:
        return Decimal('0.00')
    return (total / count).quantize(Decimal('0.01'))


def build_sales_report(date_from, date_to, period):
    """
    Sales totals for completed business in [date_from, date_to].

    Cancelled and refunded orders are excluded. Returns overall summary,
    per-period breakdown and per-product totals sorted by sales.
    """
    orders = Order.objects.filter(
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
    ).exclude(status__in=EXCLUDED_STATUSES)

    totals = orders.aggregate(
        total=Sum('total_amount', output_field=DecimalField()),
        count=Count('id'),
    )
    total_sales = totals['total'] or Decimal('0.00')
    order_count = totals['count'] or 0

    trunc = PERIOD_TRUNC[period]
    rows = orders.annotate(
        period_start=trunc('created_at')
    ).values('period_start').annotate(
        total=Sum('total_amount', output_field=DecimalField()),
        count=Count('id')
    ).order_by('period_start')

    breakdown = []
    for row in rows:
        period_total = row['total'] or Decimal('0.00')
        breakdown.append({
            'date': _period_label(row['period_start'], period),
            'total_sales': float(period_total),
            'order_count': row['count'],
            'average_order_value': float(_average(period_total, row['count'])),
        })

    products = OrderItem.objects.filter(order__in=orders).values(
        'product_id', 'product_title'
    ).annotate(
        total_sales=Sum('subtotal', output_field=DecimalField()),
        order_count=Count('order', distinct=True),
        travelers=Sum(F('adults') + F('children') + F('infants')),
    ).order_by('-total_sales')

    return {
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat(),
            'group_by': period,
        },
        'summary': {
            'total_sales': float(total_sales),
            'order_count': order_count,
            'average_order_value': float(_average(total_sales, order_count)),
        },
        'breakdown': breakdown,
        'products': [
            {
                'product_id': row['product_id'],
                'product_title': row['product_title'],
                'total_sales': float(row['total_sales'] or 0),
                'order_count': row['order_count'],
                'travelers': row['travelers'] or 0,
            }
            for row in products
        ],
    }


def get_sales_report(date_from, date_to, period):
    cache_key = make_cache_key('sales_report', date_from.isoformat(), date_to.isoformat(), period)
    data = cache.get(cache_key)
    if data is not None:
        logger.debug(f"Sales report cache HIT: {cache_key}")
        return data

    data = build_sales_report(date_from, date_to, period)
    cache.set(cache_key, data, REPORTS_CACHE_TTL)
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def sales_summary(request):
    """Sales summary grouped daily, weekly or monthly"""
    try:
        date_from, date_to, period = _parse_range(request)
    except ReportParamError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(get_sales_report(date_from, date_to, period))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def sales_export_csv(request):
    """Per-period sales breakdown as CSV"""
    try:
        date_from, date_to, period = _parse_range(request)
    except ReportParamError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    report = get_sales_report(date_from, date_to, period)
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = (
        f'attachment; filename="sales-report-{timezone.localdate().isoformat()}.csv"'
    )
    writer = csv.writer(response)
    writer.writerow(['Date', 'Total Sales', 'Order Count', 'Average Order Value'])
    for row in report['breakdown']:
        writer.writerow([row['date'], row['total_sales'], row['order_count'], row['average_order_value']])

    logger.info(f"Sales report exported by {request.user.username}: {date_from} to {date_to} ({period})")
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard(request):
    """Back-office counters: orders by status, today's sales, active coupons, published products"""
    now = timezone.now()
    today = timezone.localdate()

    orders_by_status = {
        row['status']: row['count']
        for row in Order.objects.values('status').annotate(count=Count('id')).order_by('status')
    }

    today_orders = Order.objects.filter(created_at__date=today).exclude(status__in=EXCLUDED_STATUSES)
    today_totals = today_orders.aggregate(
        total=Sum('total_amount', output_field=DecimalField()),
        count=Count('id'),
    )

    active_coupons = Coupon.objects.filter(
        status='active', start_date__lte=now, end_date__gte=now
    ).exclude(usage_count__gte=F('usage_limit')).count()

    product_counts = TravelProduct.objects.aggregate(
        published=Count('id', filter=Q(status='published')),
        draft=Count('id', filter=Q(status='draft')),
    )

    return Response({
        'orders_by_status': orders_by_status,
        'total_orders': sum(orders_by_status.values()),
        'pending_orders': orders_by_status.get('pending', 0),
        'today': {
            'sales': float(today_totals['total'] or Decimal('0.00')),
            'order_count': today_totals['count'] or 0,
        },
        'active_coupons': active_coupons,
        'published_products': product_counts['published'] or 0,
        'draft_products': product_counts['draft'] or 0,
    })
