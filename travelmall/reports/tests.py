"""
Test suite for Reports module
Tests: Sales summary (daily/weekly/monthly), CSV export, dashboard counters
"""
from datetime import datetime, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.orders.models import Order
from travelmall.reports.views import build_sales_report


def _place_on(order, year, month, day):
    created_at = timezone.make_aware(datetime(year, month, day, 12, 0))
    Order.objects.filter(pk=order.pk).update(created_at=created_at)


class SalesReportTests(TestCase):

    def setUp(self):
        cache.clear()
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

        self.jeju = TestDataFactory.create_product(title='Jeju Tour')
        self.busan = TestDataFactory.create_product(title='Busan Tour')
        orders = [
            (self.jeju, 'paid', Decimal('100000.00'), (2024, 3, 4)),
            (self.jeju, 'completed', Decimal('200000.00'), (2024, 3, 5)),
            (self.busan, 'pending', Decimal('50000.00'), (2024, 3, 12)),
            (self.busan, 'cancelled', Decimal('999000.00'), (2024, 3, 5)),
            (self.busan, 'refunded', Decimal('888000.00'), (2024, 3, 6)),
        ]
        for product, order_status, amount, day in orders:
            order = TestDataFactory.create_order(product=product, status=order_status, total_amount=amount)
            _place_on(order, *day)

    def tearDown(self):
        cache.clear()

    def test_daily_summary_excludes_cancelled_and_refunded(self):
        report = build_sales_report(datetime(2024, 3, 1).date(), datetime(2024, 3, 31).date(), 'daily')
        self.assertEqual(report['summary']['total_sales'], 350000.0)
        self.assertEqual(report['summary']['order_count'], 3)
        self.assertEqual(report['summary']['average_order_value'], 116666.67)
        self.assertEqual(
            [(row['date'], row['total_sales']) for row in report['breakdown']],
            [('2024-03-04', 100000.0), ('2024-03-05', 200000.0), ('2024-03-12', 50000.0)]
        )

    def test_products_sorted_by_sales(self):
        report = build_sales_report(datetime(2024, 3, 1).date(), datetime(2024, 3, 31).date(), 'daily')
        products = report['products']
        self.assertEqual([p['product_id'] for p in products], [self.jeju.id, self.busan.id])
        self.assertEqual(products[0]['total_sales'], 300000.0)
        self.assertEqual(products[0]['order_count'], 2)
        self.assertEqual(products[0]['travelers'], 4)

    def test_weekly_and_monthly_grouping(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2024-03-01&date_to=2024-03-31&period=weekly')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['date'] for row in response.data['breakdown']], ['2024-W10', '2024-W11'])
        self.assertEqual(response.data['breakdown'][0]['order_count'], 2)

        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2024-03-01&date_to=2024-03-31&period=monthly')
        self.assertEqual(response.data['breakdown'], [{
            'date': '2024-03',
            'total_sales': 350000.0,
            'order_count': 3,
            'average_order_value': 116666.67,
        }])
        self.assertEqual(response.data['period']['group_by'], 'monthly')

    def test_range_limits_orders(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2024-03-05&date_to=2024-03-05')
        self.assertEqual(response.data['summary']['order_count'], 1)
        self.assertEqual(response.data['summary']['total_sales'], 200000.0)

    def test_empty_range(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=2023-01-01&date_to=2023-01-31')
        self.assertEqual(response.data['summary'], {
            'total_sales': 0.0, 'order_count': 0, 'average_order_value': 0.0
        })
        self.assertEqual(response.data['breakdown'], [])

    def test_invalid_parameters(self):
        for query in ('date_from=03/01/2024', 'date_from=2024-03-10&date_to=2024-03-01', 'period=yearly'):
            response = self.client.get(f'/api/v1/reports/sales-summary/?{query}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, query)
            self.assertIn('error', response.data)

    def test_export_csv(self):
        response = self.client.get('/api/v1/reports/sales-summary/export/?date_from=2024-03-01&date_to=2024-03-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('attachment;', response['Content-Disposition'])
        lines = response.content.decode('utf-8').strip().splitlines()
        self.assertEqual(lines[0], 'Date,Total Sales,Order Count,Average Order Value')
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[1].startswith('2024-03-04,100000.0,1,'))

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DashboardTests(TestCase):

    def setUp(self):
        cache.clear()
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_dashboard_counters(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_product(status='draft')
        TestDataFactory.create_order(product=product, status='pending', total_amount=Decimal('200000.00'))
        TestDataFactory.create_order(product=product, status='paid', total_amount=Decimal('150000.00'))
        TestDataFactory.create_order(product=product, status='cancelled', total_amount=Decimal('70000.00'))
        TestDataFactory.create_coupon()
        TestDataFactory.create_coupon(
            start_date=timezone.now() - timedelta(days=10),
            end_date=timezone.now() - timedelta(days=1)
        )

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_orders'], 3)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(response.data['orders_by_status']['cancelled'], 1)
        self.assertEqual(response.data['today'], {'sales': 350000.0, 'order_count': 2})
        self.assertEqual(response.data['active_coupons'], 1)
        self.assertEqual(response.data['published_products'], 1)
        self.assertEqual(response.data['draft_products'], 1)
