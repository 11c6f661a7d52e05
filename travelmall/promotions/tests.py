"""
Test suite for Promotions module
Tests: Coupon rules, coupon CRUD, validation endpoint, promotions
"""
from decimal import Decimal
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.promotions.models import Coupon, Promotion
from travelmall.promotions.services import validate_coupon, record_coupon_usage, CouponError


class CouponModelTests(TestCase):

    def test_percentage_discount_capped(self):
        coupon = TestDataFactory.create_coupon(
            value=Decimal('20.00'), max_discount_amount=Decimal('30000.00')
        )
        self.assertEqual(coupon.calculate_discount(Decimal('100000')), Decimal('20000.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('500000')), Decimal('30000.00'))

    def test_fixed_discount_never_exceeds_amount(self):
        coupon = TestDataFactory.create_coupon(discount_type='fixed', value=Decimal('50000.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('30000')), Decimal('30000.00'))

    def test_below_minimum_gives_no_discount(self):
        coupon = TestDataFactory.create_coupon(min_order_amount=Decimal('100000.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('99999')), Decimal('0.00'))

    def test_effective_status(self):
        expired = TestDataFactory.create_coupon(
            start_date=timezone.now() - timedelta(days=10),
            end_date=timezone.now() - timedelta(days=1)
        )
        used = TestDataFactory.create_coupon(usage_limit=2, usage_count=2)
        self.assertEqual(expired.effective_status(), 'expired')
        self.assertEqual(used.effective_status(), 'used')
        self.assertEqual(TestDataFactory.create_coupon().effective_status(), 'active')


class CouponServiceTests(TestCase):

    def test_validate_is_case_insensitive(self):
        TestDataFactory.create_coupon(code='SUMMER10')
        coupon, discount = validate_coupon('summer10', Decimal('100000'))
        self.assertEqual(coupon.code, 'SUMMER10')
        self.assertEqual(discount, Decimal('10000.00'))

    def test_validate_rejections(self):
        TestDataFactory.create_coupon(code='FUTURE', start_date=timezone.now() + timedelta(days=1))
        TestDataFactory.create_coupon(code='MINAMT', min_order_amount=Decimal('50000.00'))
        with self.assertRaisesMessage(CouponError, 'Coupon not found'):
            validate_coupon('NOPE', Decimal('1000'))
        with self.assertRaisesMessage(CouponError, 'Coupon is not valid yet'):
            validate_coupon('FUTURE', Decimal('1000'))
        with self.assertRaisesMessage(CouponError, 'Minimum order amount'):
            validate_coupon('MINAMT', Decimal('1000'))

    def test_product_scoped_coupon(self):
        product = TestDataFactory.create_product()
        other = TestDataFactory.create_product()
        coupon = TestDataFactory.create_coupon(code='JEJUONLY')
        coupon.products.add(product)
        with self.assertRaises(CouponError):
            validate_coupon('JEJUONLY', Decimal('100000'), product_ids=[other.id])
        validate_coupon('JEJUONLY', Decimal('100000'), product_ids=[product.id])

    def test_user_scoped_coupon(self):
        owner = TestDataFactory.create_user()
        stranger = TestDataFactory.create_user()
        coupon = TestDataFactory.create_coupon(code='VIPONLY')
        coupon.users.add(owner)
        with self.assertRaisesMessage(CouponError, 'not available for this account'):
            validate_coupon('VIPONLY', Decimal('100000'), user=stranger)
        validate_coupon('VIPONLY', Decimal('100000'), user=owner)

    def test_record_usage_marks_exhausted_coupon_used(self):
        coupon = TestDataFactory.create_coupon(usage_limit=1)
        record_coupon_usage(coupon)
        coupon.refresh_from_db()
        self.assertEqual(coupon.usage_count, 1)
        self.assertEqual(coupon.status, 'used')
        with self.assertRaisesMessage(CouponError, 'usage limit reached'):
            validate_coupon(coupon.code, Decimal('100000'))

    def test_record_usage_never_exceeds_limit(self):
        coupon = TestDataFactory.create_coupon(usage_limit=1)
        validate_coupon(coupon.code, Decimal('100000'))
        # Another checkout redeems it between validation and recording
        Coupon.objects.filter(pk=coupon.pk).update(usage_count=1)
        with self.assertRaisesMessage(CouponError, 'usage limit reached'):
            record_coupon_usage(coupon)
        coupon.refresh_from_db()
        self.assertEqual(coupon.usage_count, 1)


class CouponAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        now = timezone.now()
        self.payload = {
            'code': 'spring20',
            'discount_type': 'percentage',
            'value': '20.00',
            'start_date': now.isoformat(),
            'end_date': (now + timedelta(days=14)).isoformat(),
            'usage_limit': 100,
        }

    def test_create_coupon_normalizes_code(self):
        response = self.client.post('/api/v1/coupons/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'SPRING20')
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['usage_count'], 0)

    def test_duplicate_code_rejected_without_creating_row(self):
        TestDataFactory.create_coupon(code='SPRING20')
        response = self.client.post('/api/v1/coupons/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)
        self.assertEqual(Coupon.objects.count(), 1)

    def test_percentage_over_100_rejected(self):
        self.payload['value'] = '120'
        response = self.client.post('/api/v1/coupons/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start_rejected(self):
        self.payload['end_date'] = (timezone.now() - timedelta(days=1)).isoformat()
        response = self.client.post('/api/v1/coupons/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_fixed_coupon_drops_cap(self):
        self.payload.update({'discount_type': 'fixed', 'value': '5000', 'max_discount_amount': '1000'})
        response = self.client.post('/api/v1/coupons/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['max_discount_amount'])

    def test_filter_by_effective_status(self):
        active = TestDataFactory.create_coupon()
        TestDataFactory.create_coupon(usage_limit=1, usage_count=1)
        TestDataFactory.create_coupon(
            start_date=timezone.now() - timedelta(days=10),
            end_date=timezone.now() - timedelta(days=1)
        )
        response = self.client.get('/api/v1/coupons/?status=active')
        self.assertEqual([item['id'] for item in response.data], [active.id])
        response = self.client.get('/api/v1/coupons/?status=used')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'used')
        response = self.client.get('/api/v1/coupons/?status=expired')
        self.assertEqual(response.data[0]['status'], 'expired')

    def test_customer_cannot_manage_coupons(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/coupons/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CouponValidateEndpointTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_valid_coupon_returns_discount(self):
        TestDataFactory.create_coupon(code='WELCOME', discount_type='fixed', value=Decimal('15000.00'))
        response = self.client.post('/api/v1/coupons/validate/', {'code': 'welcome', 'amount': '100000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['valid'])
        self.assertEqual(response.data['discount'], Decimal('15000.00'))
        self.assertEqual(response.data['final_amount'], Decimal('85000.00'))

    def test_invalid_coupon(self):
        response = self.client.post('/api/v1/coupons/validate/', {'code': 'MISSING', 'amount': '100000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['valid'])
        self.assertEqual(response.data['error'], 'Coupon not found')


class PromotionTests(TestCase):

    def setUp(self):
        now = timezone.now()
        self.running = Promotion.objects.create(
            title='Summer Sale', start_date=now - timedelta(days=1), end_date=now + timedelta(days=5)
        )
        Promotion.objects.create(
            title='Old Sale', start_date=now - timedelta(days=10), end_date=now - timedelta(days=5)
        )
        Promotion.objects.create(
            title='Hidden Sale', start_date=now - timedelta(days=1), end_date=now + timedelta(days=5),
            is_active=False
        )

    def test_storefront_lists_running_promotions_only(self):
        response = AuthenticatedAPIClient().get('/api/v1/storefront/promotions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data], [self.running.id])

    def test_coupon_promotion_requires_code(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_staff())
        now = timezone.now()
        response = client.post('/api/v1/promotions/', {
            'title': 'Code deal',
            'promotion_type': 'coupon',
            'start_date': now.isoformat(),
            'end_date': (now + timedelta(days=3)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)
