"""
Test suite for Orders module
Tests: Cart, checkout, customer orders, status changes, cancel/refund, CSV export
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.test import TestCase
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.core.models import AuditLog
from travelmall.orders.models import Cart, Order, OrderStatusHistory
from travelmall.promotions.models import Coupon
from travelmall.orders.services import (
    OrderError, calculate_subtotal, add_to_cart, update_cart_item, checkout,
    update_order_status, cancel_order, refund_order,
)


class CartServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(
            price_adult=Decimal('100000.00'), price_child=Decimal('70000.00'), price_infant=None
        )

    def test_calculate_subtotal_treats_missing_price_as_zero(self):
        self.assertEqual(
            calculate_subtotal(self.product, adults=2, children=1, infants=1),
            Decimal('270000.00')
        )

    def test_same_product_and_dates_merge(self):
        add_to_cart(self.user, self.product, adults=1)
        item = add_to_cart(self.user, self.product, adults=1, children=1)
        cart = Cart.objects.get(user=self.user)
        self.assertEqual(cart.items.count(), 1)
        self.assertEqual(item.adults, 2)
        self.assertEqual(item.subtotal, Decimal('270000.00'))
        self.assertEqual(cart.total_amount, Decimal('270000.00'))

    def test_zero_travelers_rejected(self):
        with self.assertRaises(OrderError):
            add_to_cart(self.user, self.product, adults=0)

    def test_draft_product_rejected(self):
        draft = TestDataFactory.create_product(status='draft')
        with self.assertRaises(OrderError):
            add_to_cart(self.user, draft)

    def test_inventory_of_other_product_rejected(self):
        slot = TestDataFactory.create_inventory()
        with self.assertRaises(OrderError):
            add_to_cart(self.user, self.product, inventory=slot)

    def test_update_recomputes_total(self):
        item = add_to_cart(self.user, self.product, adults=1)
        update_cart_item(item, adults=3)
        item.cart.refresh_from_db()
        self.assertEqual(item.cart.total_amount, Decimal('300000.00'))


class CartAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price_adult=Decimal('50000.00'))

    def test_cart_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_add_update_remove(self):
        response = self.client.post('/api/v1/cart/items/', {'product': self.product.id, 'adults': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('100000.00'))
        item_id = response.data['items'][0]['id']

        response = self.client.patch(f'/api/v1/cart/items/{item_id}/', {'adults': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.delete(f'/api/v1/cart/items/{item_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('0.00'))

    def test_cannot_touch_other_users_cart_item(self):
        other = TestDataFactory.create_user()
        item = add_to_cart(other, self.product)
        response = self.client.delete(f'/api/v1/cart/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CheckoutTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(email='traveler@test.com')
        self.product = TestDataFactory.create_product(price_adult=Decimal('100000.00'))
        self.slot = TestDataFactory.create_inventory(product=self.product, total_stock=5)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_checkout_creates_order_and_reserves_seats(self):
        add_to_cart(self.user, self.product, adults=2, inventory=self.slot)
        response = self.client.post('/api/v1/cart/checkout/', {'payment_method': 'bank_transfer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        order = Order.objects.get(pk=response.data['id'])
        self.assertEqual(order.status, 'pending')
        self.assertEqual(order.total_amount, Decimal('200000.00'))
        self.assertEqual(order.items.count(), 1)
        self.assertEqual(order.payment.method, 'bank_transfer')
        self.assertTrue(order.order_number.startswith('ORD-'))

        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 3)
        self.assertEqual(self.slot.reserved_stock, 2)
        self.assertEqual(Cart.objects.get(user=self.user).items.count(), 0)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(order.order_number, mail.outbox[0].subject)
        self.assertTrue(AuditLog.objects.filter(action='order_checkout').exists())

    def test_checkout_with_coupon(self):
        coupon = TestDataFactory.create_coupon(code='TEN', value=Decimal('10.00'), usage_limit=1)
        add_to_cart(self.user, self.product, adults=1)
        order = checkout(self.user, {}, coupon_code='ten')
        self.assertEqual(order.coupon_discount, Decimal('10000.00'))
        self.assertEqual(order.total_amount, Decimal('90000.00'))
        coupon.refresh_from_db()
        self.assertEqual(coupon.usage_count, 1)
        self.assertEqual(coupon.status, 'used')

    def test_invalid_coupon_rejects_checkout(self):
        add_to_cart(self.user, self.product, adults=1)
        response = self.client.post('/api/v1/cart/checkout/', {'coupon_code': 'NOPE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Coupon not found')
        self.assertEqual(Order.objects.count(), 0)

    def test_coupon_exhausted_during_checkout_rolls_back(self):
        coupon = TestDataFactory.create_coupon(code='LAST', usage_limit=1)
        add_to_cart(self.user, self.product, adults=1, inventory=self.slot)
        # Validation saw a free redemption; another order took it before recording
        Coupon.objects.filter(pk=coupon.pk).update(usage_count=1)
        with patch('travelmall.orders.services.validate_coupon', return_value=(coupon, Decimal('10000.00'))):
            with self.assertRaisesMessage(OrderError, 'usage limit reached'):
                checkout(self.user, {}, coupon_code='LAST')

        self.assertEqual(Order.objects.count(), 0)
        coupon.refresh_from_db()
        self.assertEqual(coupon.usage_count, 1)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 5)
        self.assertEqual(Cart.objects.get(user=self.user).items.count(), 1)

    def test_insufficient_stock_rolls_back(self):
        add_to_cart(self.user, self.product, adults=6, inventory=self.slot)
        response = self.client.post('/api/v1/cart/checkout/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Order.objects.count(), 0)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 5)
        self.assertEqual(Cart.objects.get(user=self.user).items.count(), 1)
        self.assertEqual(len(mail.outbox), 0)

    def test_empty_cart(self):
        response = self.client.post('/api/v1/cart/checkout/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cart is empty')


class CustomerOrderTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.mine = TestDataFactory.create_order(user=self.user)
        self.theirs = TestDataFactory.create_order(user=self.other)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_my_orders_only(self):
        response = self.client.get('/api/v1/my/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [self.mine.id])

    def test_other_users_order_not_found(self):
        response = self.client.get(f'/api/v1/my/orders/{self.theirs.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_view_hides_admin_notes(self):
        response = self.client.get(f'/api/v1/my/orders/{self.mine.id}/')
        self.assertNotIn('admin_notes', response.data)

    def test_customer_cancels_own_confirmed_order(self):
        product = TestDataFactory.create_product()
        slot = TestDataFactory.create_inventory(product=product, total_stock=4, reserved_stock=2)
        order = TestDataFactory.create_order(user=self.user, product=product, inventory=slot, status='confirmed')

        response = self.client.post(f'/api/v1/my/orders/{order.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')
        self.assertEqual(response.data['cancel_reason'], 'cancelled by customer')
        slot.refresh_from_db()
        self.assertEqual(slot.available_stock, 4)
        self.assertEqual(slot.reserved_stock, 0)
        self.assertTrue(AuditLog.objects.filter(action='order_cancel', object_id=str(order.id)).exists())

    def test_customer_cannot_cancel_paid_order(self):
        order = TestDataFactory.create_order(user=self.user, status='paid')
        response = self.client.post(f'/api/v1/my/orders/{order.id}/cancel/', {'reason': 'Changed plans'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Orders already in progress or completed cannot be cancelled')
        order.refresh_from_db()
        self.assertEqual(order.status, 'paid')

    def test_customer_cannot_cancel_other_users_order(self):
        response = self.client.post(f'/api/v1/my/orders/{self.theirs.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.theirs.refresh_from_db()
        self.assertEqual(self.theirs.status, 'pending')


class OrderStatusTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.order = TestDataFactory.create_order()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_same_status_is_acknowledged_without_history(self):
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order status is already pending')
        self.assertFalse(OrderStatusHistory.objects.filter(order=self.order).exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_status_change_records_history_and_emails(self):
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {
            'status': 'paid', 'note': 'Bank transfer received'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['previous_status'], 'pending')

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'paid')
        self.assertEqual(self.order.payment.status, 'completed')
        history = OrderStatusHistory.objects.get(order=self.order)
        self.assertEqual(history.previous_status, 'pending')
        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(AuditLog.objects.filter(action='order_status', object_id=str(self.order.id)).exists())

    def test_invalid_status(self):
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_service_rejects_unknown_status(self):
        with self.assertRaises(OrderError):
            update_order_status(self.order, 'lost')

    def test_cancelled_and_refunded_need_their_own_actions(self):
        for closed_status in ('cancelled', 'refunded'):
            response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {
                'status': closed_status
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, closed_status)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'pending')
        self.assertFalse(OrderStatusHistory.objects.filter(order=self.order).exists())

    def test_closed_order_cannot_be_reopened(self):
        cancel_order(self.order)
        with self.assertRaisesMessage(OrderError, 'Cancelled orders cannot be reopened'):
            update_order_status(self.order, 'confirmed')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'cancelled')

    def test_status_checked_against_stored_row(self):
        stale = Order.objects.get(pk=self.order.pk)
        Order.objects.filter(pk=self.order.pk).update(status='refunded')
        with self.assertRaises(OrderError):
            update_order_status(stale, 'paid')

    def test_customer_cannot_change_status(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CancelRefundTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.product = TestDataFactory.create_product()
        self.slot = TestDataFactory.create_inventory(product=self.product, total_stock=10, reserved_stock=2)
        self.order = TestDataFactory.create_order(product=self.product, inventory=self.slot, adults=2)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_cancel_restores_inventory(self):
        response = self.client.post(f'/api/v1/orders/{self.order.id}/cancel/', {'reason': 'Typhoon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['previous_status'], 'pending')
        self.assertEqual(response.data['order']['new_status'], 'cancelled')

        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 10)
        self.assertEqual(self.slot.reserved_stock, 0)
        self.order.refresh_from_db()
        self.assertEqual(self.order.cancel_reason, 'Typhoon')
        self.assertIsNotNone(self.order.cancelled_at)

    def test_cancel_default_reason(self):
        order, previous_status, refund_amount = cancel_order(self.order)
        self.assertEqual(order.cancel_reason, 'cancelled by admin')
        self.assertEqual(refund_amount, self.order.total_amount)

    def test_cancel_twice_rejected(self):
        cancel_order(self.order)
        response = self.client.post(f'/api/v1/orders/{self.order.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.reserved_stock, 0)

    def test_seats_restored_once_through_reopen_attempt(self):
        slot = TestDataFactory.create_inventory(
            product=self.product, date=self.slot.date + timedelta(days=1), total_stock=2, reserved_stock=2
        )
        order = TestDataFactory.create_order(product=self.product, inventory=slot, adults=2)
        cancel_order(order)
        with self.assertRaises(OrderError):
            update_order_status(order, 'confirmed')
        with self.assertRaises(OrderError):
            cancel_order(order)
        slot.refresh_from_db()
        self.assertEqual(slot.available_stock, 2)
        self.assertEqual(slot.reserved_stock, 0)

    def test_stale_order_cancelled_only_once(self):
        stale = Order.objects.get(pk=self.order.pk)
        cancel_order(self.order)
        with self.assertRaisesMessage(OrderError, 'already cancelled'):
            cancel_order(stale)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 10)
        self.assertEqual(self.slot.reserved_stock, 0)
        self.assertEqual(OrderStatusHistory.objects.filter(order=self.order, status='cancelled').count(), 1)

    def test_refund_of_paid_order_releases_seats(self):
        self.order.status = 'paid'
        self.order.save()
        refund_order(self.order)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 10)
        self.assertEqual(self.slot.reserved_stock, 0)

    def test_refund_of_cancelled_order_keeps_seats_released_once(self):
        cancel_order(self.order)
        refund_order(self.order)
        self.slot.refresh_from_db()
        self.assertEqual(self.slot.available_stock, 10)
        self.assertEqual(self.slot.reserved_stock, 0)

    def test_stale_order_refunded_only_once(self):
        self.order.status = 'paid'
        self.order.save()
        stale = Order.objects.get(pk=self.order.pk)
        refund_order(self.order)
        with self.assertRaisesMessage(OrderError, 'already refunded'):
            refund_order(stale)

    def test_pending_order_cannot_be_refunded(self):
        with self.assertRaises(OrderError):
            refund_order(self.order)

    def test_full_refund(self):
        self.order.status = 'paid'
        self.order.save()
        response = self.client.post(f'/api/v1/orders/{self.order.id}/refund/', {'reason': 'Changed plans'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['refund_amount'], self.order.total_amount)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'refunded')
        self.assertEqual(self.order.payment.status, 'refunded')

    def test_partial_refund_bounds(self):
        self.order.status = 'completed'
        self.order.save()
        response = self.client.post(f'/api/v1/orders/{self.order.id}/refund/', {
            'amount': str(self.order.total_amount + 1), 'is_partial': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/orders/{self.order.id}/refund/', {
            'amount': '50000.00', 'is_partial': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment.status, 'partially_refunded')
        self.assertEqual(self.order.payment.refund_amount, Decimal('50000.00'))

    def test_refund_twice_rejected(self):
        self.order.status = 'paid'
        self.order.save()
        refund_order(self.order)
        self.order.refresh_from_db()
        with self.assertRaisesMessage(OrderError, 'already refunded'):
            refund_order(self.order)


class OrderListExportTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.paid = TestDataFactory.create_order(status='paid', total_amount=Decimal('300000.00'))
        self.pending = TestDataFactory.create_order(status='pending', total_amount=Decimal('100000.00'))

    def test_filter_by_status_list(self):
        response = self.client.get('/api/v1/orders/?status=paid,completed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [self.paid.id])

    def test_sort_by_amount(self):
        response = self.client.get('/api/v1/orders/?sort_by=total_amount&sort_order=asc')
        self.assertEqual([item['id'] for item in response.data['results']], [self.pending.id, self.paid.id])

    def test_admin_notes_patch(self):
        response = self.client.patch(f'/api/v1/orders/{self.paid.id}/', {'admin_notes': 'VIP'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['admin_notes'], 'VIP')

    def test_export_csv(self):
        response = self.client.get('/api/v1/orders/export/?status=paid')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        lines = response.content.decode('utf-8-sig').strip().splitlines()
        self.assertTrue(lines[0].startswith('Order Number,Created At,Status'))
        self.assertEqual(len(lines), 2)
        self.assertIn(self.paid.order_number, lines[1])
