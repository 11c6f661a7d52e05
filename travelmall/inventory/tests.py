"""
Test suite for Inventory module
Tests: Stock decrease/restore, slot management, availability calendar
"""
from django.test import TestCase
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.inventory.models import Inventory
from travelmall.inventory.services import decrease_inventory, restore_inventory
from travelmall.core.models import AuditLog


class InventoryServiceTests(TestCase):
    """decrease_inventory / restore_inventory"""

    def setUp(self):
        self.inventory = TestDataFactory.create_inventory(total_stock=10)

    def test_decrease_moves_available_to_reserved(self):
        self.assertTrue(decrease_inventory(self.inventory.id, 4))
        self.inventory.refresh_from_db()
        self.assertEqual(self.inventory.available_stock, 6)
        self.assertEqual(self.inventory.reserved_stock, 4)

    def test_decrease_beyond_available_leaves_row_unchanged(self):
        self.assertFalse(decrease_inventory(self.inventory.id, 11))
        self.inventory.refresh_from_db()
        self.assertEqual(self.inventory.available_stock, 10)
        self.assertEqual(self.inventory.reserved_stock, 0)

    def test_decrease_exact_available_sells_out(self):
        self.assertTrue(decrease_inventory(self.inventory.id, 10))
        self.inventory.refresh_from_db()
        self.assertTrue(self.inventory.is_sold_out)

    def test_non_positive_quantity_rejected(self):
        self.assertFalse(decrease_inventory(self.inventory.id, 0))
        self.assertFalse(decrease_inventory(self.inventory.id, -2))
        self.assertFalse(restore_inventory(self.inventory.id, 0))

    def test_missing_row(self):
        self.assertFalse(decrease_inventory(999999, 1))
        self.assertFalse(restore_inventory(999999, 1))

    def test_restore_never_drives_reserved_below_zero(self):
        decrease_inventory(self.inventory.id, 2)
        self.assertTrue(restore_inventory(self.inventory.id, 5))
        self.inventory.refresh_from_db()
        self.assertEqual(self.inventory.reserved_stock, 0)
        self.assertEqual(self.inventory.available_stock, 13)

    def test_decrease_then_restore_round_trip(self):
        decrease_inventory(self.inventory.id, 3)
        restore_inventory(self.inventory.id, 3)
        self.inventory.refresh_from_db()
        self.assertEqual(self.inventory.available_stock, 10)
        self.assertEqual(self.inventory.reserved_stock, 0)


class InventoryAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.product = TestDataFactory.create_product()

    def test_create_slot_defaults_available_to_total(self):
        response = self.client.post('/api/v1/inventory/', {
            'product': self.product.id,
            'date': '2030-05-01',
            'option': 'Twin room',
            'total_stock': 20,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['available_stock'], 20)
        self.assertEqual(response.data['reserved_stock'], 0)

    def test_create_slot_rejects_available_over_total(self):
        response = self.client.post('/api/v1/inventory/', {
            'product': self.product.id,
            'date': '2030-05-01',
            'total_stock': 5,
            'available_stock': 6,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_slot_rejected(self):
        TestDataFactory.create_inventory(product=self.product, option='')
        slot = Inventory.objects.get()
        response = self.client.post('/api/v1/inventory/', {
            'product': self.product.id,
            'date': slot.date.isoformat(),
            'total_stock': 5,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_decrease_endpoint(self):
        slot = TestDataFactory.create_inventory(product=self.product, total_stock=5)
        response = self.client.post(f'/api/v1/inventory/{slot.id}/decrease/', {'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['available_stock'], 3)
        self.assertTrue(AuditLog.objects.filter(action='stock_decrease', object_id=str(slot.id)).exists())

    def test_decrease_endpoint_conflict(self):
        slot = TestDataFactory.create_inventory(product=self.product, total_stock=1)
        response = self.client.post(f'/api/v1/inventory/{slot.id}/decrease/', {'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Insufficient stock')

    def test_decrease_endpoint_validates_quantity(self):
        slot = TestDataFactory.create_inventory(product=self.product)
        response = self.client.post(f'/api/v1/inventory/{slot.id}/decrease/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_restore_endpoint(self):
        slot = TestDataFactory.create_inventory(product=self.product, total_stock=5, reserved_stock=2)
        response = self.client.post(f'/api/v1/inventory/{slot.id}/restore/', {'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['available_stock'], 5)
        self.assertEqual(response.data['reserved_stock'], 0)

    def test_cannot_delete_slot_with_reservations(self):
        slot = TestDataFactory.create_inventory(product=self.product, total_stock=5, reserved_stock=1)
        response = self.client.delete(f'/api/v1/inventory/{slot.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Inventory.objects.filter(pk=slot.pk).exists())

    def test_customer_cannot_adjust_stock(self):
        slot = TestDataFactory.create_inventory(product=self.product)
        customer = TestDataFactory.create_user()
        self.client.authenticate_user(customer)
        response = self.client.post(f'/api/v1/inventory/{slot.id}/decrease/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AvailabilityTests(TestCase):

    def test_availability_is_public_for_published_products(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_inventory(product=product, total_stock=2, available_stock=0, reserved_stock=2)
        client = AuthenticatedAPIClient()
        response = client.get(f'/api/v1/storefront/products/{product.id}/availability/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['is_sold_out'])

    def test_availability_hidden_for_drafts(self):
        product = TestDataFactory.create_product(status='draft')
        TestDataFactory.create_inventory(product=product)
        response = AuthenticatedAPIClient().get(f'/api/v1/storefront/products/{product.id}/availability/')
        self.assertEqual(response.data, [])
