"""
Test suite for Catalog module
Tests: Categories, travel products, itinerary, images, storefront search
"""
from decimal import Decimal
from unittest.mock import patch

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.catalog.models import TravelProduct, ProductImage, ItineraryDay


class TravelProductModelTests(TestCase):

    def test_sale_price_percentage(self):
        product = TestDataFactory.create_product(
            price_adult=Decimal('200000.00'), discount_type='percentage', discount_value=Decimal('10.00')
        )
        self.assertEqual(product.sale_price, Decimal('180000.00'))

    def test_sale_price_fixed_never_negative(self):
        product = TestDataFactory.create_product(
            price_adult=Decimal('5000.00'), discount_type='fixed', discount_value=Decimal('9000.00')
        )
        self.assertEqual(product.sale_price, Decimal('0.00'))

    def test_main_image_uses_lowest_order(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_product_image(product, image_url='https://cdn.test/second.jpg', order=2)
        TestDataFactory.create_product_image(product, image_url='https://cdn.test/first.jpg', order=1)
        self.assertEqual(product.main_image, 'https://cdn.test/first.jpg')


class ProductAdminAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.category = TestDataFactory.create_category(name='Beach')

    def _payload(self, **overrides):
        data = {
            'title': 'Jeju 3-day escape',
            'region': 'Jeju',
            'status': 'published',
            'price_adult': '300000.00',
            'price_child': '200000.00',
            'duration_days': 3,
            'duration_nights': 2,
            'categories': [self.category.id],
            'itinerary': [
                {'day': 1, 'title': 'Arrival', 'activities': ['Check-in']},
                {'day': 2, 'title': 'Hallasan', 'activities': ['Hike']},
            ],
        }
        data.update(overrides)
        return data

    def test_customer_cannot_create_product(self):
        customer = TestDataFactory.create_user()
        self.client.authenticate_user(customer)
        response = self.client.post('/api/v1/products/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_product_with_itinerary(self):
        response = self.client.post('/api/v1/products/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = TravelProduct.objects.get(pk=response.data['id'])
        self.assertEqual(product.created_by, self.staff)
        self.assertEqual(product.itinerary.count(), 2)
        self.assertEqual(list(product.categories.all()), [self.category])

    def test_duplicate_itinerary_days_rejected(self):
        payload = self._payload(itinerary=[{'day': 1}, {'day': 1}])
        response = self.client.post('/api/v1/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(TravelProduct.objects.count(), 0)

    def test_percentage_discount_over_100_rejected(self):
        payload = self._payload(discount_type='percentage', discount_value='150')
        response = self.client.post('/api/v1/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_accommodation_grade_range(self):
        response = self.client.post('/api/v1/products/', self._payload(accommodation_grade=6), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_replace_itinerary(self):
        product = TestDataFactory.create_product()
        ItineraryDay.objects.create(product=product, day=1, title='Old')
        response = self.client.put(f'/api/v1/products/{product.id}/itinerary/', [
            {'day': 1, 'title': 'New day 1'},
            {'day': 2, 'title': 'New day 2'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([day['title'] for day in response.data], ['New day 1', 'New day 2'])

    def test_admin_list_is_paginated(self):
        for _ in range(3):
            TestDataFactory.create_product()
        response = self.client.get('/api/v1/products/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)

    def test_add_image_by_url(self):
        product = TestDataFactory.create_product()
        response = self.client.post(
            f'/api/v1/products/{product.id}/images/',
            {'image_url': 'https://cdn.test/jeju.jpg'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(product.images.count(), 1)

    def test_add_image_requires_file_or_url(self):
        product = TestDataFactory.create_product()
        response = self.client.post(f'/api/v1/products/{product.id}/images/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('travelmall.catalog.views.upload_image', return_value='https://cdn.test/uploaded.png')
    def test_upload_image_file(self, mock_upload):
        product = TestDataFactory.create_product()
        upload = SimpleUploadedFile('photo.png', b'\x89PNG', content_type='image/png')
        response = self.client.post(f'/api/v1/products/{product.id}/images/', {'image': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ProductImage.objects.get().image_url, 'https://cdn.test/uploaded.png')
        mock_upload.assert_called_once()

    @patch('travelmall.catalog.views.delete_image')
    def test_delete_image(self, mock_delete):
        product = TestDataFactory.create_product()
        image = TestDataFactory.create_product_image(product)
        response = self.client.delete(f'/api/v1/products/{product.id}/images/{image.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductImage.objects.exists())
        mock_delete.assert_called_once_with(image.image_url)


class StorefrontCatalogTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.beach = TestDataFactory.create_category(name='Beach')
        self.jeju = TestDataFactory.create_product(
            title='Jeju Ocean Tour', region='Jeju', price_adult=Decimal('300000.00'),
            is_best_seller=True, categories=[self.beach]
        )
        self.busan = TestDataFactory.create_product(
            title='Busan Night Walk', region='Busan', price_adult=Decimal('90000.00'),
            is_time_deal=True, duration_days=1, duration_nights=0
        )
        self.draft = TestDataFactory.create_product(title='Jeju Draft', region='Jeju', status='draft')

    def test_only_published_products_listed(self):
        response = self.client.get('/api/v1/storefront/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = {item['id'] for item in response.data['results']}
        self.assertEqual(ids, {self.jeju.id, self.busan.id})

    def test_search_matches_every_word(self):
        response = self.client.get('/api/v1/storefront/products/?search=jeju ocean')
        ids = [item['id'] for item in response.data['results']]
        self.assertEqual(ids, [self.jeju.id])

    def test_filter_region_category_and_price(self):
        response = self.client.get('/api/v1/storefront/products/?region=busan')
        self.assertEqual([item['id'] for item in response.data['results']], [self.busan.id])

        response = self.client.get(f'/api/v1/storefront/products/?category={self.beach.id}')
        self.assertEqual([item['id'] for item in response.data['results']], [self.jeju.id])

        response = self.client.get('/api/v1/storefront/products/?max_price=100000')
        self.assertEqual([item['id'] for item in response.data['results']], [self.busan.id])

    def test_duration_filter_and_sort(self):
        response = self.client.get('/api/v1/storefront/products/?duration=1-3&sort_by=price-asc')
        self.assertEqual([item['id'] for item in response.data['results']], [self.busan.id, self.jeju.id])

    def test_draft_detail_not_found(self):
        response = self.client.get(f'/api/v1/storefront/products/{self.draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_best_sellers_and_time_deals(self):
        response = self.client.get('/api/v1/storefront/products/best-sellers/')
        self.assertEqual([item['id'] for item in response.data], [self.jeju.id])
        response = self.client.get('/api/v1/storefront/products/time-deals/')
        self.assertEqual([item['id'] for item in response.data], [self.busan.id])

    def test_regions_from_published_products(self):
        response = self.client.get('/api/v1/storefront/regions/')
        self.assertEqual(response.data, ['Busan', 'Jeju'])

    def test_storefront_categories_count_published_only(self):
        self.draft.categories.add(self.beach)
        response = self.client.get('/api/v1/storefront/categories/')
        beach = next(item for item in response.data if item['id'] == self.beach.id)
        self.assertEqual(beach['product_count'], 1)
