"""
Test suite for Design module
Tests: Banners, hero slides, main page sections, storefront home
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.core.models import AuditLog
from travelmall.design.models import Banner, HeroSlide, MainPageSection
from travelmall.design.services import (
    DEFAULT_SECTIONS, get_sections, reorder_sections, toggle_section_visibility, move_hero_slide,
)


class BannerTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_create_banner(self):
        response = self.client.post('/api/v1/design/banners/', {
            'title': 'Autumn in Gyeongju', 'background_color': '#c0392b', 'link': '/products?region=Gyeongju'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_active'])

    def test_invalid_colour_rejected(self):
        response = self.client.post('/api/v1/design/banners/', {
            'title': 'Bad colour', 'background_color': 'red'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('background_color', response.data)

    def test_toggle_active_flips_flag(self):
        banner = TestDataFactory.create_banner(is_active=True)
        response = self.client.post(f'/api/v1/design/banners/{banner.id}/toggle-active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])
        response = self.client.post(f'/api/v1/design/banners/{banner.id}/toggle-active/')
        self.assertTrue(response.data['is_active'])
        self.assertEqual(AuditLog.objects.filter(action='toggle_active', model_name='Banner').count(), 2)

    def test_list_newest_first(self):
        first = TestDataFactory.create_banner()
        second = TestDataFactory.create_banner()
        response = self.client.get('/api/v1/design/banners/')
        self.assertEqual([item['id'] for item in response.data], [second.id, first.id])

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/design/banners/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class HeroSlideTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_new_slide_goes_last(self):
        TestDataFactory.create_hero_slide(order=1)
        TestDataFactory.create_hero_slide(order=2)
        response = self.client.post('/api/v1/design/hero-slides/', {
            'image_url': 'https://cdn.test/hero.jpg', 'title': 'Jeju spring'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order'], 3)

    def test_image_required(self):
        response = self.client.post('/api/v1/design/hero-slides/', {'title': 'No image'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_move_up_renumbers(self):
        a = TestDataFactory.create_hero_slide(order=1)
        b = TestDataFactory.create_hero_slide(order=5)
        c = TestDataFactory.create_hero_slide(order=9)
        response = self.client.post(f'/api/v1/design/hero-slides/{c.id}/move/', {'direction': 'up'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data], [a.id, c.id, b.id])
        self.assertEqual([item['order'] for item in response.data], [1, 2, 3])

    def test_move_first_up_is_noop(self):
        a = TestDataFactory.create_hero_slide(order=1)
        TestDataFactory.create_hero_slide(order=2)
        slides = move_hero_slide(a, 'up')
        self.assertEqual(slides[0].pk, a.pk)
        a.refresh_from_db()
        self.assertEqual(a.order, 1)

    def test_invalid_direction(self):
        slide = TestDataFactory.create_hero_slide()
        response = self.client.post(f'/api/v1/design/hero-slides/{slide.id}/move/', {'direction': 'left'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SectionServiceTests(TestCase):

    def test_defaults_seeded(self):
        sections = get_sections()
        self.assertEqual([s.key for s in sections], [key for key, _, _, _ in DEFAULT_SECTIONS])
        self.assertEqual([s.order for s in sections], list(range(len(DEFAULT_SECTIONS))))

    def test_reorder_rewrites_every_order(self):
        get_sections()
        sections = reorder_sections(4, 1)
        self.assertEqual(sections[1].key, 'regionalTravel')
        stored = list(MainPageSection.objects.order_by('order'))
        self.assertEqual([s.key for s in stored], [s.key for s in sections])
        self.assertEqual([s.order for s in stored], list(range(len(stored))))

    def test_reorder_out_of_range(self):
        with self.assertRaisesMessage(ValueError, 'Section index out of range (0-9)'):
            reorder_sections(0, 10)

    def test_fixed_section_cannot_be_moved(self):
        get_sections()
        with self.assertRaisesMessage(ValueError, 'Section header is fixed and cannot be moved'):
            reorder_sections(0, 5)
        stored = list(MainPageSection.objects.order_by('order').values_list('key', flat=True))
        self.assertEqual(stored, [key for key, _, _, _ in DEFAULT_SECTIONS])

    def test_fixed_section_cannot_be_hidden(self):
        with self.assertRaises(ValueError):
            toggle_section_visibility('header')

    def test_unknown_section(self):
        with self.assertRaises(MainPageSection.DoesNotExist):
            toggle_section_visibility('sidebar')


class SectionAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_list_seeds_defaults(self):
        response = self.client.get('/api/v1/design/sections/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 10)

    def test_reorder(self):
        response = self.client.post('/api/v1/design/sections/reorder/', {
            'source_index': 5, 'destination_index': 3
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[3]['key'], 'timeDeal')
        self.assertTrue(AuditLog.objects.filter(action='section_reorder').exists())

    def test_reorder_invalid_index(self):
        response = self.client.post('/api/v1/design/sections/reorder/', {
            'source_index': 0, 'destination_index': 42
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/design/sections/reorder/', {
            'source_index': -1, 'destination_index': 2
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reorder_fixed_section_rejected(self):
        response = self.client.post('/api/v1/design/sections/reorder/', {
            'source_index': 9, 'destination_index': 4
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(MainPageSection.objects.get(key='footer').order, 9)
        self.assertFalse(AuditLog.objects.filter(action='section_reorder').exists())

    def test_toggle_visibility(self):
        response = self.client.post('/api/v1/design/sections/review/toggle/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_visible'])

    def test_toggle_fixed_and_unknown(self):
        response = self.client.post('/api/v1/design/sections/footer/toggle/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/design/sections/nothing/toggle/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_reset(self):
        reorder_sections(3, 8)
        toggle_section_visibility('promotion')
        response = self.client.post('/api/v1/design/sections/reset/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[3]['key'], 'banner')
        self.assertTrue(all(item['is_visible'] for item in response.data))

    def test_seed_command(self):
        out = StringIO()
        call_command('seed_main_sections', stdout=out)
        self.assertEqual(MainPageSection.objects.count(), 10)


class StorefrontHomeTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()

    def tearDown(self):
        cache.clear()

    def test_home_payload(self):
        active = TestDataFactory.create_banner()
        TestDataFactory.create_banner(is_active=False)
        slide = TestDataFactory.create_hero_slide()
        TestDataFactory.create_hero_slide(order=2, is_active=False)
        best = TestDataFactory.create_product(is_best_seller=True)
        toggle_section_visibility('review')

        response = self.client.get('/api/v1/storefront/home/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['banners']], [active.id])
        self.assertEqual([item['id'] for item in response.data['hero_slides']], [slide.id])
        self.assertEqual([item['id'] for item in response.data['best_sellers']], [best.id])
        keys = [item['key'] for item in response.data['sections']]
        self.assertNotIn('review', keys)
        self.assertIn('header', keys)

    def test_home_invalidated_when_banner_changes(self):
        self.client.get('/api/v1/storefront/home/')
        with self.captureOnCommitCallbacks(execute=True):
            banner = TestDataFactory.create_banner()
        response = self.client.get('/api/v1/storefront/home/')
        self.assertEqual([item['id'] for item in response.data['banners']], [banner.id])
