"""
Test suite for Core module
Tests: Registration, JWT login, profile, users, settings, audit logs, image storage
"""
from io import BytesIO
from unittest.mock import patch, MagicMock

from PIL import Image
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, RequestFactory, override_settings
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.core.models import AuditLog, Setting, User
from travelmall.core.storage import upload_image, build_image_name, ImageUploadError
from travelmall.core.utils import create_audit_log, get_client_ip, parse_bool


def png_upload(name='banner.png'):
    buffer = BytesIO()
    Image.new('RGB', (4, 4), color='#0099ff').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class AuthTests(TestCase):
    """Registration and token endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_returns_tokens(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'traveler1',
            'email': 'traveler1@test.com',
            'password': 'Sunny-Beach-2024',
            'password_confirm': 'Sunny-Beach-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertFalse(User.objects.get(username='traveler1').is_staff)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'traveler2',
            'password': 'Sunny-Beach-2024',
            'password_confirm': 'Other-Beach-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='traveler2').exists())

    def test_register_normalizes_email_and_rejects_duplicates(self):
        TestDataFactory.create_user(username='existing', email='jeju.fan@test.com')
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'traveler3',
            'email': 'Jeju.Fan@Test.com',
            'password': 'Sunny-Beach-2024',
            'password_confirm': 'Sunny-Beach-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['email'], ['This email is already in use'])

        response = self.client.post('/api/v1/auth/register/', {
            'username': 'traveler3',
            'email': 'Busan.Fan@Test.com',
            'password': 'Sunny-Beach-2024',
            'password_confirm': 'Sunny-Beach-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='traveler3').email, 'busan.fan@test.com')
        self.assertEqual(response.data['user']['role'], 'user')

    def test_register_requires_email_and_valid_phone(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'traveler4',
            'phone': 'call me',
            'password': 'Sunny-Beach-2024',
            'password_confirm': 'Sunny-Beach-2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)
        self.assertIn('phone', response.data)

    def test_login_includes_user(self):
        TestDataFactory.create_user(username='loginuser', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['username'], 'loginuser')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='loginuser2', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser2', 'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_update_profile(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.patch('/api/v1/auth/me/', {'phone': '010-1234-5678', 'is_staff': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.phone, '010-1234-5678')
        self.assertFalse(user.is_staff)
        self.assertFalse(response.data['is_admin'])


class UserAdminTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_customer_cannot_list_users(self):
        customer = TestDataFactory.create_user()
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_users_search(self):
        TestDataFactory.create_user(username='findme_user')
        response = self.client.get('/api/v1/users/?search=findme')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.staff.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.filter(pk=self.staff.pk).exists())


class SettingTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()

    def test_public_settings_expose_only_whitelisted_keys(self):
        Setting.objects.create(key='theme', value='ocean')
        Setting.objects.create(key='smtp_password', value='secret')
        response = self.client.get('/api/v1/settings/public/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data.get('theme'), 'ocean')
        self.assertNotIn('smtp_password', response.data)

    def test_create_setting(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/settings/', {'key': 'logo_url', 'value': 'https://cdn.test/logo.png'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_setting_key_format(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/settings/', {'key': 'Logo URL', 'value': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('key', response.data)


class AuditLogTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_create_audit_log_requires_fields(self):
        self.assertIsNone(create_audit_log(user=self.staff, action='create', model_name='Coupon'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_audit_log_list_filters_by_action(self):
        create_audit_log(user=self.staff, action='coupon_create', model_name='Coupon', object_id='1')
        create_audit_log(user=self.staff, action='order_status', model_name='Order', object_id='2')
        response = self.client.get('/api/v1/audit-logs/?action=coupon_create')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Coupon')
        self.assertEqual(response.data[0]['action_display'], 'Coupon Created')
        self.assertEqual(response.data[0]['user'], {
            'id': self.staff.id, 'username': self.staff.username, 'is_staff': True
        })

    def test_get_client_ip_prefers_forwarded_header(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='203.0.113.5, 10.0.0.1')
        self.assertEqual(get_client_ip(request), '203.0.113.5')

    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertTrue(parse_bool('1'))
        self.assertFalse(parse_bool('no'))
        self.assertIsNone(parse_bool(None))


class ImageStorageTests(TestCase):

    def test_build_image_name_keeps_extension(self):
        name = build_image_name('/banners/', 'Summer.JPG')
        self.assertTrue(name.startswith('banners/'))
        self.assertTrue(name.endswith('.jpg'))

    def test_rejects_unsupported_extension(self):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        with self.assertRaises(ImageUploadError):
            upload_image(upload, 'banners')

    def test_rejects_file_that_is_not_an_image(self):
        upload = SimpleUploadedFile('fake.png', b'not really a png', content_type='image/png')
        with self.assertRaisesMessage(ImageUploadError, 'File is not a valid image'):
            upload_image(upload, 'banners')

    @override_settings(AZURE_STORAGE_CONNECTION_STRING='')
    @patch('travelmall.core.storage.default_storage')
    def test_uses_default_storage_without_azure(self, mock_storage):
        mock_storage.save.return_value = 'banners/abc.png'
        mock_storage.url.return_value = '/media/banners/abc.png'
        upload = png_upload()
        self.assertEqual(upload_image(upload, 'banners'), '/media/banners/abc.png')
        mock_storage.save.assert_called_once()

    @override_settings(AZURE_STORAGE_CONNECTION_STRING='DefaultEndpointsProtocol=https;AccountName=test;AccountKey=a2V5;EndpointSuffix=core.windows.net')
    @patch('travelmall.core.storage.BlobServiceClient')
    def test_uses_azure_when_configured(self, mock_client_cls):
        blob_client = MagicMock()
        blob_client.url = 'https://test.blob.core.windows.net/travel-images/banners/abc.png'
        mock_client_cls.from_connection_string.return_value.get_blob_client.return_value = blob_client
        upload = png_upload()
        url = upload_image(upload, 'banners')
        self.assertTrue(url.startswith('https://test.blob.core.windows.net/'))
        blob_client.upload_blob.assert_called_once()
