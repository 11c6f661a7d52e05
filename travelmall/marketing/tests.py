"""
Test suite for Marketing module
Tests: Notifications, push ads (FCM mocked), device tokens, scheduled sending
"""
from datetime import timedelta
from io import StringIO
from unittest.mock import patch, MagicMock

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from travelmall.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from travelmall.core.models import AuditLog
from travelmall.marketing.models import Notification, PushAd, DeviceToken
from travelmall.marketing.push import send_push_ad, send_due_push_ads, segment_topic, PushDeliveryError


def multicast_response(results):
    response = MagicMock()
    response.success_count = sum(1 for ok in results if ok)
    response.responses = [MagicMock(success=ok) for ok in results]
    return response


class NotificationTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_create_requires_title_and_content(self):
        response = self.client.post('/api/v1/notifications/', {'title': ' ', 'content': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('title', response.data)
        self.assertIn('content', response.data)

    def test_create_records_author(self):
        response = self.client.post('/api/v1/notifications/', {
            'title': 'Holiday hours', 'content': 'Closed on Chuseok', 'type': 'notice'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Notification.objects.get().created_by, self.staff)

    def test_filter_by_type(self):
        TestDataFactory.create_notification(type='event')
        TestDataFactory.create_notification(type='notice')
        response = self.client.get('/api/v1/notifications/?type=event')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['type'], 'event')

    def test_storefront_lists_published_only(self):
        published = TestDataFactory.create_notification()
        TestDataFactory.create_notification(is_published=False)
        response = AuthenticatedAPIClient().get('/api/v1/storefront/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [published.id])


class PushAdAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_staff()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_create_draft_and_scheduled(self):
        response = self.client.post('/api/v1/push-ads/', {'title': 'Sale', 'content': 'Up to 30% off'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')

        scheduled_at = (timezone.now() + timedelta(hours=2)).isoformat()
        response = self.client.post('/api/v1/push-ads/', {
            'title': 'Tomorrow', 'content': 'Flash deal', 'scheduled_at': scheduled_at
        }, format='json')
        self.assertEqual(response.data['status'], 'scheduled')

    def test_segment_requires_segment_name(self):
        response = self.client.post('/api/v1/push-ads/', {
            'title': 'VIP', 'content': 'Hello', 'target_type': 'segment'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('target_segment', response.data)

    def test_specific_requires_users(self):
        response = self.client.post('/api/v1/push-ads/', {
            'title': 'Just you', 'content': 'Hello', 'target_type': 'specific', 'target_users': []
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sent_ad_cannot_be_edited(self):
        push_ad = TestDataFactory.create_push_ad(status='sent')
        response = self.client.patch(f'/api/v1/push-ads/{push_ad.id}/', {'title': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_already_sent(self):
        push_ad = TestDataFactory.create_push_ad(status='sent')
        response = self.client.post(f'/api/v1/push-ads/{push_ad.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Push ad is already sent')

    @override_settings(PUSH_DEFAULT_TOPIC='all-users')
    @patch('travelmall.marketing.push.get_firebase_app')
    @patch('travelmall.marketing.push.messaging')
    def test_send_to_all(self, mock_messaging, mock_app):
        mock_messaging.send.return_value = 'projects/test/messages/1'
        push_ad = TestDataFactory.create_push_ad()
        response = self.client.post(f'/api/v1/push-ads/{push_ad.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'sent')
        self.assertEqual(response.data['sent_count'], 1)
        mock_messaging.Message.assert_called_once()
        self.assertEqual(mock_messaging.Message.call_args.kwargs['topic'], 'all-users')
        self.assertTrue(AuditLog.objects.filter(action='push_send', object_id=str(push_ad.id)).exists())

    @patch('travelmall.marketing.push.get_firebase_app')
    @patch('travelmall.marketing.push.messaging')
    def test_send_failure_returns_502(self, mock_messaging, mock_app):
        mock_messaging.send.side_effect = RuntimeError('FCM unavailable')
        push_ad = TestDataFactory.create_push_ad()
        response = self.client.post(f'/api/v1/push-ads/{push_ad.id}/send/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        push_ad.refresh_from_db()
        self.assertEqual(push_ad.status, 'failed')
        self.assertEqual(push_ad.error_message, 'FCM unavailable')


@patch('travelmall.marketing.push.get_firebase_app')
@patch('travelmall.marketing.push.messaging')
class PushDeliveryTests(TestCase):

    def test_segment_goes_to_segment_topic(self, mock_messaging, mock_app):
        push_ad = TestDataFactory.create_push_ad(target_type='segment', target_segment='vip members')
        self.assertTrue(send_push_ad(push_ad))
        self.assertEqual(mock_messaging.Message.call_args.kwargs['topic'], 'segment-vip-members')

    def test_specific_users_deactivates_failing_tokens(self, mock_messaging, mock_app):
        user = TestDataFactory.create_user()
        good = TestDataFactory.create_device_token(user, token='good-token')
        bad = TestDataFactory.create_device_token(user, token='bad-token')
        TestDataFactory.create_device_token(user, token='old-token', is_active=False)
        mock_messaging.send_each_for_multicast.side_effect = lambda message, app: multicast_response(
            [token == 'good-token' for token in mock_messaging.MulticastMessage.call_args.kwargs['tokens']]
        )

        push_ad = TestDataFactory.create_push_ad(target_type='specific', target_users=[user])
        self.assertTrue(send_push_ad(push_ad))

        tokens = mock_messaging.MulticastMessage.call_args.kwargs['tokens']
        self.assertEqual(sorted(tokens), ['bad-token', 'good-token'])
        push_ad.refresh_from_db()
        self.assertEqual(push_ad.sent_count, 1)
        good.refresh_from_db()
        bad.refresh_from_db()
        self.assertTrue(good.is_active)
        self.assertFalse(bad.is_active)

    def test_specific_users_without_tokens_fails(self, mock_messaging, mock_app):
        user = TestDataFactory.create_user()
        push_ad = TestDataFactory.create_push_ad(target_type='specific', target_users=[user])
        self.assertFalse(send_push_ad(push_ad))
        push_ad.refresh_from_db()
        self.assertEqual(push_ad.status, 'failed')
        mock_messaging.send_each_for_multicast.assert_not_called()

    def test_sent_ad_is_not_resent(self, mock_messaging, mock_app):
        push_ad = TestDataFactory.create_push_ad(status='sent')
        with self.assertRaises(PushDeliveryError):
            send_push_ad(push_ad)

    def test_ad_claimed_elsewhere_is_not_delivered(self, mock_messaging, mock_app):
        push_ad = TestDataFactory.create_push_ad(status='scheduled', scheduled_at=timezone.now())
        stale = PushAd.objects.get(pk=push_ad.pk)
        PushAd.objects.filter(pk=push_ad.pk).update(status='sending')
        with self.assertRaisesMessage(PushDeliveryError, 'Push ad is already sending'):
            send_push_ad(stale)
        mock_messaging.send.assert_not_called()

    def test_ad_is_sending_while_delivered(self, mock_messaging, mock_app):
        push_ad = TestDataFactory.create_push_ad()
        seen = []

        def record_status(message, app):
            seen.append(PushAd.objects.get(pk=push_ad.pk).status)
            return 'projects/test/messages/1'

        mock_messaging.send.side_effect = record_status
        self.assertTrue(send_push_ad(push_ad))
        self.assertEqual(seen, ['sending'])
        push_ad.refresh_from_db()
        self.assertEqual(push_ad.status, 'sent')

    def test_send_due_skips_ad_claimed_mid_run(self, mock_messaging, mock_app):
        now = timezone.now()
        first = TestDataFactory.create_push_ad(status='scheduled', scheduled_at=now - timedelta(minutes=10))
        second = TestDataFactory.create_push_ad(status='scheduled', scheduled_at=now - timedelta(minutes=5))

        def claim_second(message, app):
            # The send-now endpoint grabs the second ad while the first is in flight
            PushAd.objects.filter(pk=second.pk).update(status='sending')
            return 'projects/test/messages/1'

        mock_messaging.send.side_effect = claim_second
        self.assertEqual(send_due_push_ads(now), (1, 0))
        self.assertEqual(mock_messaging.send.call_count, 1)
        first.refresh_from_db()
        self.assertEqual(first.status, 'sent')

    def test_send_due_push_ads(self, mock_messaging, mock_app):
        now = timezone.now()
        due = TestDataFactory.create_push_ad(status='scheduled', scheduled_at=now - timedelta(minutes=5))
        later = TestDataFactory.create_push_ad(status='scheduled', scheduled_at=now + timedelta(hours=1))
        TestDataFactory.create_push_ad(status='draft')

        self.assertEqual(send_due_push_ads(now), (1, 0))
        due.refresh_from_db()
        later.refresh_from_db()
        self.assertEqual(due.status, 'sent')
        self.assertEqual(later.status, 'scheduled')

    def test_command(self, mock_messaging, mock_app):
        TestDataFactory.create_push_ad(status='scheduled', scheduled_at=timezone.now() - timedelta(minutes=1))
        out = StringIO()
        call_command('send_scheduled_push_ads', '--dry-run', stdout=out)
        self.assertIn('Due push ads: 1', out.getvalue())
        mock_messaging.send.assert_not_called()

        out = StringIO()
        call_command('send_scheduled_push_ads', stdout=out)
        self.assertIn('Push ads sent: 1', out.getvalue())
        self.assertFalse(PushAd.objects.filter(status='scheduled').exists())


class SegmentTopicTests(TestCase):

    def test_segment_topic_sanitizes(self):
        self.assertEqual(segment_topic(' seoul/busan '), 'segment-seoul-busan')


class DeviceTokenTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_register_then_reregister(self):
        response = self.client.post('/api/v1/devices/', {'token': 'abc123', 'platform': 'android'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/devices/', {'token': 'abc123', 'platform': 'android'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(DeviceToken.objects.count(), 1)

    def test_token_moves_to_new_user(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_device_token(other, token='shared-device', is_active=False)
        self.client.post('/api/v1/devices/', {'token': 'shared-device'}, format='json')
        device = DeviceToken.objects.get(token='shared-device')
        self.assertEqual(device.user, self.user)
        self.assertTrue(device.is_active)

    def test_unregister(self):
        TestDataFactory.create_device_token(self.user, token='bye')
        response = self.client.delete('/api/v1/devices/', {'token': 'bye'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DeviceToken.objects.get(token='bye').is_active)
