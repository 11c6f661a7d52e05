"""
Push ad delivery through Firebase Cloud Messaging.

`all` ads go to the default topic, `segment` ads to a topic named after
the segment and `specific` ads to the active device tokens of the
targeted users.
"""
import logging
import re

import firebase_admin
from firebase_admin import credentials, messaging
from django.conf import settings
from django.utils import timezone

from .models import DeviceToken, PushAd, SENDABLE_STATUSES

logger = logging.getLogger(__name__)

# FCM accepts at most 500 tokens per multicast request
MULTICAST_BATCH_SIZE = 500


class PushDeliveryError(Exception):
    pass


def get_firebase_app():
    """Return the initialized Firebase app, initializing it on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred_path = getattr(settings, 'FIREBASE_CREDENTIALS_PATH', '')
    if cred_path:
        cred = credentials.Certificate(cred_path)
    else:
        cred = credentials.ApplicationDefault()
    app = firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin SDK initialized")
    return app


def segment_topic(segment):
    """FCM topic names allow [a-zA-Z0-9-_.~%]"""
    topic = re.sub(r'[^a-zA-Z0-9\-_.~%]', '-', segment.strip())
    return f"segment-{topic}"


def _notification(push_ad):
    return messaging.Notification(
        title=push_ad.title,
        body=push_ad.content,
        image=push_ad.image_url or None,
    )


def _data(push_ad):
    data = {'push_ad_id': str(push_ad.id)}
    if push_ad.link_url:
        data['link_url'] = push_ad.link_url
    return data


def _send_to_topic(push_ad, topic):
    message = messaging.Message(
        topic=topic,
        notification=_notification(push_ad),
        data=_data(push_ad),
    )
    message_id = messaging.send(message, app=get_firebase_app())
    logger.info(f"Push ad {push_ad.id} sent to topic {topic}: {message_id}")
    return 1


def _send_to_users(push_ad):
    tokens = list(
        DeviceToken.objects.filter(
            user__in=push_ad.target_users.all(), is_active=True
        ).values_list('token', flat=True)
    )
    if not tokens:
        raise PushDeliveryError('No active device tokens for the targeted users')

    sent = 0
    invalid_tokens = []
    for start in range(0, len(tokens), MULTICAST_BATCH_SIZE):
        batch = tokens[start:start + MULTICAST_BATCH_SIZE]
        message = messaging.MulticastMessage(
            tokens=batch,
            notification=_notification(push_ad),
            data=_data(push_ad),
        )
        response = messaging.send_each_for_multicast(message, app=get_firebase_app())
        sent += response.success_count
        for token, result in zip(batch, response.responses):
            if not result.success:
                invalid_tokens.append(token)

    if invalid_tokens:
        DeviceToken.objects.filter(token__in=invalid_tokens).update(is_active=False)
        logger.warning(f"Push ad {push_ad.id}: deactivated {len(invalid_tokens)} failing device tokens")
    if sent == 0:
        raise PushDeliveryError('Delivery failed for every targeted device')
    return sent


def deliver(push_ad):
    """Send a push ad; returns the number of accepted messages"""
    if push_ad.target_type == 'specific':
        return _send_to_users(push_ad)
    if push_ad.target_type == 'segment':
        if not push_ad.target_segment:
            raise PushDeliveryError('Segment push ads need a target segment')
        return _send_to_topic(push_ad, segment_topic(push_ad.target_segment))
    return _send_to_topic(push_ad, settings.PUSH_DEFAULT_TOPIC)


def claim_push_ad(push_ad):
    """
    Move a draft or scheduled ad to `sending` with a conditional update.

    Only one caller wins the claim for a given ad.

    Raises:
        PushDeliveryError: the ad was already claimed, sent or failed
    """
    claimed = PushAd.objects.filter(pk=push_ad.pk, status__in=SENDABLE_STATUSES).update(
        status='sending', updated_at=timezone.now()
    )
    if not claimed:
        push_ad.refresh_from_db(fields=['status'])
        raise PushDeliveryError(f'Push ad is already {push_ad.status}')
    push_ad.status = 'sending'


def send_push_ad(push_ad):
    """
    Claim and deliver a draft or scheduled push ad, recording the outcome.

    Returns True on success. On delivery failure the ad is marked `failed`
    with the error message; the exception is logged, not raised.

    Raises:
        PushDeliveryError: the ad is not sendable or another sender claimed it
    """
    claim_push_ad(push_ad)

    try:
        sent_count = deliver(push_ad)
    except Exception as e:
        logger.error(f"Push ad {push_ad.id} delivery failed: {str(e)}")
        push_ad.status = 'failed'
        push_ad.error_message = str(e)
        push_ad.save(update_fields=['status', 'error_message', 'updated_at'])
        return False

    push_ad.status = 'sent'
    push_ad.sent_count = sent_count
    push_ad.sent_at = timezone.now()
    push_ad.error_message = ''
    push_ad.save(update_fields=['status', 'sent_count', 'sent_at', 'error_message', 'updated_at'])
    return True


def send_due_push_ads(now=None):
    """Send every scheduled ad whose time has come; returns (sent, failed)"""
    now = now or timezone.now()
    sent = failed = 0
    for push_ad in PushAd.objects.filter(status='scheduled', scheduled_at__lte=now).order_by('scheduled_at'):
        try:
            delivered = send_push_ad(push_ad)
        except PushDeliveryError as e:
            logger.info(f"Skipping push ad {push_ad.id}: {str(e)}")
            continue
        if delivered:
            sent += 1
        else:
            failed += 1
    return sent, failed
