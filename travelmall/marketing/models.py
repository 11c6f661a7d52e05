from django.conf import settings
from django.db import models

SENDABLE_STATUSES = ['draft', 'scheduled']


class Notification(models.Model):
    """Site notice shown in the storefront notification list"""
    TYPE_CHOICES = [
        ('notice', 'Notice'),
        ('event', 'Event'),
        ('update', 'Update'),
    ]

    title = models.CharField(max_length=255)
    content = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='notice')
    is_published = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']


class PushAd(models.Model):
    """Push advertisement delivered through Firebase Cloud Messaging"""
    TARGET_TYPE_CHOICES = [
        ('all', 'All Users'),
        ('segment', 'Segment'),
        ('specific', 'Specific Users'),
    ]

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('scheduled', 'Scheduled'),
        ('sending', 'Sending'),
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    title = models.CharField(max_length=255)
    content = models.TextField()
    image_url = models.URLField(max_length=1000, blank=True)
    link_url = models.CharField(max_length=500, blank=True)
    target_type = models.CharField(max_length=20, choices=TARGET_TYPE_CHOICES, default='all')
    target_segment = models.CharField(max_length=100, blank=True)
    target_users = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='targeted_push_ads')
    scheduled_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    sent_count = models.PositiveIntegerField(default=0)
    sent_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_push_ads')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_sendable(self):
        return self.status in SENDABLE_STATUSES

    class Meta:
        db_table = 'push_ads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'scheduled_at'], name='idx_push_ad_status_sched'),
        ]


class DeviceToken(models.Model):
    """FCM registration token of a customer device"""
    PLATFORM_CHOICES = [
        ('web', 'Web'),
        ('android', 'Android'),
        ('ios', 'iOS'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='device_tokens')
    token = models.CharField(max_length=500, unique=True)
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES, default='web')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} ({self.platform})"

    class Meta:
        db_table = 'device_tokens'
