from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model with additional fields"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """Site settings (theme, logo, contact info)"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit log for back-office operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('order_checkout', 'Order Checkout'),
        ('order_status', 'Order Status Changed'),
        ('order_cancel', 'Order Cancelled'),
        ('order_refund', 'Order Refunded'),
        ('stock_decrease', 'Stock Decreased'),
        ('stock_restore', 'Stock Restored'),
        ('coupon_create', 'Coupon Created'),
        ('coupon_delete', 'Coupon Deleted'),
        ('push_send', 'Push Ad Sent'),
        ('section_reorder', 'Sections Reordered'),
        ('section_reset', 'Sections Reset'),
        ('toggle_active', 'Active Flag Toggled'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product title, coupon code)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_7d1c4e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_4b2f9a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_8e3a61_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__c5d0b2_idx'),
        ]
