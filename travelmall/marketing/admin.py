from django.contrib import admin
from .models import Notification, PushAd, DeviceToken


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'is_published', 'created_by', 'created_at']
    list_filter = ['type', 'is_published', 'created_at']
    search_fields = ['title', 'content']
    ordering = ['-created_at']


@admin.register(PushAd)
class PushAdAdmin(admin.ModelAdmin):
    list_display = ['title', 'target_type', 'target_segment', 'status', 'scheduled_at', 'sent_count', 'sent_at']
    list_filter = ['status', 'target_type', 'scheduled_at']
    search_fields = ['title', 'content', 'target_segment']
    ordering = ['-created_at']
    filter_horizontal = ['target_users']
    readonly_fields = ['sent_count', 'sent_at', 'error_message', 'created_at', 'updated_at']


@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'platform', 'is_active', 'updated_at']
    list_filter = ['platform', 'is_active']
    search_fields = ['user__username', 'token']
