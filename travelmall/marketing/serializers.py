from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import Notification, PushAd, DeviceToken

User = get_user_model()


class NotificationSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, allow_null=True)

    class Meta:
        model = Notification
        fields = ['id', 'title', 'content', 'type', 'is_published', 'created_by', 'created_by_username', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Title is required")
        return value.strip()

    def validate_content(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Content is required")
        return value


class PublicNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'content', 'type', 'created_at']


class PushAdSerializer(serializers.ModelSerializer):
    target_users = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), many=True, required=False)

    class Meta:
        model = PushAd
        fields = [
            'id', 'title', 'content', 'image_url', 'link_url', 'target_type', 'target_segment',
            'target_users', 'scheduled_at', 'status', 'sent_count', 'sent_at', 'error_message',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['status', 'sent_count', 'sent_at', 'error_message', 'created_by', 'created_at', 'updated_at']

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Title is required")
        return value.strip()

    def validate_content(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Content is required")
        return value

    def validate(self, data):
        instance = self.instance
        if instance is not None and not instance.is_sendable:
            raise serializers.ValidationError(f"A push ad that is already {instance.status} cannot be edited")

        target_type = data.get('target_type', instance.target_type if instance else 'all')
        target_segment = data.get('target_segment', instance.target_segment if instance else '')
        if target_type == 'segment' and not target_segment:
            raise serializers.ValidationError({'target_segment': 'Segment is required for segment targeting'})
        if target_type == 'specific':
            has_users = bool(data.get('target_users')) if 'target_users' in data else (
                instance is not None and instance.target_users.exists()
            )
            if not has_users:
                raise serializers.ValidationError({'target_users': 'Select at least one user for specific targeting'})
        return data

    def save(self, **kwargs):
        # Status follows the schedule until the ad is sent
        scheduled_at = self.validated_data.get(
            'scheduled_at', self.instance.scheduled_at if self.instance else None
        )
        kwargs.setdefault('status', 'scheduled' if scheduled_at else 'draft')
        return super().save(**kwargs)


class DeviceTokenSerializer(serializers.ModelSerializer):
    token = serializers.CharField(max_length=500, validators=[])

    class Meta:
        model = DeviceToken
        fields = ['id', 'token', 'platform', 'is_active', 'created_at']
        read_only_fields = ['is_active', 'created_at']
