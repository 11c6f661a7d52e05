import re

from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, AuditLog

# Digits with optional +, spaces and hyphens, e.g. 010-1234-5678 or +82 10 1234 5678
PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 \-]{7,18}[0-9]$')


def validate_phone(value):
    if value and not PHONE_PATTERN.match(value.strip()):
        raise serializers.ValidationError('Enter a valid phone number')
    return value.strip() if value else value


def validate_unique_email(value, instance=None):
    """Lower-case the address and reject one another account already uses"""
    email = (value or '').strip().lower()
    if not email:
        return email
    others = User.objects.filter(email__iexact=email)
    if instance is not None:
        others = others.exclude(pk=instance.pk)
    if others.exists():
        raise serializers.ValidationError('This email is already in use')
    return email


class UserSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name', 'first_name', 'last_name', 'phone', 'role',
                  'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']

    def get_name(self, obj):
        return obj.get_full_name() or obj.username

    def get_role(self, obj):
        return 'admin' if obj.is_staff else 'user'

    def validate_email(self, value):
        return validate_unique_email(value, self.instance)

    def validate_phone(self, value):
        return validate_phone(value)


class UserCreateSerializer(serializers.ModelSerializer):
    """Sign-up; the e-mail receives order confirmations so it is required"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def validate_email(self, value):
        return validate_unique_email(value)

    def validate_phone(self, value):
        return validate_phone(value)

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']

    def validate_key(self, value):
        key = value.strip()
        if not re.match(r'^[a-z][a-z0-9_]*$', key):
            raise serializers.ValidationError('Use lower-case letters, digits and underscores')
        return key


class AuditActorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'is_staff']


class AuditLogSerializer(serializers.ModelSerializer):
    user = AuditActorSerializer(read_only=True)
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'action_display', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
