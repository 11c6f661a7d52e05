import re

from rest_framework import serializers
from .models import Banner, HeroSlide, MainPageSection

HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}){1,2}$')


class BannerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Banner
        fields = ['id', 'title', 'background_color', 'image_url', 'link', 'is_active', 'order', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_background_color(self, value):
        if value and not HEX_COLOR_RE.match(value):
            raise serializers.ValidationError("Background color must be a hex colour like #1a2b3c")
        return value


class HeroSlideSerializer(serializers.ModelSerializer):
    class Meta:
        model = HeroSlide
        fields = ['id', 'image_url', 'title', 'description', 'button_text', 'button_url', 'order', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class MainPageSectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = MainPageSection
        fields = ['id', 'key', 'type', 'title', 'is_fixed', 'is_visible', 'order']
        read_only_fields = fields


class SectionReorderSerializer(serializers.Serializer):
    source_index = serializers.IntegerField(min_value=0)
    destination_index = serializers.IntegerField(min_value=0)


class HeroSlideMoveSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=['up', 'down'])
