from rest_framework import serializers
from django.contrib.auth import get_user_model
from travelmall.catalog.models import TravelProduct, Category
from .models import Coupon, Promotion

User = get_user_model()


class CouponSerializer(serializers.ModelSerializer):
    status = serializers.SerializerMethodField()
    products = serializers.PrimaryKeyRelatedField(many=True, queryset=TravelProduct.objects.all(), required=False)
    users = serializers.PrimaryKeyRelatedField(many=True, queryset=User.objects.all(), required=False)

    class Meta:
        model = Coupon
        fields = ['id', 'code', 'discount_type', 'value', 'min_order_amount', 'max_discount_amount',
                  'start_date', 'end_date', 'description', 'usage_limit', 'usage_count', 'status',
                  'products', 'users', 'created_at', 'updated_at']
        read_only_fields = ['usage_count', 'created_at', 'updated_at']

    def get_status(self, obj):
        return obj.effective_status()

    def validate_code(self, value):
        code = value.strip().upper()
        if not code:
            raise serializers.ValidationError("Coupon code is required")
        queryset = Coupon.objects.filter(code__iexact=code)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A coupon with this code already exists")
        return code

    def validate_value(self, value):
        if value <= 0:
            raise serializers.ValidationError("Discount value must be greater than 0")
        return value

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', 'percentage'))
        value = attrs.get('value', getattr(self.instance, 'value', None))
        if discount_type == 'percentage' and value is not None and value > 100:
            raise serializers.ValidationError({'value': 'Percentage discount cannot exceed 100'})
        if discount_type == 'fixed':
            # Cap only applies to percentage coupons
            attrs['max_discount_amount'] = None

        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and start_date >= end_date:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    product_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class PromotionSerializer(serializers.ModelSerializer):
    products = serializers.PrimaryKeyRelatedField(many=True, queryset=TravelProduct.objects.all(), required=False)
    categories = serializers.PrimaryKeyRelatedField(many=True, queryset=Category.objects.all(), required=False)
    is_running = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = ['id', 'title', 'description', 'promotion_type', 'value', 'code', 'image_url',
                  'start_date', 'end_date', 'min_order_amount', 'max_discount_amount',
                  'products', 'categories', 'usage_limit', 'used_count', 'is_active', 'is_running',
                  'created_at', 'updated_at']
        read_only_fields = ['used_count', 'created_at', 'updated_at']

    def get_is_running(self, obj):
        return obj.is_running()

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and start_date >= end_date:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        promotion_type = attrs.get('promotion_type', getattr(self.instance, 'promotion_type', 'percentage'))
        if promotion_type == 'coupon' and not attrs.get('code', getattr(self.instance, 'code', '')):
            raise serializers.ValidationError({'code': 'Coupon promotions require a code'})
        return attrs
