from django.contrib import admin
from .models import Coupon, Promotion


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ['code', 'discount_type', 'value', 'min_order_amount', 'usage_count', 'usage_limit', 'status', 'start_date', 'end_date']
    list_filter = ['discount_type', 'status', 'start_date', 'end_date']
    search_fields = ['code', 'description']
    ordering = ['-created_at']
    filter_horizontal = ['products', 'users']
    readonly_fields = ['usage_count', 'created_at', 'updated_at']


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ['title', 'promotion_type', 'value', 'code', 'is_active', 'start_date', 'end_date']
    list_filter = ['promotion_type', 'is_active', 'start_date']
    search_fields = ['title', 'code']
    ordering = ['-start_date']
    filter_horizontal = ['products', 'categories']
