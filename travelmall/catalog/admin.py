from django.contrib import admin
from django.utils.safestring import mark_safe
from .models import Category, TravelProduct, ProductImage, ItineraryDay


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'parent', 'order', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['order', 'name']


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ['preview', 'image_url', 'alt', 'order']
    readonly_fields = ['preview']

    def preview(self, obj):
        if obj.url:
            return mark_safe(f'<img src="{obj.url}" style="max-height: 60px;" />')
        return '-'


class ItineraryDayInline(admin.StackedInline):
    model = ItineraryDay
    extra = 0


@admin.register(TravelProduct)
class TravelProductAdmin(admin.ModelAdmin):
    list_display = ['title', 'region', 'status', 'price_adult', 'currency', 'is_best_seller', 'is_time_deal', 'updated_at']
    list_filter = ['status', 'is_best_seller', 'is_time_deal', 'region', 'categories', 'created_at']
    search_fields = ['title', 'short_description', 'region']
    ordering = ['-created_at']
    filter_horizontal = ['categories']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    inlines = [ProductImageInline, ItineraryDayInline]


@admin.register(ProductImage)
class ProductImageAdmin(admin.ModelAdmin):
    list_display = ['product', 'alt', 'order', 'created_at']
    search_fields = ['product__title', 'alt']
    ordering = ['product', 'order']
