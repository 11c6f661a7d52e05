from django.contrib import admin
from .models import Inventory


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ['product', 'date', 'option', 'total_stock', 'available_stock', 'reserved_stock', 'updated_at']
    list_filter = ['date', 'product']
    search_fields = ['product__title', 'option']
    ordering = ['date', 'product']
    readonly_fields = ['reserved_stock', 'created_at', 'updated_at']
