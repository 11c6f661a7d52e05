from django.contrib import admin
from .models import Banner, HeroSlide, MainPageSection


@admin.register(Banner)
class BannerAdmin(admin.ModelAdmin):
    list_display = ['title', 'background_color', 'is_active', 'order', 'created_at']
    list_filter = ['is_active']
    list_editable = ['is_active', 'order']
    search_fields = ['title', 'link']


@admin.register(HeroSlide)
class HeroSlideAdmin(admin.ModelAdmin):
    list_display = ['title', 'order', 'is_active', 'button_text', 'updated_at']
    list_filter = ['is_active']
    list_editable = ['order', 'is_active']
    search_fields = ['title', 'description']
    ordering = ['order', 'id']


@admin.register(MainPageSection)
class MainPageSectionAdmin(admin.ModelAdmin):
    list_display = ['key', 'type', 'title', 'is_fixed', 'is_visible', 'order']
    list_filter = ['type', 'is_fixed', 'is_visible']
    ordering = ['order', 'id']
    readonly_fields = ['key', 'type', 'is_fixed']
