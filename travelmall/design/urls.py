from django.urls import path
from .views import (
    banner_list_create, banner_detail, banner_toggle_active,
    hero_slide_list_create, hero_slide_detail, hero_slide_toggle_active, hero_slide_move,
    section_list, section_reorder, section_toggle_visibility, section_reset,
    storefront_home,
)

urlpatterns = [
    path('design/banners/', banner_list_create, name='banner-list-create'),
    path('design/banners/<int:pk>/', banner_detail, name='banner-detail'),
    path('design/banners/<int:pk>/toggle-active/', banner_toggle_active, name='banner-toggle-active'),
    path('design/hero-slides/', hero_slide_list_create, name='hero-slide-list-create'),
    path('design/hero-slides/<int:pk>/', hero_slide_detail, name='hero-slide-detail'),
    path('design/hero-slides/<int:pk>/toggle-active/', hero_slide_toggle_active, name='hero-slide-toggle-active'),
    path('design/hero-slides/<int:pk>/move/', hero_slide_move, name='hero-slide-move'),
    path('design/sections/', section_list, name='section-list'),
    path('design/sections/reorder/', section_reorder, name='section-reorder'),
    path('design/sections/reset/', section_reset, name='section-reset'),
    path('design/sections/<str:key>/toggle/', section_toggle_visibility, name='section-toggle'),
    path('storefront/home/', storefront_home, name='storefront-home'),
]
