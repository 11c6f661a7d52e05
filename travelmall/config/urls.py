"""
URL configuration for the travelmall project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Travel Mall Admin Panel"
admin.site.site_title = "Travel Mall Admin Portal"
admin.site.index_title = "Welcome to Travel Mall Back Office"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('travelmall.core.urls')),
    path('api/v1/', include('travelmall.catalog.urls')),
    path('api/v1/', include('travelmall.inventory.urls')),
    path('api/v1/', include('travelmall.promotions.urls')),
    path('api/v1/', include('travelmall.orders.urls')),
    path('api/v1/', include('travelmall.marketing.urls')),
    path('api/v1/', include('travelmall.design.urls')),
    path('api/v1/', include('travelmall.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
