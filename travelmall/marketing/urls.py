from django.urls import path
from .views import (
    notification_list_create, notification_detail, published_notifications,
    push_ad_list_create, push_ad_detail, push_ad_send, device_token_register,
)

urlpatterns = [
    path('notifications/', notification_list_create, name='notification-list-create'),
    path('notifications/<int:pk>/', notification_detail, name='notification-detail'),
    path('storefront/notifications/', published_notifications, name='storefront-notifications'),
    path('push-ads/', push_ad_list_create, name='push-ad-list-create'),
    path('push-ads/<int:pk>/', push_ad_detail, name='push-ad-detail'),
    path('push-ads/<int:pk>/send/', push_ad_send, name='push-ad-send'),
    path('devices/', device_token_register, name='device-token-register'),
]
