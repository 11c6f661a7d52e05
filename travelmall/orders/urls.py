from django.urls import path
from .views import (
    cart_detail, cart_add_item, cart_item_detail, cart_checkout,
    my_order_list, my_order_detail, my_order_cancel,
    order_list, order_detail, order_update_status, order_cancel, order_refund, order_export_csv,
)

urlpatterns = [
    # Cart
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/items/', cart_add_item, name='cart-add-item'),
    path('cart/items/<int:pk>/', cart_item_detail, name='cart-item-detail'),
    path('cart/checkout/', cart_checkout, name='cart-checkout'),

    # Customer orders
    path('my/orders/', my_order_list, name='my-order-list'),
    path('my/orders/<int:pk>/', my_order_detail, name='my-order-detail'),
    path('my/orders/<int:pk>/cancel/', my_order_cancel, name='my-order-cancel'),

    # Back office
    path('orders/', order_list, name='order-list'),
    path('orders/export/', order_export_csv, name='order-export-csv'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', order_update_status, name='order-update-status'),
    path('orders/<int:pk>/cancel/', order_cancel, name='order-cancel'),
    path('orders/<int:pk>/refund/', order_refund, name='order-refund'),
]
