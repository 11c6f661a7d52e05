from django.urls import path
from .views import (
    inventory_list_create, inventory_detail,
    inventory_decrease, inventory_restore,
    product_availability,
)

urlpatterns = [
    path('inventory/', inventory_list_create, name='inventory-list-create'),
    path('inventory/<int:pk>/', inventory_detail, name='inventory-detail'),
    path('inventory/<int:pk>/decrease/', inventory_decrease, name='inventory-decrease'),
    path('inventory/<int:pk>/restore/', inventory_restore, name='inventory-restore'),
    path('storefront/products/<int:product_id>/availability/', product_availability, name='product-availability'),
]
