from django.urls import path
from .views import (
    category_list_create, category_detail, storefront_category_list,
    product_list_create, product_detail,
    product_images, product_image_detail, product_itinerary,
    storefront_product_list, storefront_product_detail,
    best_sellers, time_deals, region_list,
)

urlpatterns = [
    # Back office
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),
    path('products/', product_list_create, name='product-list-create'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/images/', product_images, name='product-images'),
    path('products/<int:pk>/images/<int:image_id>/', product_image_detail, name='product-image-detail'),
    path('products/<int:pk>/itinerary/', product_itinerary, name='product-itinerary'),

    # Storefront
    path('storefront/categories/', storefront_category_list, name='storefront-category-list'),
    path('storefront/products/', storefront_product_list, name='storefront-product-list'),
    path('storefront/products/best-sellers/', best_sellers, name='storefront-best-sellers'),
    path('storefront/products/time-deals/', time_deals, name='storefront-time-deals'),
    path('storefront/products/<int:pk>/', storefront_product_detail, name='storefront-product-detail'),
    path('storefront/regions/', region_list, name='storefront-region-list'),
]
