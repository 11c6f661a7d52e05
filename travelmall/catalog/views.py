import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.core.cache import cache
from django.db import transaction
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404

from .models import Category, TravelProduct, ProductImage
from .serializers import (
    CategorySerializer, TravelProductSerializer, TravelProductListSerializer,
    ProductImageSerializer, ItineraryDaySerializer
)
from .filters import ProductFilter
from .queries import published_products, get_best_sellers, get_time_deals, get_regions
from travelmall.core.cache_utils import make_cache_key, PRODUCTS_LIST_CACHE_TTL
from travelmall.core.storage import upload_image, delete_image, ImageUploadError
from travelmall.core.utils import create_audit_log, paginate_queryset

logger = logging.getLogger(__name__)


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.annotate(product_count=Count('products')).order_by('order', 'name')
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def storefront_category_list(request):
    """Active categories with their published product counts"""
    categories = Category.objects.filter(is_active=True).annotate(
        product_count=Count('products', filter=Q(products__status='published'))
    ).order_by('order', 'name')
    serializer = CategorySerializer(categories, many=True)
    return Response(serializer.data)


# Product views (back office)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_list_create(request):
    """List all travel products or create a new one"""
    if request.method == 'GET':
        queryset = TravelProduct.objects.prefetch_related('images').order_by('-updated_at', '-created_at')
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(paginate_queryset(request, filterset.qs, TravelProductListSerializer, default_limit=50))
    else:
        serializer = TravelProductSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            product = serializer.save(created_by=request.user)

        create_audit_log(
            request=request,
            action='create',
            model_name='TravelProduct',
            object_id=str(product.id),
            object_name=product.title,
            changes={'title': product.title, 'status': product.status, 'price_adult': str(product.price_adult)}
        )
        logger.info(f"Travel product {product.id} created by {request.user.username}")
        return Response(TravelProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_detail(request, pk):
    """Retrieve, update or delete a travel product"""
    product = get_object_or_404(TravelProduct.objects.prefetch_related('images', 'itinerary', 'categories'), pk=pk)

    if request.method == 'GET':
        serializer = TravelProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = TravelProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            product = serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='TravelProduct',
            object_id=str(product.id),
            object_name=product.title,
            changes={k: str(v) for k, v in request.data.items() if k not in ('itinerary', 'categories')}
        )
        return Response(TravelProductSerializer(product).data)
    else:  # DELETE
        image_urls = [image.image_url for image in product.images.all() if image.image_url]
        product_id = product.id
        product_title = product.title
        product.delete()
        for url in image_urls:
            delete_image(url)
        create_audit_log(
            request=request,
            action='delete',
            model_name='TravelProduct',
            object_id=str(product_id),
            object_name=product_title,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def product_images(request, pk):
    """List a product's images, or upload a file / register an image URL"""
    product = get_object_or_404(TravelProduct, pk=pk)

    if request.method == 'GET':
        serializer = ProductImageSerializer(product.images.all(), many=True)
        return Response(serializer.data)

    uploaded_file = request.FILES.get('image')
    image_url = request.data.get('image_url', '')
    if not uploaded_file and not image_url:
        return Response({'error': 'image or image_url is required'}, status=status.HTTP_400_BAD_REQUEST)

    if uploaded_file:
        try:
            image_url = upload_image(uploaded_file, f'products/{product.id}')
        except ImageUploadError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    next_order = product.images.count()
    try:
        order = int(request.data.get('order', next_order))
    except (TypeError, ValueError):
        order = next_order
    image = ProductImage.objects.create(
        product=product,
        image_url=image_url,
        alt=request.data.get('alt', '') or product.title,
        order=order
    )
    return Response(ProductImageSerializer(image).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_image_detail(request, pk, image_id):
    """Remove one image from a product"""
    image = get_object_or_404(ProductImage, pk=image_id, product_id=pk)
    image_url = image.image_url
    image.delete()
    delete_image(image_url)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def product_itinerary(request, pk):
    """Get or replace a product's day-by-day itinerary"""
    product = get_object_or_404(TravelProduct, pk=pk)

    if request.method == 'GET':
        serializer = ItineraryDaySerializer(product.itinerary.all(), many=True)
        return Response(serializer.data)

    serializer = TravelProductSerializer(product, data={'itinerary': request.data}, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        serializer.save()
    return Response(ItineraryDaySerializer(product.itinerary.all(), many=True).data)


# Storefront views (public)
@api_view(['GET'])
@permission_classes([AllowAny])
def storefront_product_list(request):
    """Published products filtered by text, region, category, flags and price"""
    params = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
    cache_key = make_cache_key('products_list', **params)
    cached = cache.get(cache_key)
    if cached is not None:
        return Response(cached)

    filterset = ProductFilter(request.query_params, queryset=published_products().order_by('-created_at'))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    data = paginate_queryset(request, filterset.qs, TravelProductListSerializer, default_limit=12)
    cache.set(cache_key, data, PRODUCTS_LIST_CACHE_TTL)
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def storefront_product_detail(request, pk):
    """Published product with images and itinerary"""
    product = get_object_or_404(
        TravelProduct.objects.filter(status='published').prefetch_related('images', 'itinerary', 'categories'),
        pk=pk
    )
    return Response(TravelProductSerializer(product).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def best_sellers(request):
    limit = _limit_param(request, 8)
    return Response(TravelProductListSerializer(get_best_sellers(limit), many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def time_deals(request):
    limit = _limit_param(request, 8)
    return Response(TravelProductListSerializer(get_time_deals(limit), many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def region_list(request):
    return Response(get_regions())


def _limit_param(request, default):
    try:
        return min(max(int(request.query_params.get('limit', default)), 1), 50)
    except (TypeError, ValueError):
        return default
