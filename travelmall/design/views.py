import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.shortcuts import get_object_or_404

from travelmall.core.cache_utils import get_cached_storefront_home, cache_storefront_home
from travelmall.core.storage import upload_image, delete_image, ImageUploadError
from travelmall.core.utils import create_audit_log
from .models import Banner, HeroSlide, MainPageSection
from .serializers import (
    BannerSerializer, HeroSlideSerializer, MainPageSectionSerializer,
    SectionReorderSerializer, HeroSlideMoveSerializer,
)
from .services import (
    get_sections, reorder_sections, toggle_section_visibility, reset_sections,
    move_hero_slide, build_storefront_home,
)

logger = logging.getLogger(__name__)


def _with_uploaded_image(request, folder):
    """Request data with image_url replaced by the stored upload, if a file was sent"""
    data = request.data.dict() if hasattr(request.data, 'dict') else dict(request.data)
    data.pop('image', None)
    uploaded_file = request.FILES.get('image')
    if uploaded_file:
        data['image_url'] = upload_image(uploaded_file, folder)
    return data


def _toggle_active(request, instance, model_name):
    instance.is_active = not instance.is_active
    instance.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(
        request=request,
        action='toggle_active',
        model_name=model_name,
        object_id=str(instance.id),
        object_name=instance.title,
        changes={'is_active': instance.is_active}
    )


# Banner views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def banner_list_create(request):
    """List all banners (newest first) or create one, optionally uploading its image"""
    if request.method == 'GET':
        banners = Banner.objects.order_by('-created_at')
        return Response(BannerSerializer(banners, many=True).data)

    try:
        data = _with_uploaded_image(request, 'banners')
    except ImageUploadError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    serializer = BannerSerializer(data=data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def banner_detail(request, pk):
    """Retrieve, update or delete a banner"""
    banner = get_object_or_404(Banner, pk=pk)

    if request.method == 'GET':
        return Response(BannerSerializer(banner).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_image = banner.image_url
        try:
            data = _with_uploaded_image(request, 'banners')
        except ImageUploadError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        serializer = BannerSerializer(banner, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            if previous_image and previous_image != banner.image_url:
                delete_image(previous_image)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        image_url = banner.image_url
        banner.delete()
        if image_url:
            delete_image(image_url)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def banner_toggle_active(request, pk):
    banner = get_object_or_404(Banner, pk=pk)
    _toggle_active(request, banner, 'Banner')
    return Response(BannerSerializer(banner).data)


# Hero slide views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def hero_slide_list_create(request):
    """List hero slides by order or add a slide at the end"""
    if request.method == 'GET':
        slides = HeroSlide.objects.order_by('order', 'id')
        return Response(HeroSlideSerializer(slides, many=True).data)

    try:
        data = _with_uploaded_image(request, 'hero-slides')
    except ImageUploadError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if 'order' not in data:
        data['order'] = HeroSlide.objects.count() + 1
    serializer = HeroSlideSerializer(data=data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def hero_slide_detail(request, pk):
    """Retrieve, update or delete a hero slide"""
    slide = get_object_or_404(HeroSlide, pk=pk)

    if request.method == 'GET':
        return Response(HeroSlideSerializer(slide).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_image = slide.image_url
        try:
            data = _with_uploaded_image(request, 'hero-slides')
        except ImageUploadError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        serializer = HeroSlideSerializer(slide, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            if previous_image and previous_image != slide.image_url:
                delete_image(previous_image)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        image_url = slide.image_url
        slide.delete()
        delete_image(image_url)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def hero_slide_toggle_active(request, pk):
    slide = get_object_or_404(HeroSlide, pk=pk)
    _toggle_active(request, slide, 'HeroSlide')
    return Response(HeroSlideSerializer(slide).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def hero_slide_move(request, pk):
    """Move a slide one position up or down"""
    slide = get_object_or_404(HeroSlide, pk=pk)
    serializer = HeroSlideMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    slides = move_hero_slide(slide, serializer.validated_data['direction'])
    return Response(HeroSlideSerializer(slides, many=True).data)


# Section views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def section_list(request):
    return Response(MainPageSectionSerializer(get_sections(), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def section_reorder(request):
    """Move a section from source_index to destination_index"""
    serializer = SectionReorderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    source_index = serializer.validated_data['source_index']
    destination_index = serializer.validated_data['destination_index']
    try:
        sections = reorder_sections(source_index, destination_index)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='section_reorder',
        model_name='MainPageSection',
        object_id=str(sections[destination_index].id),
        object_name=sections[destination_index].key,
        changes={'source_index': source_index, 'destination_index': destination_index}
    )
    return Response(MainPageSectionSerializer(sections, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def section_toggle_visibility(request, key):
    try:
        section = toggle_section_visibility(key)
    except MainPageSection.DoesNotExist:
        return Response({'error': 'Section not found'}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(MainPageSectionSerializer(section).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def section_reset(request):
    """Restore the default section list"""
    sections = reset_sections()
    create_audit_log(
        request=request,
        action='section_reset',
        model_name='MainPageSection',
        object_id='all',
    )
    return Response(MainPageSectionSerializer(sections, many=True).data)


# Storefront
@api_view(['GET'])
@permission_classes([AllowAny])
def storefront_home(request):
    """Home page payload: visible sections, hero slides, banners, featured products"""
    data = get_cached_storefront_home()
    if data is not None:
        return Response(data)

    data = build_storefront_home()
    cache_storefront_home(data)
    return Response(data)
