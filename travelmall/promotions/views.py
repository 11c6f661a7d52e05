import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.db import transaction
from django.db.models import F, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from .models import Coupon, Promotion
from .serializers import CouponSerializer, CouponValidateSerializer, PromotionSerializer
from .services import validate_coupon, CouponError
from travelmall.core.utils import create_audit_log

logger = logging.getLogger(__name__)


def _filter_by_effective_status(queryset, status_filter):
    """Translate effective coupon status into a query"""
    now = timezone.now()
    exhausted = Q(usage_count__gte=F('usage_limit'))
    if status_filter == 'expired':
        return queryset.filter(end_date__lt=now)
    if status_filter == 'used':
        return queryset.filter(end_date__gte=now).filter(exhausted | Q(status='used'))
    if status_filter == 'active':
        return queryset.filter(end_date__gte=now, status='active').exclude(exhausted)
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def coupon_list_create(request):
    """List coupons (optionally by ?status=) or create a new coupon"""
    if request.method == 'GET':
        queryset = Coupon.objects.prefetch_related('products', 'users').order_by('-created_at')
        status_filter = request.query_params.get('status', None)
        if status_filter:
            queryset = _filter_by_effective_status(queryset, status_filter)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(Q(code__icontains=search) | Q(description__icontains=search))
        serializer = CouponSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = CouponSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            coupon = serializer.save(status='active', usage_count=0)
        create_audit_log(
            request=request,
            action='coupon_create',
            model_name='Coupon',
            object_id=str(coupon.id),
            object_name=coupon.code,
            changes={'discount_type': coupon.discount_type, 'value': str(coupon.value)}
        )
        logger.info(f"Coupon {coupon.code} created by {request.user.username}")
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def coupon_detail(request, pk):
    """Retrieve, update or delete a coupon"""
    coupon = get_object_or_404(Coupon, pk=pk)

    if request.method == 'GET':
        return Response(CouponSerializer(coupon).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CouponSerializer(coupon, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        code = coupon.code
        coupon.delete()
        create_audit_log(
            request=request,
            action='coupon_delete',
            model_name='Coupon',
            object_id=str(pk),
            object_name=code,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def coupon_validate(request):
    """Preview the discount a coupon gives for an order amount"""
    serializer = CouponValidateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        coupon, discount = validate_coupon(
            data['code'], data['amount'], user=request.user, product_ids=data['product_ids']
        )
    except CouponError as e:
        return Response({'valid': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'valid': True,
        'code': coupon.code,
        'discount_type': coupon.discount_type,
        'value': coupon.value,
        'discount': discount,
        'final_amount': data['amount'] - discount,
    })


# Promotion views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def promotion_list_create(request):
    """List all promotions or create a new promotion"""
    if request.method == 'GET':
        queryset = Promotion.objects.prefetch_related('products', 'categories').order_by('-start_date')
        serializer = PromotionSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = PromotionSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def promotion_detail(request, pk):
    """Retrieve, update or delete a promotion"""
    promotion = get_object_or_404(Promotion, pk=pk)

    if request.method == 'GET':
        return Response(PromotionSerializer(promotion).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PromotionSerializer(promotion, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        promotion.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def active_promotions(request):
    """Promotions currently running, for the storefront promotion section"""
    now = timezone.now()
    queryset = Promotion.objects.filter(
        is_active=True, start_date__lte=now, end_date__gte=now
    ).prefetch_related('products', 'categories').order_by('end_date')
    promotions = [promotion for promotion in queryset if promotion.is_running(now)]
    return Response(PromotionSerializer(promotions, many=True).data)
