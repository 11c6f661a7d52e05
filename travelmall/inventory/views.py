import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.shortcuts import get_object_or_404

from .models import Inventory
from .serializers import InventorySerializer, StockChangeSerializer
from .services import decrease_inventory, restore_inventory
from travelmall.core.utils import create_audit_log

logger = logging.getLogger(__name__)


def _filter_inventory(request, queryset):
    product_id = request.query_params.get('product_id', None)
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    option = request.query_params.get('option', None)

    if product_id:
        queryset = queryset.filter(product_id=product_id)
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)
    if option is not None:
        queryset = queryset.filter(option=option)
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_list_create(request):
    """List inventory slots or create a new one"""
    if request.method == 'GET':
        queryset = _filter_inventory(request, Inventory.objects.select_related('product'))
        serializer = InventorySerializer(queryset.order_by('date', 'option'), many=True)
        return Response(serializer.data)
    else:
        serializer = InventorySerializer(data=request.data)
        if serializer.is_valid():
            inventory = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Inventory',
                object_id=str(inventory.id),
                object_name=str(inventory),
                changes={'total_stock': inventory.total_stock, 'available_stock': inventory.available_stock}
            )
            return Response(InventorySerializer(inventory).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_detail(request, pk):
    """Retrieve, update or delete an inventory slot"""
    inventory = get_object_or_404(Inventory.objects.select_related('product'), pk=pk)

    if request.method == 'GET':
        return Response(InventorySerializer(inventory).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = InventorySerializer(inventory, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if inventory.reserved_stock > 0:
            return Response(
                {'error': 'Cannot delete an inventory slot with reserved stock'},
                status=status.HTTP_400_BAD_REQUEST
            )
        inventory.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_decrease(request, pk):
    """Reserve seats on a slot; 409 when stock is insufficient"""
    get_object_or_404(Inventory, pk=pk)
    serializer = StockChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data['quantity']
    if not decrease_inventory(pk, quantity):
        return Response({'error': 'Insufficient stock'}, status=status.HTTP_409_CONFLICT)

    inventory = Inventory.objects.select_related('product').get(pk=pk)
    create_audit_log(
        request=request,
        action='stock_decrease',
        model_name='Inventory',
        object_id=str(pk),
        object_name=str(inventory),
        changes={'quantity': quantity, 'available_stock': inventory.available_stock}
    )
    return Response(InventorySerializer(inventory).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def inventory_restore(request, pk):
    """Return seats to a slot"""
    get_object_or_404(Inventory, pk=pk)
    serializer = StockChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data['quantity']
    if not restore_inventory(pk, quantity):
        return Response({'error': 'Could not restore stock'}, status=status.HTTP_409_CONFLICT)

    inventory = Inventory.objects.select_related('product').get(pk=pk)
    create_audit_log(
        request=request,
        action='stock_restore',
        model_name='Inventory',
        object_id=str(pk),
        object_name=str(inventory),
        changes={'quantity': quantity, 'available_stock': inventory.available_stock}
    )
    return Response(InventorySerializer(inventory).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_availability(request, product_id):
    """Departure calendar of a published product"""
    queryset = Inventory.objects.filter(
        product_id=product_id,
        product__status='published'
    ).select_related('product')
    queryset = _filter_inventory(request, queryset)
    data = [
        {
            'id': slot.id,
            'date': slot.date,
            'option': slot.option,
            'available_stock': slot.available_stock,
            'is_sold_out': slot.is_sold_out,
        }
        for slot in queryset.order_by('date', 'option')
    ]
    return Response(data)
