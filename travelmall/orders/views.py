import csv
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone

from travelmall.catalog.models import TravelProduct
from travelmall.inventory.models import Inventory
from travelmall.core.utils import create_audit_log, paginate_queryset
from .models import Order, CartItem
from .filters import OrderFilter, apply_order_sorting
from .serializers import (
    CartSerializer, CartItemSerializer, CartItemAddSerializer, CartItemUpdateSerializer,
    CheckoutSerializer, OrderSerializer, OrderListSerializer, CustomerOrderSerializer,
    OrderStatusUpdateSerializer, OrderCancelSerializer, OrderRefundSerializer,
)
from .services import (
    OrderError, get_or_create_cart, add_to_cart, update_cart_item, remove_cart_item, clear_cart,
    checkout, update_order_status, cancel_order, refund_order,
    CUSTOMER_CANCELLABLE_STATUSES, CUSTOMER_CANCEL_REASON,
)

logger = logging.getLogger(__name__)


def _cart_response(cart, status_code=status.HTTP_200_OK):
    cart.refresh_from_db()
    return Response(CartSerializer(cart).data, status=status_code)


def _error_response(error):
    return Response({'error': str(error)}, status=error.status_code)


# Cart views
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    """Get the current user's cart, or empty it"""
    cart = get_or_create_cart(request.user)
    if request.method == 'DELETE':
        clear_cart(cart)
    return _cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_add_item(request):
    """Add a product to the cart (merges with an existing line for the same dates)"""
    serializer = CartItemAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    product = get_object_or_404(TravelProduct, pk=data['product'])
    inventory = None
    if data.get('inventory'):
        inventory = get_object_or_404(Inventory, pk=data['inventory'])

    try:
        item = add_to_cart(
            request.user, product,
            adults=data['adults'], children=data['children'], infants=data['infants'],
            start_date=data.get('start_date'), end_date=data.get('end_date'),
            inventory=inventory,
        )
    except OrderError as e:
        return _error_response(e)

    return _cart_response(item.cart, status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, pk):
    """Change traveler counts of a cart line or remove it"""
    item = get_object_or_404(CartItem.objects.select_related('product', 'cart'), pk=pk, cart__user=request.user)

    if request.method == 'DELETE':
        cart = remove_cart_item(item)
        return _cart_response(cart)

    serializer = CartItemUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        item = update_cart_item(item, **serializer.validated_data)
    except OrderError as e:
        return _error_response(e)
    return Response(CartItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_checkout(request):
    """Place an order from the cart"""
    serializer = CheckoutSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    customer = {
        'name': data.get('customer_name', ''),
        'email': data.get('customer_email', ''),
        'phone': data.get('customer_phone', ''),
        'address': data.get('customer_address', {}),
    }
    try:
        order = checkout(
            request.user, customer,
            payment_method=data['payment_method'],
            coupon_code=data.get('coupon_code', ''),
            special_requests=data.get('special_requests', ''),
            is_business_trip=data['is_business_trip'],
            tax_invoice_requested=data['tax_invoice_requested'],
            travelers=data.get('travelers'),
        )
    except OrderError as e:
        logger.warning(f"Checkout rejected for {request.user.username}: {str(e)}")
        return _error_response(e)

    create_audit_log(
        request=request,
        action='order_checkout',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'total_amount': str(order.total_amount), 'coupon_code': order.coupon_code}
    )
    return Response(CustomerOrderSerializer(order).data, status=status.HTTP_201_CREATED)


# Customer order views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_order_list(request):
    """Orders of the current user, newest first"""
    queryset = Order.objects.filter(user=request.user).select_related('payment').prefetch_related('items')
    status_filter = request.query_params.get('status', None)
    if status_filter:
        queryset = queryset.filter(status__in=[s for s in status_filter.split(',') if s])
    queryset = queryset.order_by('-created_at')
    return Response(paginate_queryset(request, queryset, OrderListSerializer, default_limit=10))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_order_detail(request, pk):
    order = get_object_or_404(
        Order.objects.select_related('payment').prefetch_related('items', 'history'),
        pk=pk, user=request.user
    )
    return Response(CustomerOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def my_order_cancel(request, pk):
    """Cancel one of the caller's own orders while it is pending or confirmed"""
    order = get_object_or_404(Order, pk=pk, user=request.user)
    serializer = OrderCancelSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order, previous_status, refund_amount = cancel_order(
            order,
            reason=serializer.validated_data['reason'] or CUSTOMER_CANCEL_REASON,
            user=request.user,
            allowed_statuses=CUSTOMER_CANCELLABLE_STATUSES
        )
    except OrderError as e:
        logger.warning(f"Customer cancel rejected for order {pk}: {str(e)}")
        return _error_response(e)

    create_audit_log(
        request=request,
        action='order_cancel',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'previous_status': previous_status, 'reason': order.cancel_reason, 'by_customer': True}
    )
    order = Order.objects.select_related('payment').prefetch_related('items', 'history').get(pk=order.pk)
    return Response(CustomerOrderSerializer(order).data)


# Back-office order views
def _filtered_orders(request):
    queryset = Order.objects.select_related('payment').prefetch_related('items')
    filterset = OrderFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return None, filterset.errors
    queryset = apply_order_sorting(
        filterset.qs,
        request.query_params.get('sort_by'),
        request.query_params.get('sort_order')
    )
    return queryset, None


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_list(request):
    """Filtered, sorted and paginated order list"""
    queryset, errors = _filtered_orders(request)
    if errors:
        return Response(errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(paginate_queryset(request, queryset, OrderListSerializer, default_limit=20))


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_detail(request, pk):
    """Order with items, payment and history; PATCH updates admin notes"""
    order = get_object_or_404(
        Order.objects.select_related('payment').prefetch_related('items', 'history__created_by'),
        pk=pk
    )
    if request.method == 'PATCH':
        editable = {k: request.data[k] for k in ('admin_notes', 'special_requests') if k in request.data}
        if not editable:
            return Response({'error': 'Nothing to update'}, status=status.HTTP_400_BAD_REQUEST)
        for key, value in editable.items():
            setattr(order, key, value or '')
        order.save(update_fields=list(editable.keys()) + ['updated_at'])
        create_audit_log(
            request=request,
            action='update',
            model_name='Order',
            object_id=str(order.id),
            object_reference=order.order_number,
            changes=editable
        )
    return Response(OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_update_status(request, pk):
    """Change order status; same status is acknowledged without a history entry"""
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderStatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_status = serializer.validated_data['status']
    note = serializer.validated_data['note']
    previous_status = order.status
    try:
        order, changed = update_order_status(order, new_status, note=note, user=request.user)
    except OrderError as e:
        return _error_response(e)

    if not changed:
        return Response({
            'message': f'Order status is already {new_status}',
            'order_id': order.id,
            'status': new_status,
        })

    create_audit_log(
        request=request,
        action='order_status',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'previous_status': previous_status, 'status': new_status, 'note': note}
    )
    return Response({
        'message': 'Order status updated',
        'order_id': order.id,
        'previous_status': previous_status,
        'status': new_status,
    })


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_cancel(request, pk):
    """Cancel an order and restore its inventory"""
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderCancelSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order, previous_status, refund_amount = cancel_order(
            order,
            reason=serializer.validated_data['reason'],
            refund_amount=serializer.validated_data.get('refund_amount'),
            user=request.user
        )
    except OrderError as e:
        logger.warning(f"Cancel rejected for order {pk}: {str(e)}")
        return _error_response(e)

    create_audit_log(
        request=request,
        action='order_cancel',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'previous_status': previous_status, 'reason': order.cancel_reason}
    )
    return Response({
        'message': 'Order cancelled',
        'order': {
            'id': order.id,
            'order_number': order.order_number,
            'previous_status': previous_status,
            'new_status': order.status,
            'refund_amount': refund_amount,
        }
    })


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_refund(request, pk):
    """Refund an order in full or in part"""
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderRefundSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        order, previous_status, refund_amount = refund_order(
            order,
            reason=data['reason'],
            amount=data.get('amount'),
            is_partial=data['is_partial'],
            user=request.user
        )
    except OrderError as e:
        logger.warning(f"Refund rejected for order {pk}: {str(e)}")
        return _error_response(e)

    create_audit_log(
        request=request,
        action='order_refund',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'previous_status': previous_status, 'refund_amount': str(refund_amount), 'is_partial': data['is_partial']}
    )
    return Response({
        'message': 'Order refunded',
        'order': {
            'id': order.id,
            'order_number': order.order_number,
            'previous_status': previous_status,
            'new_status': order.status,
            'refund_amount': refund_amount,
            'is_partial': data['is_partial'],
        }
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def order_export_csv(request):
    """Export the filtered order list as CSV"""
    queryset, errors = _filtered_orders(request)
    if errors:
        return Response(errors, status=status.HTTP_400_BAD_REQUEST)

    filename = f"orders_{timezone.localdate().strftime('%Y%m%d')}.csv"
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    # BOM so spreadsheet apps detect UTF-8 (Korean names)
    response.write('\ufeff')

    writer = csv.writer(response)
    writer.writerow([
        'Order Number', 'Created At', 'Status', 'Customer Name', 'Customer Email', 'Customer Phone',
        'Products', 'Travelers', 'Subtotal', 'Coupon Code', 'Coupon Discount', 'Total Amount',
        'Currency', 'Payment Method', 'Payment Status',
    ])
    for order in queryset:
        items = list(order.items.all())
        payment = getattr(order, 'payment', None)
        writer.writerow([
            order.order_number,
            timezone.localtime(order.created_at).strftime('%Y-%m-%d %H:%M'),
            order.status,
            order.customer_name,
            order.customer_email,
            order.customer_phone,
            ' / '.join(item.product_title for item in items),
            sum(item.traveler_count for item in items),
            order.subtotal,
            order.coupon_code,
            order.coupon_discount,
            order.total_amount,
            order.currency,
            payment.method if payment else '',
            payment.status if payment else '',
        ])
    return response
