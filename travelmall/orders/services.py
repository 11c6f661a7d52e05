"""
Cart, checkout and back-office order operations.

Cart totals are recomputed from scratch after every mutation. Checkout,
cancellation and refund each run inside a single database transaction.
"""
import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from travelmall.inventory.services import decrease_inventory, restore_inventory
from travelmall.promotions.services import validate_coupon, record_coupon_usage, CouponError
from .models import Cart, CartItem, Order, OrderItem, Payment, OrderStatusHistory, ORDER_STATUS_CHOICES
from .notifications import send_order_confirmation_email, send_order_status_email

logger = logging.getLogger(__name__)

VALID_STATUSES = [choice[0] for choice in ORDER_STATUS_CHOICES]
REFUNDABLE_STATUSES = ['paid', 'completed', 'cancelled']
CLOSED_STATUSES = ['cancelled', 'refunded']
CUSTOMER_CANCELLABLE_STATUSES = ['pending', 'confirmed']
DEFAULT_CANCEL_REASON = 'cancelled by admin'
CUSTOMER_CANCEL_REASON = 'cancelled by customer'
DEFAULT_REFUND_REASON = 'refunded by admin'


class OrderError(Exception):
    """Business rule rejection; message is returned to the client"""
    status_code = 400


class InsufficientStockError(OrderError):
    status_code = 409


# Cart

def calculate_subtotal(product, adults=0, children=0, infants=0):
    """Sum of price tier x traveler count; missing child/infant prices count as 0"""
    price_adult = product.price_adult or Decimal('0.00')
    price_child = product.price_child or Decimal('0.00')
    price_infant = product.price_infant or Decimal('0.00')
    subtotal = (
        price_adult * adults +
        price_child * children +
        price_infant * infants
    )
    return Decimal(subtotal).quantize(Decimal('0.01'))


def _validate_counts(adults, children, infants):
    if adults < 0 or children < 0 or infants < 0:
        raise OrderError('Traveler counts cannot be negative')
    if adults + children + infants < 1:
        raise OrderError('At least one traveler is required')


def get_or_create_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def recalculate_cart_total(cart):
    total = cart.items.aggregate(total=Sum('subtotal'))['total'] or Decimal('0.00')
    cart.total_amount = total
    cart.save(update_fields=['total_amount', 'updated_at'])
    return total


def add_to_cart(user, product, adults=1, children=0, infants=0, start_date=None, end_date=None, inventory=None):
    """
    Add a product to the user's cart.

    A line for the same product and travel dates is merged: counts are
    added and the subtotal recomputed.
    """
    _validate_counts(adults, children, infants)
    if product.status != 'published':
        raise OrderError('Product is not available for booking')
    if inventory is not None and inventory.product_id != product.id:
        raise OrderError('Inventory slot does not belong to this product')
    if inventory is not None and start_date is None:
        start_date = inventory.date
    if start_date and end_date and start_date > end_date:
        raise OrderError('End date must be after start date')

    with transaction.atomic():
        cart = get_or_create_cart(user)
        item = cart.items.filter(product=product, start_date=start_date, end_date=end_date).first()
        if item:
            item.adults += adults
            item.children += children
            item.infants += infants
            if inventory is not None:
                item.inventory = inventory
        else:
            item = CartItem(
                cart=cart,
                product=product,
                inventory=inventory,
                start_date=start_date,
                end_date=end_date,
                adults=adults,
                children=children,
                infants=infants,
            )
        item.subtotal = calculate_subtotal(product, item.adults, item.children, item.infants)
        item.save()
        recalculate_cart_total(cart)
    return item


def update_cart_item(item, adults=None, children=None, infants=None):
    """Replace traveler counts of a cart line and recompute"""
    adults = item.adults if adults is None else adults
    children = item.children if children is None else children
    infants = item.infants if infants is None else infants
    _validate_counts(adults, children, infants)

    with transaction.atomic():
        item.adults = adults
        item.children = children
        item.infants = infants
        item.subtotal = calculate_subtotal(item.product, adults, children, infants)
        item.save()
        recalculate_cart_total(item.cart)
    return item


def remove_cart_item(item):
    cart = item.cart
    with transaction.atomic():
        item.delete()
        recalculate_cart_total(cart)
    return cart


def clear_cart(cart):
    with transaction.atomic():
        cart.items.all().delete()
        recalculate_cart_total(cart)
    return cart


# Checkout

def generate_order_number():
    order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while Order.objects.filter(order_number=order_number).exists():
        order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return order_number


def checkout(user, customer, payment_method='credit_card', coupon_code='', special_requests='',
             is_business_trip=False, tax_invoice_requested=False, travelers=None):
    """
    Turn the user's cart into an order.

    Args:
        user: Ordering user
        customer: dict with name, email, phone, address
        travelers: optional {cart_item_id: [traveler dicts]}

    Raises:
        OrderError: empty cart, unavailable product or coupon rejection
        InsufficientStockError: an inventory slot cannot cover the travelers;
            nothing is written in that case
    """
    travelers = travelers or {}

    with transaction.atomic():
        cart = Cart.objects.select_for_update().filter(user=user).first()
        if cart is None:
            raise OrderError('Cart is empty')
        items = list(cart.items.select_related('product', 'inventory'))
        if not items:
            raise OrderError('Cart is empty')

        for item in items:
            if item.product.status != 'published':
                raise OrderError(f'{item.product.title} is no longer available')
            # Re-price from current tiers
            item.subtotal = calculate_subtotal(item.product, item.adults, item.children, item.infants)

        subtotal = sum((item.subtotal for item in items), Decimal('0.00'))
        currency = items[0].product.currency or settings.DEFAULT_CURRENCY

        coupon = None
        discount = Decimal('0.00')
        if coupon_code:
            try:
                coupon, discount = validate_coupon(
                    coupon_code, subtotal, user=user,
                    product_ids=[item.product_id for item in items]
                )
            except CouponError as e:
                raise OrderError(str(e))

        total = max(subtotal - discount, Decimal('0.00'))

        order = Order.objects.create(
            order_number=generate_order_number(),
            user=user,
            customer_name=customer.get('name') or user.get_full_name() or user.username,
            customer_email=customer.get('email') or user.email,
            customer_phone=customer.get('phone', '') or getattr(user, 'phone', '') or '',
            customer_address=customer.get('address') or {},
            status='pending',
            subtotal=subtotal,
            total_amount=total,
            currency=currency,
            coupon=coupon,
            coupon_code=coupon.code if coupon else '',
            coupon_discount=discount,
            special_requests=special_requests or '',
            is_business_trip=bool(is_business_trip),
            tax_invoice_requested=bool(tax_invoice_requested),
        )

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=item.product,
                product_title=item.product.title,
                inventory=item.inventory,
                adults=item.adults,
                children=item.children,
                infants=item.infants,
                price_adult=item.product.price_adult or Decimal('0.00'),
                price_child=item.product.price_child or Decimal('0.00'),
                price_infant=item.product.price_infant or Decimal('0.00'),
                subtotal=item.subtotal,
                start_date=item.start_date,
                end_date=item.end_date,
                travelers=travelers.get(str(item.id), travelers.get(item.id, [])),
            )
            for item in items
        ])

        Payment.objects.create(
            order=order,
            method=payment_method,
            status='pending',
            currency=currency,
        )
        OrderStatusHistory.objects.create(order=order, status='pending', note='Order placed', created_by=user)

        for item in items:
            if item.inventory_id and not decrease_inventory(item.inventory_id, item.traveler_count):
                raise InsufficientStockError(f'Not enough seats left for {item.product.title} on {item.start_date}')

        if coupon:
            try:
                record_coupon_usage(coupon)
            except CouponError as e:
                raise OrderError(str(e))

        cart.items.all().delete()
        recalculate_cart_total(cart)

    logger.info(f"Order {order.order_number} placed by {user.username}: total {total} {currency}")
    send_order_confirmation_email(order)
    return order


# Back-office operations

def _release_seats(order):
    for item in order.items.all():
        if item.inventory_id and item.traveler_count > 0:
            restore_inventory(item.inventory_id, item.traveler_count)


def update_order_status(order, new_status, note='', user=None):
    """
    Move an open order to a new status.

    Cancelling and refunding go through cancel_order/refund_order so seats
    are returned exactly once; closed orders cannot be reopened.

    Returns:
        (order, changed) where changed is False when the order already had
        that status (no history row, no e-mail)
    """
    if new_status not in VALID_STATUSES:
        raise OrderError(f'Invalid status: {new_status}')

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        previous_status = order.status
        if previous_status == new_status:
            return order, False
        if new_status in CLOSED_STATUSES:
            action = 'cancel' if new_status == 'cancelled' else 'refund'
            raise OrderError(f'Use the {action} action to mark an order {new_status}')
        if previous_status in CLOSED_STATUSES:
            raise OrderError(f'{previous_status.capitalize()} orders cannot be reopened')

        order.status = new_status
        order.save(update_fields=['status', 'updated_at'])

        if new_status == 'paid':
            Payment.objects.filter(order=order).exclude(status='completed').update(
                status='completed', paid_amount=order.total_amount, paid_at=timezone.now()
            )

        OrderStatusHistory.objects.create(
            order=order,
            status=new_status,
            previous_status=previous_status,
            note=note or '',
            created_by=user,
        )

    logger.info(f"Order {order.order_number} status {previous_status} -> {new_status}")
    send_order_status_email(order, previous_status, new_status, reason=note)
    return order, True


def cancel_order(order, reason='', refund_amount=None, user=None, allowed_statuses=None):
    """
    Cancel an order and return its seats to inventory.

    allowed_statuses narrows which statuses may be cancelled (customer
    self-service); status checks run against the locked row.
    """
    reason = reason or DEFAULT_CANCEL_REASON

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        previous_status = order.status
        if previous_status == 'cancelled':
            raise OrderError('Order is already cancelled')
        if previous_status == 'refunded':
            raise OrderError('Refunded orders cannot be cancelled')
        if allowed_statuses is not None and previous_status not in allowed_statuses:
            raise OrderError('Orders already in progress or completed cannot be cancelled')

        refund_amount = order.total_amount if refund_amount is None else Decimal(str(refund_amount))
        order.status = 'cancelled'
        order.cancel_reason = reason
        order.cancelled_at = timezone.now()
        order.save(update_fields=['status', 'cancel_reason', 'cancelled_at', 'updated_at'])

        _release_seats(order)

        OrderStatusHistory.objects.create(
            order=order,
            status='cancelled',
            previous_status=previous_status,
            note=reason,
            refund_amount=refund_amount,
            created_by=user,
        )

    logger.info(f"Order {order.order_number} cancelled: {reason}")
    send_order_status_email(order, previous_status, 'cancelled', reason=reason)
    return order, previous_status, refund_amount


def refund_order(order, reason='', amount=None, is_partial=False, user=None):
    """
    Refund a paid, completed or cancelled order in full or in part.

    Seats of a paid or completed order go back to inventory; a cancelled
    order already returned them.
    """
    reason = reason or DEFAULT_REFUND_REASON
    now = timezone.now()

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        previous_status = order.status
        if previous_status == 'refunded':
            raise OrderError('Order is already refunded')
        if previous_status not in REFUNDABLE_STATUSES:
            raise OrderError('Only paid, completed or cancelled orders can be refunded')

        refund_amount = order.total_amount if amount is None else Decimal(str(amount))
        if is_partial and (refund_amount <= 0 or refund_amount > order.total_amount):
            raise OrderError('Refund amount must be greater than 0 and no more than the order total')

        order.status = 'refunded'
        order.refunded_at = now
        order.save(update_fields=['status', 'refunded_at', 'updated_at'])

        if previous_status != 'cancelled':
            _release_seats(order)

        payment, _ = Payment.objects.get_or_create(order=order, defaults={'currency': order.currency})
        payment.status = 'partially_refunded' if is_partial else 'refunded'
        payment.refund_amount = refund_amount
        payment.refund_reason = reason
        payment.refund_date = now
        payment.refund_status = 'completed'
        payment.save()

        OrderStatusHistory.objects.create(
            order=order,
            status='refunded',
            previous_status=previous_status,
            note=reason,
            refund_amount=refund_amount,
            is_partial=is_partial,
            created_by=user,
        )

    logger.info(f"Order {order.order_number} refunded {refund_amount} (partial={is_partial})")
    send_order_status_email(order, previous_status, 'refunded', reason=reason,
                            refund_amount=refund_amount, is_partial=is_partial)
    return order, previous_status, refund_amount
