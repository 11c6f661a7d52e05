"""Coupon redemption rules shared by the validate endpoint and checkout"""
import logging

from django.db.models import F
from django.utils import timezone

from .models import Coupon

logger = logging.getLogger(__name__)


class CouponError(Exception):
    """Coupon cannot be applied; the message is shown to the customer"""


def validate_coupon(code, amount, user=None, product_ids=None):
    """
    Check that a coupon can be redeemed for an order.

    Args:
        code: Coupon code (case-insensitive)
        amount: Order amount before discount
        user: Redeeming user (for user-scoped coupons)
        product_ids: Product ids in the order (for product-scoped coupons)

    Returns:
        (coupon, discount)

    Raises:
        CouponError: with the reason the coupon was rejected
    """
    code = (code or '').strip()
    if not code:
        raise CouponError('Coupon code is required')

    try:
        coupon = Coupon.objects.get(code__iexact=code)
    except Coupon.DoesNotExist:
        raise CouponError('Coupon not found')

    now = timezone.now()
    if coupon.start_date > now:
        raise CouponError('Coupon is not valid yet')

    effective_status = coupon.effective_status(now)
    if effective_status == 'expired':
        raise CouponError('Coupon has expired')
    if effective_status == 'used':
        raise CouponError('Coupon usage limit reached')

    if amount < coupon.min_order_amount:
        raise CouponError(f'Minimum order amount is {coupon.min_order_amount}')

    scoped_product_ids = set(coupon.products.values_list('id', flat=True))
    if scoped_product_ids and not scoped_product_ids.intersection({int(pid) for pid in (product_ids or [])}):
        raise CouponError('Coupon is not applicable to these products')

    if coupon.users.exists():
        if not user or not user.is_authenticated or not coupon.users.filter(pk=user.pk).exists():
            raise CouponError('Coupon is not available for this account')

    return coupon, coupon.calculate_discount(amount)


def record_coupon_usage(coupon):
    """
    Count one redemption; marks the coupon used once exhausted.

    The increment only applies while usage_count < usage_limit, so
    concurrent checkouts cannot push a coupon past its limit.

    Raises:
        CouponError: the coupon was exhausted in the meantime
    """
    updated = Coupon.objects.filter(pk=coupon.pk, usage_count__lt=F('usage_limit')).update(
        usage_count=F('usage_count') + 1
    )
    if not updated:
        raise CouponError('Coupon usage limit reached')
    coupon.refresh_from_db(fields=['usage_count', 'status'])
    if coupon.usage_count >= coupon.usage_limit and coupon.status == 'active':
        coupon.status = 'used'
        coupon.save(update_fields=['status', 'updated_at'])
        logger.info(f"Coupon {coupon.code} reached its usage limit")
