from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal
from travelmall.catalog.models import TravelProduct, Category


DISCOUNT_TYPE_CHOICES = [
    ('percentage', 'Percentage'),
    ('fixed', 'Fixed Amount'),
]


class Coupon(models.Model):
    """Discount coupon redeemed by code at checkout"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('expired', 'Expired'),
        ('used', 'Used'),
    ]

    code = models.CharField(max_length=64, unique=True)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default='percentage')
    value = models.DecimalField(max_digits=12, decimal_places=2)
    min_order_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    max_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)  # percentage only
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    description = models.CharField(max_length=255, blank=True)
    usage_limit = models.PositiveIntegerField(default=1)
    usage_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    products = models.ManyToManyField(TravelProduct, blank=True, related_name='coupons')
    users = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='coupons')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.code

    def effective_status(self, now=None):
        """Stored status corrected for expiry and exhausted usage"""
        now = now or timezone.now()
        if self.end_date < now:
            return 'expired'
        if self.usage_count >= self.usage_limit:
            return 'used'
        return self.status

    def calculate_discount(self, amount):
        """
        Discount for an order amount.

        Zero below the minimum order amount; percentage discounts are capped
        by max_discount_amount; never more than the amount itself.
        """
        amount = Decimal(str(amount))
        if amount <= 0 or amount < self.min_order_amount:
            return Decimal('0.00')

        if self.discount_type == 'percentage':
            discount = amount * self.value / Decimal('100')
            if self.max_discount_amount:
                discount = min(discount, self.max_discount_amount)
        else:
            discount = self.value

        return min(discount, amount).quantize(Decimal('0.01'))

    class Meta:
        db_table = 'coupons'
        ordering = ['-created_at']


class Promotion(models.Model):
    """Storefront promotion (special offer banner with optional code)"""
    PROMOTION_TYPE_CHOICES = DISCOUNT_TYPE_CHOICES + [
        ('coupon', 'Coupon'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    promotion_type = models.CharField(max_length=20, choices=PROMOTION_TYPE_CHOICES, default='percentage')
    value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    code = models.CharField(max_length=64, blank=True)
    image_url = models.URLField(max_length=1000, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    min_order_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    max_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    products = models.ManyToManyField(TravelProduct, blank=True, related_name='promotions')
    categories = models.ManyToManyField(Category, blank=True, related_name='promotions')
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    def is_running(self, now=None):
        now = now or timezone.now()
        if not self.is_active or not (self.start_date <= now <= self.end_date):
            return False
        return self.usage_limit is None or self.used_count < self.usage_limit

    class Meta:
        db_table = 'promotions'
        ordering = ['-start_date']
