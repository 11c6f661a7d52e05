from django.conf import settings
from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Travel categories (theme, region group, etc.)"""
    name = models.CharField(max_length=200, db_index=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['order', 'name']


class TravelProduct(models.Model):
    """Travel product (package tour, hotel, activity)"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('published', 'Published'),
        ('archived', 'Archived'),
    ]

    DISCOUNT_TYPE_CHOICES = [
        ('percentage', 'Percentage'),
        ('fixed', 'Fixed Amount'),
    ]

    TRANSPORT_TYPE_CHOICES = [
        ('flight', 'Flight'),
        ('bus', 'Bus'),
        ('train', 'Train'),
        ('ship', 'Ship'),
        ('none', 'None'),
    ]

    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=500, blank=True)
    region = models.CharField(max_length=100, blank=True, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')

    # Price tiers per traveler type
    price_adult = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    price_child = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    price_infant = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    original_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default='KRW')
    fuel_surcharge = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, blank=True)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    duration_days = models.PositiveIntegerField(default=1)
    duration_nights = models.PositiveIntegerField(default=0)

    includes_transport = models.BooleanField(default=False)
    transport_type = models.CharField(max_length=20, choices=TRANSPORT_TYPE_CHOICES, default='none')
    includes_accommodation = models.BooleanField(default=False)
    accommodation_type = models.CharField(max_length=100, blank=True)
    accommodation_grade = models.PositiveSmallIntegerField(null=True, blank=True)  # 1-5 stars

    included_services = models.JSONField(default=list, blank=True)
    excluded_services = models.JSONField(default=list, blank=True)
    highlights = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    terms = models.TextField(blank=True)
    min_travelers = models.PositiveIntegerField(default=1)
    max_travelers = models.PositiveIntegerField(null=True, blank=True)

    categories = models.ManyToManyField(Category, blank=True, related_name='products')
    is_best_seller = models.BooleanField(default=False)
    is_time_deal = models.BooleanField(default=False)
    available_from = models.DateField(null=True, blank=True)
    available_until = models.DateField(null=True, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    @property
    def sale_price(self):
        """Adult price after the product-level discount"""
        price = self.price_adult or Decimal('0.00')
        if self.discount_type == 'percentage' and self.discount_value:
            price = price - (price * self.discount_value / Decimal('100'))
        elif self.discount_type == 'fixed' and self.discount_value:
            price = price - self.discount_value
        return max(price, Decimal('0.00')).quantize(Decimal('0.01'))

    @property
    def main_image(self):
        image = self.images.order_by('order', 'id').first()
        return image.url if image else None

    class Meta:
        db_table = 'travel_products'
        ordering = ['-created_at']


class ProductImage(models.Model):
    """Gallery image of a travel product"""
    product = models.ForeignKey(TravelProduct, on_delete=models.CASCADE, related_name='images')
    image = models.ImageField(upload_to='products/', null=True, blank=True)
    image_url = models.URLField(max_length=1000, blank=True)
    alt = models.CharField(max_length=255, blank=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product.title} #{self.order}"

    @property
    def url(self):
        if self.image_url:
            return self.image_url
        if self.image:
            return self.image.url
        return None

    class Meta:
        db_table = 'product_images'
        ordering = ['order', 'id']


class ItineraryDay(models.Model):
    """One day of a travel product itinerary"""
    product = models.ForeignKey(TravelProduct, on_delete=models.CASCADE, related_name='itinerary')
    day = models.PositiveIntegerField()
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    meals = models.JSONField(default=list, blank=True)
    accommodation = models.CharField(max_length=255, blank=True)
    activities = models.JSONField(default=list, blank=True)

    def __str__(self):
        return f"{self.product.title} - Day {self.day}"

    class Meta:
        db_table = 'itinerary_days'
        ordering = ['day']
        unique_together = ['product', 'day']
