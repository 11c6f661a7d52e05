from django.db import models
from travelmall.catalog.models import TravelProduct


class Inventory(models.Model):
    """Bookable seats/rooms of a travel product on a departure date"""
    product = models.ForeignKey(TravelProduct, on_delete=models.CASCADE, related_name='inventory')
    date = models.DateField()
    option = models.CharField(max_length=100, blank=True, default='')  # e.g. room type
    total_stock = models.PositiveIntegerField(default=0)
    available_stock = models.PositiveIntegerField(default=0)
    reserved_stock = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        label = f"{self.product.title} {self.date}"
        if self.option:
            label = f"{label} ({self.option})"
        return label

    @property
    def is_sold_out(self):
        return self.available_stock <= 0

    class Meta:
        db_table = 'inventory'
        verbose_name_plural = 'inventory'
        ordering = ['date', 'option']
        unique_together = [['product', 'date', 'option']]
        indexes = [
            models.Index(fields=['product', 'date'], name='idx_inventory_product_date'),
        ]
