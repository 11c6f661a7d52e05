from rest_framework import serializers
from .models import Inventory


class InventorySerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source='product.title', read_only=True)
    is_sold_out = serializers.BooleanField(read_only=True)

    class Meta:
        model = Inventory
        fields = ['id', 'product', 'product_title', 'date', 'option', 'total_stock',
                  'available_stock', 'reserved_stock', 'is_sold_out', 'created_at', 'updated_at']
        read_only_fields = ['reserved_stock', 'created_at', 'updated_at']

    def validate(self, attrs):
        total = attrs.get('total_stock', getattr(self.instance, 'total_stock', 0))
        reserved = getattr(self.instance, 'reserved_stock', 0)
        if 'available_stock' not in attrs and self.instance is None:
            # New slot starts fully available
            attrs['available_stock'] = total
        available = attrs.get('available_stock', getattr(self.instance, 'available_stock', 0))
        if available + reserved > total:
            raise serializers.ValidationError({'available_stock': 'Available plus reserved stock cannot exceed total stock'})
        return attrs


class StockChangeSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
