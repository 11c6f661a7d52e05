from rest_framework import serializers
from .models import Category, TravelProduct, ProductImage, ItineraryDay


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ['id', 'name', 'parent', 'description', 'image_url', 'order', 'is_active',
                  'product_count', 'created_at', 'updated_at']


class ProductImageSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = ProductImage
        fields = ['id', 'product', 'image_url', 'url', 'alt', 'order', 'created_at']
        read_only_fields = ['product', 'created_at']

    def get_url(self, obj):
        return obj.url


class ItineraryDaySerializer(serializers.ModelSerializer):
    class Meta:
        model = ItineraryDay
        fields = ['id', 'day', 'title', 'description', 'meals', 'accommodation', 'activities']

    def validate_day(self, value):
        if value < 1:
            raise serializers.ValidationError("Day must be 1 or greater")
        return value


class TravelProductListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for product cards"""
    main_image = serializers.SerializerMethodField()
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = TravelProduct
        fields = ['id', 'title', 'short_description', 'region', 'status',
                  'price_adult', 'original_price', 'sale_price', 'currency',
                  'duration_days', 'duration_nights', 'is_best_seller', 'is_time_deal',
                  'main_image', 'tags', 'created_at', 'updated_at']

    def get_main_image(self, obj):
        # Use prefetched images when available
        images = list(obj.images.all())
        if not images:
            return None
        return sorted(images, key=lambda img: (img.order, img.id))[0].url


class TravelProductSerializer(serializers.ModelSerializer):
    images = ProductImageSerializer(many=True, read_only=True)
    itinerary = ItineraryDaySerializer(many=True, required=False)
    categories = serializers.PrimaryKeyRelatedField(many=True, queryset=Category.objects.all(), required=False)
    category_names = serializers.SerializerMethodField()
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = TravelProduct
        fields = ['id', 'title', 'description', 'short_description', 'region', 'status',
                  'price_adult', 'price_child', 'price_infant', 'original_price', 'sale_price',
                  'currency', 'fuel_surcharge', 'discount_type', 'discount_value',
                  'duration_days', 'duration_nights',
                  'includes_transport', 'transport_type', 'includes_accommodation',
                  'accommodation_type', 'accommodation_grade',
                  'included_services', 'excluded_services', 'highlights', 'tags', 'terms',
                  'min_travelers', 'max_travelers',
                  'categories', 'category_names', 'is_best_seller', 'is_time_deal',
                  'available_from', 'available_until',
                  'images', 'itinerary', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_category_names(self, obj):
        return [category.name for category in obj.categories.all()]

    def validate_price_adult(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_accommodation_grade(self, value):
        if value is not None and not 1 <= value <= 5:
            raise serializers.ValidationError("Accommodation grade must be between 1 and 5")
        return value

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', ''))
        discount_value = attrs.get('discount_value', getattr(self.instance, 'discount_value', 0)) or 0
        if discount_type == 'percentage' and discount_value > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100'})
        if discount_value < 0:
            raise serializers.ValidationError({'discount_value': 'Discount cannot be negative'})

        available_from = attrs.get('available_from', getattr(self.instance, 'available_from', None))
        available_until = attrs.get('available_until', getattr(self.instance, 'available_until', None))
        if available_from and available_until and available_from > available_until:
            raise serializers.ValidationError({'available_until': 'End date must be after start date'})

        itinerary = attrs.get('itinerary')
        if itinerary:
            days = [entry['day'] for entry in itinerary]
            if len(days) != len(set(days)):
                raise serializers.ValidationError({'itinerary': 'Itinerary days must be unique'})
        return attrs

    def _save_itinerary(self, product, itinerary):
        product.itinerary.all().delete()
        ItineraryDay.objects.bulk_create([
            ItineraryDay(product=product, **entry) for entry in itinerary
        ])

    def create(self, validated_data):
        itinerary = validated_data.pop('itinerary', [])
        categories = validated_data.pop('categories', [])
        product = TravelProduct.objects.create(**validated_data)
        product.categories.set(categories)
        if itinerary:
            self._save_itinerary(product, itinerary)
        return product

    def update(self, instance, validated_data):
        itinerary = validated_data.pop('itinerary', None)
        categories = validated_data.pop('categories', None)
        for key, value in validated_data.items():
            setattr(instance, key, value)
        instance.save()
        if categories is not None:
            instance.categories.set(categories)
        if itinerary is not None:
            self._save_itinerary(instance, itinerary)
        return instance
