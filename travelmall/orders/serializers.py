from rest_framework import serializers
from .models import Cart, CartItem, Order, OrderItem, Payment, OrderStatusHistory, ORDER_STATUS_CHOICES


class CartItemSerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source='product.title', read_only=True)
    product_image = serializers.SerializerMethodField()
    price_adult = serializers.DecimalField(source='product.price_adult', max_digits=12, decimal_places=2, read_only=True)
    price_child = serializers.DecimalField(source='product.price_child', max_digits=12, decimal_places=2, read_only=True)
    price_infant = serializers.DecimalField(source='product.price_infant', max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'product_title', 'product_image', 'inventory', 'start_date', 'end_date',
                  'adults', 'children', 'infants', 'price_adult', 'price_child', 'price_infant',
                  'subtotal', 'created_at', 'updated_at']

    def get_product_image(self, obj):
        return obj.product.main_image


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'items', 'item_count', 'total_amount', 'updated_at']

    def get_item_count(self, obj):
        return obj.items.count()


class CartItemAddSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    inventory = serializers.IntegerField(required=False, allow_null=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    adults = serializers.IntegerField(default=1)
    children = serializers.IntegerField(default=0)
    infants = serializers.IntegerField(default=0)


class CartItemUpdateSerializer(serializers.Serializer):
    adults = serializers.IntegerField(required=False)
    children = serializers.IntegerField(required=False)
    infants = serializers.IntegerField(required=False)


class CheckoutSerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(required=False, allow_blank=True)
    customer_address = serializers.DictField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default='credit_card')
    coupon_code = serializers.CharField(required=False, allow_blank=True)
    special_requests = serializers.CharField(required=False, allow_blank=True)
    is_business_trip = serializers.BooleanField(default=False)
    tax_invoice_requested = serializers.BooleanField(default=False)
    travelers = serializers.DictField(child=serializers.ListField(child=serializers.DictField()), required=False)

    def validate(self, attrs):
        user = self.context['request'].user
        if not attrs.get('customer_email') and not user.email:
            raise serializers.ValidationError({'customer_email': 'E-mail is required'})
        return attrs


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_title', 'inventory', 'adults', 'children', 'infants',
                  'price_adult', 'price_child', 'price_infant', 'subtotal',
                  'start_date', 'end_date', 'travelers']


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['method', 'status', 'transaction_id', 'paid_amount', 'currency', 'paid_at', 'receipt_url',
                  'refund_amount', 'refund_reason', 'refund_date', 'refund_status']


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    created_by = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = OrderStatusHistory
        fields = ['id', 'status', 'previous_status', 'note', 'refund_amount', 'is_partial', 'created_by', 'created_at']


class OrderListSerializer(serializers.ModelSerializer):
    payment_method = serializers.CharField(source='payment.method', read_only=True, default=None)
    payment_status = serializers.CharField(source='payment.status', read_only=True, default=None)
    item_count = serializers.SerializerMethodField()
    first_product = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'customer_name', 'customer_email', 'status', 'total_amount',
                  'currency', 'coupon_code', 'coupon_discount', 'payment_method', 'payment_status',
                  'item_count', 'first_product', 'created_at', 'updated_at']

    def get_item_count(self, obj):
        return len(obj.items.all())

    def get_first_product(self, obj):
        items = list(obj.items.all())
        return items[0].product_title if items else None


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    payment = PaymentSerializer(read_only=True)
    history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'user', 'customer_name', 'customer_email', 'customer_phone',
                  'customer_address', 'status', 'subtotal', 'total_amount', 'currency',
                  'coupon_code', 'coupon_discount', 'special_requests', 'admin_notes',
                  'is_business_trip', 'tax_invoice_requested', 'cancel_reason',
                  'cancelled_at', 'refunded_at', 'items', 'payment', 'history',
                  'created_at', 'updated_at']
        read_only_fields = fields


class CustomerOrderSerializer(OrderSerializer):
    """Order as seen by the customer (no internal notes)"""
    class Meta(OrderSerializer.Meta):
        fields = [f for f in OrderSerializer.Meta.fields if f != 'admin_notes']
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES)
    note = serializers.CharField(required=False, allow_blank=True, default='')


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class OrderRefundSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    is_partial = serializers.BooleanField(default=False)
