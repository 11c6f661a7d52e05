from django.contrib import admin
from .models import Cart, CartItem, Order, OrderItem, Payment, OrderStatusHistory


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ['subtotal']


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['user', 'total_amount', 'updated_at']
    search_fields = ['user__username', 'user__email']
    readonly_fields = ['total_amount', 'created_at', 'updated_at']
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'product_title', 'adults', 'children', 'infants', 'subtotal']


class PaymentInline(admin.StackedInline):
    model = Payment
    extra = 0
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ['status', 'previous_status', 'note', 'refund_amount', 'is_partial', 'created_by', 'created_at']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer_name', 'customer_email', 'status', 'total_amount', 'currency', 'created_at']
    list_filter = ['status', 'is_business_trip', 'tax_invoice_requested', 'created_at']
    search_fields = ['order_number', 'customer_name', 'customer_email', 'customer_phone']
    ordering = ['-created_at']
    readonly_fields = ['order_number', 'subtotal', 'total_amount', 'coupon', 'coupon_code', 'coupon_discount',
                       'cancelled_at', 'refunded_at', 'created_at', 'updated_at']
    inlines = [OrderItemInline, PaymentInline, OrderStatusHistoryInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['order', 'method', 'status', 'paid_amount', 'refund_amount', 'paid_at']
    list_filter = ['method', 'status', 'refund_status']
    search_fields = ['order__order_number', 'transaction_id']
