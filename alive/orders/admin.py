from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'unit_price', 'quantity', 'line_total', 'commission_amount']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'store', 'customer_name', 'status', 'total', 'commission_amount', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'customer_name', 'customer_phone', 'store__name']
    ordering = ['-created_at']
    readonly_fields = ['order_number', 'pickup_otp', 'subtotal', 'total', 'commission_amount',
                       'created_at', 'updated_at', 'completed_at', 'cancelled_at']
    inlines = [OrderItemInline]
