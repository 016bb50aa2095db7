from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product_id', 'product_name', 'unit_price', 'quantity', 'line_total', 'commission_amount']


class OrderSerializer(serializers.ModelSerializer):
    """
    Order with its items.

    The pickup OTP is only rendered when the serializer context has
    ``show_otp`` set (the customer's own view of the order).
    """
    store_id = serializers.IntegerField(read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)
    customer_id = serializers.IntegerField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'store_id', 'store_name', 'customer_id', 'customer_name',
                  'customer_phone', 'status', 'items', 'subtotal', 'total', 'commission_amount',
                  'pickup_otp', 'notes', 'created_at', 'updated_at', 'completed_at', 'cancelled_at']
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        show_otp = self.context.get('show_otp')
        if callable(show_otp):
            show_otp = show_otp(instance)
        if not show_otp:
            data.pop('pickup_otp', None)
        return data


class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField(error_messages={'required': 'Product is required', 'invalid': 'Product must be an ID'})
    quantity = serializers.IntegerField(min_value=1, error_messages={
        'required': 'Quantity is required',
        'invalid': 'Quantity must be a whole number',
        'min_value': 'Quantity must be at least 1',
    })


class OrderCreateSerializer(serializers.Serializer):
    store = serializers.IntegerField(error_messages={'required': 'Store is required', 'invalid': 'Store must be an ID'})
    items = OrderItemInputSerializer(many=True, allow_empty=False, error_messages={
        'required': 'Order must contain at least one item',
        'empty': 'Order must contain at least one item',
    })
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, items):
        product_ids = [item['product'] for item in items]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError('Each product may only appear once per order')
        return items


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[Order.STATUS_PACKED, Order.STATUS_READY, Order.STATUS_CANCELLED],
        error_messages={
            'required': 'Status is required',
            'invalid_choice': 'Invalid status. Must be one of: packed, ready, cancelled',
        },
    )


class PickupVerifySerializer(serializers.Serializer):
    otp = serializers.CharField(error_messages={'required': 'OTP is required', 'blank': 'OTP is required'})
