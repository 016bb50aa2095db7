from rest_framework import serializers

from alive.kirana.serializers import StoreSummarySerializer
from .models import AdvertisedProduct


class AdvertisedProductSerializer(serializers.ModelSerializer):
    store_id = serializers.IntegerField(read_only=True)
    calculated_commission = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = AdvertisedProduct
        fields = ['id', 'store_id', 'name', 'brand', 'category', 'description', 'image_url',
                  'mrp', 'discounted_price', 'discount_percent', 'stock_quantity',
                  'min_order_qty', 'max_order_qty', 'commission_type', 'commission_value',
                  'calculated_commission', 'is_active', 'is_available', 'created_at', 'updated_at']
        read_only_fields = ['is_active', 'is_available', 'created_at', 'updated_at']

    def validate_description(self, value):
        return value or None


class NearbyProductSerializer(AdvertisedProductSerializer):
    distance = serializers.SerializerMethodField()
    store = StoreSummarySerializer(read_only=True)

    class Meta(AdvertisedProductSerializer.Meta):
        fields = AdvertisedProductSerializer.Meta.fields + ['store', 'distance']

    def get_distance(self, obj):
        return round(obj.distance, 3)


class ProductDetailSerializer(AdvertisedProductSerializer):
    store = StoreSummarySerializer(read_only=True)

    class Meta(AdvertisedProductSerializer.Meta):
        fields = AdvertisedProductSerializer.Meta.fields + ['store']
