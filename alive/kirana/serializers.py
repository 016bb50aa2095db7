from rest_framework import serializers
from .models import KiranaStore


class KiranaStoreSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = KiranaStore
        fields = ['id', 'owner_id', 'name', 'owner_name', 'owner_phone', 'email', 'address', 'city',
                  'state', 'pincode', 'latitude', 'longitude', 'store_type', 'gstin',
                  'is_active', 'is_verified', 'created_at', 'updated_at']
        read_only_fields = ['is_verified', 'created_at', 'updated_at']

    def validate_email(self, value):
        return value or None

    def validate_gstin(self, value):
        return value or None

    def validate_name(self, value):
        return value.strip()


class NearbyStoreSerializer(KiranaStoreSerializer):
    distance = serializers.SerializerMethodField()

    class Meta(KiranaStoreSerializer.Meta):
        fields = KiranaStoreSerializer.Meta.fields + ['distance']

    def get_distance(self, obj):
        return round(obj.distance, 3)


class StoreSummarySerializer(serializers.ModelSerializer):
    """Compact store block embedded in product payloads"""
    class Meta:
        model = KiranaStore
        fields = ['id', 'name', 'address', 'city', 'state', 'pincode', 'latitude', 'longitude', 'store_type', 'owner_phone']
