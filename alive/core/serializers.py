from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'phone', 'name', 'role', 'is_verified', 'created_at']
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Shape returned alongside a freshly issued token"""
    class Meta:
        model = User
        fields = ['id', 'phone', 'name', 'role']
        read_only_fields = fields
