from rest_framework import serializers

from .models import AdScreen


class AdScreenSerializer(serializers.ModelSerializer):
    store_id = serializers.IntegerField(read_only=True)
    reported_status = serializers.CharField(source='status', read_only=True)
    status = serializers.CharField(source='effective_status', read_only=True)

    class Meta:
        model = AdScreen
        fields = ['id', 'store_id', 'device_id', 'name', 'status', 'reported_status',
                  'last_heartbeat_at', 'created_at', 'updated_at']


class AdScreenRegisterSerializer(serializers.Serializer):
    store = serializers.IntegerField(error_messages={'required': 'Store is required', 'invalid': 'Store must be an ID'})
    device_id = serializers.CharField(max_length=100, error_messages={'required': 'Device ID is required'})
    name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')

    def validate_device_id(self, value):
        value = value.strip()
        if AdScreen.objects.filter(device_id=value).exists():
            raise serializers.ValidationError('A screen with this device ID is already registered')
        return value


class HeartbeatSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[AdScreen.STATUS_ONLINE, AdScreen.STATUS_ERROR],
        required=False,
        default=AdScreen.STATUS_ONLINE,
        error_messages={'invalid_choice': 'Status must be "online" or "error"'},
    )
