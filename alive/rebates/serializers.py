import re
from decimal import Decimal

from rest_framework import serializers

from .models import RebateClaim

MONTH_REGEX = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


class RebateClaimSerializer(serializers.ModelSerializer):
    store_id = serializers.IntegerField(read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)
    submitted_by_id = serializers.IntegerField(read_only=True)
    reviewed_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = RebateClaim
        fields = ['id', 'store_id', 'store_name', 'submitted_by_id', 'month', 'amount', 'rebate_amount',
                  'bill_image_url', 'provider_name', 'billing_period', 'due_date', 'status',
                  'review_note', 'reviewed_by_id', 'reviewed_at', 'created_at', 'updated_at']
        read_only_fields = fields


class RebateClaimCreateSerializer(serializers.ModelSerializer):
    store = serializers.IntegerField(error_messages={'required': 'Store is required', 'invalid': 'Store must be an ID'})
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, error_messages={
        'required': 'Amount is required',
        'invalid': 'Amount must be a positive number',
    })
    provider_name = serializers.CharField(required=False, allow_blank=True, default='')
    billing_period = serializers.CharField(required=False, allow_blank=True, default='')
    due_date = serializers.DateField(required=False, allow_null=True, default=None)

    class Meta:
        model = RebateClaim
        fields = ['store', 'month', 'amount', 'bill_image_url', 'provider_name', 'billing_period', 'due_date']
        # duplicates are reported by the view as a conflict
        validators = []
        extra_kwargs = {
            'month': {'error_messages': {'required': 'Month is required'}},
            'bill_image_url': {'error_messages': {'required': 'Bill image URL is required'}},
        }

    def validate_month(self, value):
        if not MONTH_REGEX.match(value):
            raise serializers.ValidationError('Month must be in YYYY-MM format')
        return value

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be a positive number')
        return value

    def validate_bill_image_url(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError('Bill image URL is required (minimum 5 characters)')
        return value.strip()


class RebateReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[RebateClaim.STATUS_APPROVED, RebateClaim.STATUS_REJECTED],
        error_messages={
            'required': 'Status is required',
            'invalid_choice': 'Invalid status. Must be approved or rejected',
        },
    )
    note = serializers.CharField(required=False, allow_blank=True, default='')
