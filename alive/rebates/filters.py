import django_filters
from .models import RebateClaim


class RebateClaimFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id', lookup_expr='exact')
    status = django_filters.ChoiceFilter(field_name='status', choices=RebateClaim.STATUS_CHOICES)
    month = django_filters.CharFilter(field_name='month', lookup_expr='exact')

    class Meta:
        model = RebateClaim
        fields = ['store', 'status', 'month']
