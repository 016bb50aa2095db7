import django_filters
from .models import Order


class OrderFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id', lookup_expr='exact')
    status = django_filters.ChoiceFilter(field_name='status', choices=Order.STATUS_CHOICES)

    class Meta:
        model = Order
        fields = ['store', 'status']
