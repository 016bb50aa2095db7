import django_filters
from .models import KiranaStore


def parse_flag(value):
    """Query string booleans: only the literal 'true' is true"""
    if isinstance(value, str):
        return value.lower() == 'true'
    return bool(value)


class StoreFilter(django_filters.FilterSet):
    """Filters for the store listing"""
    city = django_filters.CharFilter(field_name='city', lookup_expr='iexact')
    state = django_filters.CharFilter(field_name='state', lookup_expr='iexact')
    store_type = django_filters.CharFilter(field_name='store_type', lookup_expr='exact')
    is_active = django_filters.CharFilter(method='filter_flag', label='Active')
    is_verified = django_filters.CharFilter(method='filter_flag', label='Verified')

    class Meta:
        model = KiranaStore
        fields = ['city', 'state', 'store_type', 'is_active', 'is_verified']

    def filter_flag(self, queryset, name, value):
        if value is None or value == '':
            return queryset
        return queryset.filter(**{name: parse_flag(value)})
