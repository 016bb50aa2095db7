import django_filters
from django.db.models import Case, F, FloatField, Value, When
from django.db.models.functions import Cast

from alive.kirana.filters import parse_flag
from .models import AdvertisedProduct


def annotate_margin(queryset):
    """
    Commission margin as a percentage of the selling price.

    Percentage commissions are the margin itself; fixed commissions are
    converted using the discounted price.
    """
    return queryset.annotate(
        margin=Case(
            When(commission_type=AdvertisedProduct.COMMISSION_PERCENTAGE,
                 then=Cast('commission_value', FloatField())),
            default=Cast('commission_value', FloatField()) * Value(100.0) / Cast('discounted_price', FloatField()),
            output_field=FloatField(),
        )
    )


class ProductFilter(django_filters.FilterSet):
    """Filters for the advertised product listing"""
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='icontains')
    kirana_store_id = django_filters.NumberFilter(field_name='store_id', lookup_expr='exact')
    min_margin = django_filters.NumberFilter(method='filter_min_margin', label='Minimum margin %')
    max_margin = django_filters.NumberFilter(method='filter_max_margin', label='Maximum margin %')
    in_stock = django_filters.CharFilter(method='filter_in_stock', label='In Stock')
    is_active = django_filters.CharFilter(method='filter_active', label='Active')

    class Meta:
        model = AdvertisedProduct
        fields = ['category', 'brand', 'kirana_store_id', 'min_margin', 'max_margin', 'in_stock', 'is_active']

    def _with_margin(self, queryset):
        if 'margin' in queryset.query.annotations:
            return queryset
        return annotate_margin(queryset)

    def filter_min_margin(self, queryset, name, value):
        if value is None:
            return queryset
        return self._with_margin(queryset).filter(margin__gte=float(value))

    def filter_max_margin(self, queryset, name, value):
        if value is None:
            return queryset
        return self._with_margin(queryset).filter(margin__lte=float(value))

    def filter_in_stock(self, queryset, name, value):
        """Only 'true' narrows the list; any other value leaves it as is"""
        if value and parse_flag(value):
            return queryset.filter(stock_quantity__gt=0)
        return queryset

    def filter_active(self, queryset, name, value):
        """Filter by active status (handles string 'true'/'false')"""
        if value is None or value == '':
            return queryset
        return queryset.filter(is_active=parse_flag(value))


class NearbyProductFilter(django_filters.FilterSet):
    """Extra narrowing for the nearby product search"""
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='icontains')
    in_stock = django_filters.CharFilter(method='filter_in_stock', label='In Stock')

    class Meta:
        model = AdvertisedProduct
        fields = ['category', 'brand', 'in_stock']

    filter_in_stock = ProductFilter.filter_in_stock
