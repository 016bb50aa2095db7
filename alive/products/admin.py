from django.contrib import admin
from .models import AdvertisedProduct


@admin.register(AdvertisedProduct)
class AdvertisedProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'category', 'store', 'discounted_price', 'stock_quantity',
                    'commission_type', 'commission_value', 'is_active', 'is_available']
    list_filter = ['is_active', 'is_available', 'commission_type', 'category']
    search_fields = ['name', 'brand', 'category', 'store__name']
    ordering = ['-created_at']
    readonly_fields = ['is_available', 'created_at', 'updated_at']
