from django.contrib import admin
from .models import KiranaStore


@admin.register(KiranaStore)
class KiranaStoreAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner_name', 'owner_phone', 'city', 'store_type', 'is_active', 'is_verified', 'created_at']
    list_filter = ['is_active', 'is_verified', 'store_type', 'state']
    search_fields = ['name', 'owner_name', 'owner_phone', 'city', 'pincode']
    ordering = ['-created_at']
    raw_id_fields = ['owner']
