from django.contrib import admin
from .models import AdScreen


@admin.register(AdScreen)
class AdScreenAdmin(admin.ModelAdmin):
    list_display = ['device_id', 'name', 'store', 'status', 'last_heartbeat_at']
    list_filter = ['status']
    search_fields = ['device_id', 'name', 'store__name']
    readonly_fields = ['api_key_hash', 'last_heartbeat_at', 'created_at', 'updated_at']
