from django.contrib import admin
from .models import RebateClaim


@admin.register(RebateClaim)
class RebateClaimAdmin(admin.ModelAdmin):
    list_display = ['store', 'month', 'amount', 'rebate_amount', 'status', 'reviewed_by', 'created_at']
    list_filter = ['status', 'month']
    search_fields = ['store__name', 'provider_name', 'month']
    ordering = ['-month', '-created_at']
    readonly_fields = ['rebate_amount', 'reviewed_at', 'created_at', 'updated_at']
