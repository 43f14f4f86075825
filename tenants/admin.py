from django.contrib import admin
from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['user', 'room', 'individual_rent', 'join_date', 'leave_date', 'is_active']
    list_filter = ['is_active', 'room__floor__building']
    search_fields = ['user__email', 'user__full_name', 'user__phone']
    raw_id_fields = ['user', 'room']
