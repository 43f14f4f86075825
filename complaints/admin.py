from django.contrib import admin
from .models import Complaint


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ['title', 'tenant', 'room', 'category', 'priority', 'status', 'assigned_to', 'created_at']
    list_filter = ['status', 'priority', 'category']
    search_fields = ['title', 'description', 'tenant__user__email', 'tenant__user__full_name']
    raw_id_fields = ['tenant', 'room', 'assigned_to']
    readonly_fields = ['resolved_at', 'created_at', 'updated_at']
