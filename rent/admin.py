from django.contrib import admin
from .models import AuditLog, Payment, RentCycle


@admin.register(RentCycle)
class RentCycleAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'due_month', 'due_year', 'due_date', 'amount_due', 'late_fee_amount', 'status']
    list_filter = ['status', 'due_year', 'due_month', 'late_fee_applicable']
    search_fields = ['tenant__user__email', 'tenant__user__full_name']
    raw_id_fields = ['tenant', 'room']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'rent_cycle', 'amount', 'payment_mode', 'payment_date', 'is_verified', 'is_advance']
    list_filter = ['payment_mode', 'is_verified', 'is_advance']
    search_fields = ['tenant__user__email', 'razorpay_order_id', 'razorpay_payment_id']
    raw_id_fields = ['tenant', 'rent_cycle', 'verified_by', 'received_by']

    # Ledger rows are append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['action_type', 'user', 'tenant', 'created_at']
    list_filter = ['action_type']
    search_fields = ['description']
    readonly_fields = ['action_type', 'user', 'tenant', 'description', 'metadata', 'ip_address', 'created_at']
