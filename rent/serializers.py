from rest_framework import serializers
from decimal import Decimal

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source='tenant.user.get_full_name', read_only=True)
    due_month = serializers.IntegerField(source='rent_cycle.due_month', read_only=True)
    due_year = serializers.IntegerField(source='rent_cycle.due_year', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'tenant', 'tenant_name', 'rent_cycle', 'due_month', 'due_year',
            'amount', 'payment_mode', 'payment_date', 'is_verified', 'verified_at',
            'verified_by', 'received_by', 'razorpay_order_id', 'razorpay_payment_id',
            'is_advance', 'notes', 'created_at'
        ]
        read_only_fields = fields


# ============================================================
# REQUEST BODIES
# ============================================================

class MarkPaymentSerializer(serializers.Serializer):
    """Admin records cash / bank / manual UPI rent."""
    tenant_id = serializers.IntegerField()
    rent_cycle_id = serializers.IntegerField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    payment_mode = serializers.ChoiceField(choices=Payment.MANUAL_MODES)
    payment_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CreateOrderSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('1.00'))
    rentCycleId = serializers.IntegerField(required=False, allow_null=True)


class VerifyPaymentSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=100)
    razorpay_payment_id = serializers.CharField(max_length=100)
    razorpay_signature = serializers.CharField(max_length=255)
    rentCycleId = serializers.IntegerField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
