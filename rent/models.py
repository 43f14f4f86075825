from django.db import models
from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.core.validators import MinValueValidator, MaxValueValidator
from django.conf import settings
from decimal import Decimal

from rooms.models import Room
from tenants.models import Tenant
from .utils import late_fee_enabled, late_fee_start_date, rent_due_date, to_money


# ========================================
# RENT CYCLE MODEL
# ========================================

class RentCycleQuerySet(models.QuerySet):

    def outstanding(self):
        """Cycles that can still receive money: pending or overdue."""
        return self.filter(status__in=[RentCycle.PENDING, RentCycle.OVERDUE])

    def oldest_first(self):
        # created_at / id keep cycles sharing a due date in a stable order
        return self.order_by('due_date', 'created_at', 'id')

    def with_paid_total(self):
        """Annotate `paid_total`: the sum of verified payments, 0 when none."""
        return self.annotate(
            paid_total=Coalesce(
                Sum('payments__amount', filter=Q(payments__is_verified=True)),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            )
        )

    def mark_overdue(self, today):
        """Flip pending cycles whose due date has passed. Returns rows updated."""
        return self.filter(status=RentCycle.PENDING, due_date__lt=today).update(status=RentCycle.OVERDUE)

    def apply_late_fees(self, today, amount):
        """Charge `amount` on outstanding cycles whose late fee window has opened."""
        if amount is None or amount <= 0:
            return 0
        return self.outstanding().filter(
            late_fee_applicable=True,
            late_fee_start_date__lte=today,
            late_fee_amount__isnull=True,
        ).update(late_fee_amount=amount)


class RentCycleManager(models.Manager.from_queryset(RentCycleQuerySet)):

    def get_or_create_for_month(self, tenant, month, year):
        """
        Create-or-fetch the tenant's cycle for (month, year).
        New cycles take the tenant's current room and individual rent.
        """
        due_date = rent_due_date(year, month)
        return self.get_or_create(
            tenant=tenant,
            due_month=month,
            due_year=year,
            defaults={
                'room': tenant.room,
                'amount_due': tenant.individual_rent,
                'due_date': due_date,
                'late_fee_applicable': late_fee_enabled(),
                'late_fee_start_date': late_fee_start_date(due_date),
            }
        )


class RentCycle(models.Model):
    """
    One tenant's rent obligation for one calendar month.

    Business Rules:
    - At most one cycle per (tenant, due_month, due_year)
    - total_due = amount_due + late fee
    - pending = total_due - verified payments, never below zero
    - Moves to PAID once nothing is pending (see rent.signals)
    """

    PENDING = 'pending'
    PAID = 'paid'
    OVERDUE = 'overdue'
    WAIVED = 'waived'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PAID, 'Paid'),
        (OVERDUE, 'Overdue'),
        (WAIVED, 'Waived'),
    ]

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='rent_cycles')
    room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rent_cycles'
    )

    due_month = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    due_year = models.PositiveIntegerField()
    due_date = models.DateField()

    amount_due = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Base rent for the month"
    )
    late_fee_applicable = models.BooleanField(default=False)
    late_fee_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )
    late_fee_start_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RentCycleManager()

    class Meta:
        db_table = 'rent_cycles'
        ordering = ['-due_year', '-due_month']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'due_month', 'due_year'],
                name='uniq_rent_cycle_per_tenant_month'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'status', 'due_date'], name='rent_cycle_tenant_status_idx'),
            models.Index(fields=['due_year', 'due_month'], name='rent_cycle_period_idx'),
        ]

    def __str__(self):
        return f"Rent {self.due_month}/{self.due_year} for Tenant {self.tenant_id} ({self.status})"

    @property
    def total_due(self):
        return to_money(self.amount_due + (self.late_fee_amount or Decimal('0')))

    def verified_paid(self):
        total = self.payments.filter(is_verified=True).aggregate(total=Sum('amount'))['total']
        return to_money(total or 0)

    def pending_amount(self):
        return max(Decimal('0.00'), self.total_due - self.verified_paid())

    def refresh_status(self):
        """Mark the cycle paid when nothing is pending. Waived cycles are left alone."""
        if self.status in (self.PENDING, self.OVERDUE) and self.pending_amount() == 0:
            self.status = self.PAID
            self.save(update_fields=['status', 'updated_at'])
        return self.status


# ========================================
# PAYMENT MODEL
# ========================================

class Payment(models.Model):
    """
    Append-only ledger of money received against one rent cycle.

    A single payment from a tenant that spans several cycles is stored as
    several rows. Gateway rows carry the Razorpay identifiers; one gateway
    payment id appears at most once per cycle.
    """

    ONLINE_GATEWAY = 'ONLINE_GATEWAY'
    CASH = 'CASH'
    BANK_TRANSFER = 'BANK_TRANSFER'
    UPI_MANUAL = 'UPI_MANUAL'

    PAYMENT_MODE_CHOICES = [
        (ONLINE_GATEWAY, 'Online Gateway'),
        (CASH, 'Cash'),
        (BANK_TRANSFER, 'Bank Transfer'),
        (UPI_MANUAL, 'UPI (Manual)'),
    ]
    MANUAL_MODES = [CASH, BANK_TRANSFER, UPI_MANUAL]

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='payments')
    rent_cycle = models.ForeignKey(RentCycle, on_delete=models.PROTECT, related_name='payments')

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_mode = models.CharField(max_length=20, choices=PAYMENT_MODE_CHOICES)
    payment_date = models.DateField()

    is_verified = models.BooleanField(default=False)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_payments'
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='received_payments'
    )

    razorpay_order_id = models.CharField(max_length=100, null=True, blank=True)
    razorpay_payment_id = models.CharField(max_length=100, null=True, blank=True)
    razorpay_signature = models.CharField(max_length=255, null=True, blank=True)

    is_advance = models.BooleanField(
        default=False,
        help_text="Overpayment carried to a future month's cycle"
    )
    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-payment_date', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['razorpay_payment_id', 'rent_cycle'],
                condition=Q(razorpay_payment_id__isnull=False),
                name='uniq_gateway_payment_per_cycle'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', '-payment_date'], name='payment_tenant_date_idx'),
            models.Index(fields=['razorpay_payment_id'], name='payment_gateway_id_idx'),
            models.Index(fields=['payment_mode'], name='payment_mode_idx'),
        ]

    def __str__(self):
        return f"Payment {self.amount} ({self.payment_mode}) for Rent Cycle {self.rent_cycle_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payments are append-only; record an offsetting entry instead.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Payments are append-only and cannot be deleted.")


# ========================================
# AUDIT LOG MODEL
# ========================================

class AuditLog(models.Model):
    """
    Tracks payment related actions for reconciliation and debugging.
    """

    PAYMENT_RECORDED = 'PAYMENT_RECORDED'
    GATEWAY_ORDER_CREATED = 'GATEWAY_ORDER_CREATED'
    GATEWAY_PAYMENT_VERIFIED = 'GATEWAY_PAYMENT_VERIFIED'
    GATEWAY_SIGNATURE_REJECTED = 'GATEWAY_SIGNATURE_REJECTED'
    WEBHOOK_PROCESSED = 'WEBHOOK_PROCESSED'

    ACTION_TYPE_CHOICES = [
        (PAYMENT_RECORDED, 'Payment Recorded'),
        (GATEWAY_ORDER_CREATED, 'Gateway Order Created'),
        (GATEWAY_PAYMENT_VERIFIED, 'Gateway Payment Verified'),
        (GATEWAY_SIGNATURE_REJECTED, 'Gateway Signature Rejected'),
        (WEBHOOK_PROCESSED, 'Webhook Processed'),
    ]

    action_type = models.CharField(max_length=50, choices=ACTION_TYPE_CHOICES)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )

    description = models.TextField()
    metadata = models.JSONField(
        null=True,
        blank=True,
        help_text="Additional data related to the action"
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', '-created_at'], name='audit_tenant_created_idx'),
            models.Index(fields=['action_type'], name='audit_action_type_idx'),
        ]

    def __str__(self):
        return f"{self.action_type} by {self.user} at {self.created_at}"
