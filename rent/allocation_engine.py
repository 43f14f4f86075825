from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from tenants.models import Tenant
from .exceptions import AllocationError
from .models import Payment, RentCycle
from .pending_lookup import default_lookup
from .utils import format_inr, next_month, to_money


logger = logging.getLogger(__name__)


# ==================================================
#  REQUEST / RESULT
# ==================================================

@dataclass(frozen=True)
class GatewayReference:
    order_id: str
    payment_id: str
    signature: Optional[str] = None


@dataclass
class AllocationRequest:
    """
    One payment to apply to a tenant's rent.

    target_cycle_id set: the whole amount goes to that cycle.
    target_cycle_id empty: oldest pending cycle first, remainder as advance.
    """
    SOURCE_MANUAL = 'manual'
    SOURCE_CHECKOUT = 'checkout'
    SOURCE_WEBHOOK = 'webhook'

    tenant_id: int
    amount: Decimal
    payment_mode: str
    target_cycle_id: Optional[int] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    actor: Optional[object] = None
    gateway: Optional[GatewayReference] = None
    source: str = SOURCE_MANUAL

    @property
    def is_gateway(self):
        return self.gateway is not None


@dataclass
class AllocationResult:
    allocations: List[tuple] = field(default_factory=list)
    advance_created: bool = False
    advance_cycle_id: Optional[int] = None
    already_recorded: bool = False

    @property
    def payments_created(self):
        return len(self.allocations)

    @property
    def total_applied(self):
        return sum((amount for _, amount in self.allocations), Decimal('0.00'))


# ==================================================
#  ENGINE
# ==================================================

class AllocationEngine:
    """
    Distributes one payment across a tenant's rent cycles and writes the
    ledger rows.

    Every call is a single transaction holding a row lock on the tenant, so
    two payments for the same tenant never walk the same pending amounts.
    Any failed write rolls the whole call back.
    """

    def __init__(self, lookup=None, today=None):
        self.lookup = lookup or default_lookup()
        self._today = today

    @property
    def today(self):
        return self._today or timezone.localdate()

    def allocate(self, request):
        amount = to_money(request.amount)
        if amount <= 0:
            raise AllocationError("Amount must be greater than zero")

        if request.is_gateway and self._already_recorded(request.gateway.payment_id):
            logger.info(f"[AllocationEngine] Gateway payment {request.gateway.payment_id} already recorded")
            return AllocationResult(already_recorded=True)

        try:
            with transaction.atomic():
                tenant = self._lock_tenant(request.tenant_id)

                # Re-check under the lock: a concurrent call may have just written it
                if request.is_gateway and self._already_recorded(request.gateway.payment_id):
                    return AllocationResult(already_recorded=True)

                if request.target_cycle_id:
                    result = self._allocate_targeted(tenant, request, amount)
                else:
                    result = self._allocate_oldest_first(tenant, request, amount)

        except IntegrityError:
            # Only a row committed by another call makes this a replay
            if not (request.is_gateway and self._already_recorded(request.gateway.payment_id)):
                raise
            logger.warning(
                f"[AllocationEngine] Duplicate gateway payment {request.gateway.payment_id} "
                f"for tenant {request.tenant_id}, treating as already recorded"
            )
            return AllocationResult(already_recorded=True)

        logger.info(
            f"[AllocationEngine] Tenant {request.tenant_id}: applied {result.total_applied} "
            f"in {result.payments_created} payment(s), advance={result.advance_created}"
        )
        return result

    # ---------- helpers ----------

    def _already_recorded(self, payment_id):
        return Payment.objects.filter(razorpay_payment_id=payment_id).exists()

    def _lock_tenant(self, tenant_id):
        try:
            tenant = Tenant.objects.select_for_update().get(pk=tenant_id)
        except Tenant.DoesNotExist:
            raise AllocationError(f"Tenant {tenant_id} not found")
        if not tenant.is_active:
            raise AllocationError(f"Tenant {tenant_id} is not active")
        return tenant

    def _allocate_targeted(self, tenant, request, amount):
        try:
            cycle = RentCycle.objects.get(pk=request.target_cycle_id)
        except RentCycle.DoesNotExist:
            raise AllocationError(f"Rent cycle {request.target_cycle_id} not found")
        if cycle.tenant_id != tenant.id:
            raise AllocationError(f"Rent cycle {cycle.id} does not belong to tenant {tenant.id}")

        self._write_payment(tenant, cycle.id, amount, request, self._targeted_notes(request))
        return AllocationResult(allocations=[(cycle.id, amount)])

    def _allocate_oldest_first(self, tenant, request, amount):
        # Rows are planned first so next month's cycle never gets two rows from one call
        planned = []
        remaining = amount

        for cycle in self.lookup.list_pending(tenant.id):
            if remaining <= 0:
                break
            applied = min(remaining, cycle.pending_amount)
            if applied <= 0:
                continue
            notes = self._multi_cycle_notes(request, applied, cycle.due_month, cycle.due_year)
            planned.append([cycle.cycle_id, applied, notes, False])
            remaining -= applied

        result = AllocationResult()
        if remaining > 0:
            month, year = next_month(self.today)
            advance_cycle, created = RentCycle.objects.get_or_create_for_month(tenant, month, year)
            if created:
                logger.info(f"[AllocationEngine] Created advance cycle {month}/{year} for tenant {tenant.id}")

            notes = self._advance_notes(request, month, year)
            walked = next((row for row in planned if row[0] == advance_cycle.id), None)
            if walked is not None:
                walked[1] += remaining
                walked[2] = notes
                walked[3] = True
            else:
                planned.append([advance_cycle.id, remaining, notes, True])
            result.advance_created = True
            result.advance_cycle_id = advance_cycle.id

        for cycle_id, applied, notes, is_advance in planned:
            self._write_payment(tenant, cycle_id, applied, request, notes, is_advance=is_advance)
            result.allocations.append((cycle_id, applied))

        return result

    def _write_payment(self, tenant, cycle_id, amount, request, notes, is_advance=False):
        now = timezone.now()
        payment = Payment(
            tenant=tenant,
            rent_cycle_id=cycle_id,
            amount=amount,
            payment_mode=request.payment_mode,
            payment_date=request.payment_date or self.today,
            is_verified=True,
            verified_at=now,
            notes=notes,
            is_advance=is_advance,
        )
        if request.is_gateway:
            payment.razorpay_order_id = request.gateway.order_id
            payment.razorpay_payment_id = request.gateway.payment_id
            payment.razorpay_signature = request.gateway.signature
        else:
            payment.received_by = request.actor
            payment.verified_by = request.actor
        payment.save()
        return payment

    # ---------- notes ----------

    def _gateway_label(self, request):
        if request.source == AllocationRequest.SOURCE_WEBHOOK:
            return f"Webhook: Order {request.gateway.order_id}"
        return f"Online payment: Order {request.gateway.order_id}"

    def _targeted_notes(self, request):
        if not request.is_gateway:
            return request.notes
        if request.source == AllocationRequest.SOURCE_WEBHOOK:
            return f"Webhook: Order {request.gateway.order_id}"
        return f"Order: {request.gateway.order_id}"

    def _multi_cycle_notes(self, request, applied, month, year):
        if request.is_gateway:
            return f"{self._gateway_label(request)} - Multi-cycle allocation"
        return request.notes or f"Multi-cycle payment: {format_inr(applied)} for {month}/{year}"

    def _advance_notes(self, request, month, year):
        if request.is_gateway:
            return f"{self._gateway_label(request)} - Advance payment"
        if request.notes:
            return f"{request.notes} (Advance payment)"
        return f"Advance payment for {month}/{year}"
