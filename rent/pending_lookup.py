"""
Pending rent cycle lookup.

Two strategies return the same thing: a tenant's pending/overdue cycles,
oldest due date first, each with the amount still owed. The aggregate query
is preferred; the direct strategy recomputes per cycle and is used when the
aggregate query fails.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db import DatabaseError, transaction

from .models import RentCycle
from .utils import to_money


logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class CycleWithPending:
    cycle_id: int
    due_month: int
    due_year: int
    due_date: date
    total_due: Decimal
    pending_amount: Decimal

    def __post_init__(self):
        if self.total_due < 0:
            raise ValueError(f"Rent cycle {self.cycle_id} has a negative total due: {self.total_due}")
        # Overpaid cycles report zero, never a credit
        object.__setattr__(self, 'pending_amount', max(ZERO, to_money(self.pending_amount)))
        object.__setattr__(self, 'total_due', to_money(self.total_due))

    def as_dict(self):
        return {
            'id': self.cycle_id,
            'due_month': self.due_month,
            'due_year': self.due_year,
            'due_date': self.due_date.isoformat(),
            'total_due': str(self.total_due),
            'pending_amount': str(self.pending_amount),
        }


class PendingCycleLookup:
    """Interface: list_pending(tenant_id) -> list[CycleWithPending]."""

    def list_pending(self, tenant_id):
        raise NotImplementedError


class AggregatePendingLookup(PendingCycleLookup):
    """One query: outstanding cycles annotated with their verified payment total."""

    def list_pending(self, tenant_id):
        cycles = (
            RentCycle.objects
            .filter(tenant_id=tenant_id)
            .outstanding()
            .with_paid_total()
            .oldest_first()
        )

        result = []
        for cycle in cycles:
            pending = cycle.total_due - to_money(cycle.paid_total)
            if pending > 0:
                result.append(CycleWithPending(
                    cycle_id=cycle.id,
                    due_month=cycle.due_month,
                    due_year=cycle.due_year,
                    due_date=cycle.due_date,
                    total_due=cycle.total_due,
                    pending_amount=pending,
                ))
        return result


class DirectPendingLookup(PendingCycleLookup):
    """Fetch cycles, then compute each one's pending amount separately."""

    def list_pending(self, tenant_id):
        result = []
        for cycle in RentCycle.objects.filter(tenant_id=tenant_id).outstanding().oldest_first():
            pending = cycle.pending_amount()
            if pending > 0:
                result.append(CycleWithPending(
                    cycle_id=cycle.id,
                    due_month=cycle.due_month,
                    due_year=cycle.due_year,
                    due_date=cycle.due_date,
                    total_due=cycle.total_due,
                    pending_amount=pending,
                ))
        return result


class ResilientPendingLookup(PendingCycleLookup):
    """
    Try the primary strategy; on a database error log it and use the fallback.

    The primary runs inside a savepoint so a failed query does not poison an
    enclosing transaction.
    """

    def __init__(self, primary=None, fallback=None):
        self.primary = primary or AggregatePendingLookup()
        self.fallback = fallback or DirectPendingLookup()

    def list_pending(self, tenant_id):
        try:
            with transaction.atomic():
                return self.primary.list_pending(tenant_id)
        except DatabaseError as e:
            logger.warning(
                f"[PendingLookup] Aggregate lookup failed for tenant {tenant_id}, "
                f"using direct lookup: {str(e)}"
            )
            return self.fallback.list_pending(tenant_id)


def default_lookup():
    return ResilientPendingLookup()
