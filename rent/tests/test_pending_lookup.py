import pytest
from datetime import date
from decimal import Decimal
from django.db import DatabaseError

from rent.allocation_engine import AllocationEngine, AllocationRequest
from rent.models import Payment, RentCycle
from rent.pending_lookup import (
    AggregatePendingLookup,
    CycleWithPending,
    DirectPendingLookup,
    ResilientPendingLookup,
)


class BrokenLookup:
    def __init__(self):
        self.calls = 0

    def list_pending(self, tenant_id):
        self.calls += 1
        raise DatabaseError("aggregate query failed")


def pay(tenant, cycle, amount, verified=True):
    return Payment.objects.create(
        tenant=tenant, rent_cycle=cycle, amount=Decimal(str(amount)),
        payment_mode=Payment.CASH, payment_date=date(2024, 1, 10), is_verified=verified
    )


@pytest.mark.django_db
class TestPendingLookup:

    @pytest.mark.parametrize("lookup_class", [AggregatePendingLookup, DirectPendingLookup])
    def test_pending_amounts_and_order(self, lookup_class, tenant, make_cycle):
        feb = make_cycle(tenant, 2, 2024, 200)
        jan = make_cycle(tenant, 1, 2024, 100, late_fee_amount=Decimal("25.00"))
        mar = make_cycle(tenant, 3, 2024, 300)
        pay(tenant, feb, 50)
        pay(tenant, mar, 300)
        pay(tenant, jan, 100, verified=False)

        cycles = lookup_class().list_pending(tenant.id)

        assert [c.cycle_id for c in cycles] == [jan.id, feb.id]
        assert cycles[0].total_due == Decimal("125.00")
        assert cycles[0].pending_amount == Decimal("125.00")
        assert cycles[1].pending_amount == Decimal("150.00")

    def test_same_due_date_keeps_creation_order(self, tenant, make_cycle):
        first = make_cycle(tenant, 1, 2024, 100, due_date=date(2024, 1, 5))
        second = make_cycle(tenant, 2, 2024, 100, due_date=date(2024, 1, 5))

        cycles = AggregatePendingLookup().list_pending(tenant.id)

        assert [c.cycle_id for c in cycles] == [first.id, second.id]

    def test_falls_back_when_primary_fails(self, tenant, make_cycle):
        cycle = make_cycle(tenant, 1, 2024, 100)
        primary = BrokenLookup()

        cycles = ResilientPendingLookup(primary=primary).list_pending(tenant.id)

        assert primary.calls == 1
        assert [c.cycle_id for c in cycles] == [cycle.id]

    def test_engine_allocates_through_fallback(self, tenant, make_cycle):
        jan = make_cycle(tenant, 1, 2024, 100)
        feb = make_cycle(tenant, 2, 2024, 100)
        engine = AllocationEngine(lookup=ResilientPendingLookup(primary=BrokenLookup()), today=date(2024, 3, 1))

        result = engine.allocate(AllocationRequest(
            tenant_id=tenant.id, amount=Decimal("150"), payment_mode=Payment.UPI_MANUAL
        ))

        assert result.allocations == [(jan.id, Decimal("100.00")), (feb.id, Decimal("50.00"))]

    def test_other_tenants_cycles_not_listed(self, tenant, other_tenant, make_cycle):
        make_cycle(other_tenant, 1, 2024, 100)

        assert AggregatePendingLookup().list_pending(tenant.id) == []


class TestCycleWithPending:

    def test_overpaid_cycle_clamps_to_zero(self):
        cycle = CycleWithPending(1, 1, 2024, date(2024, 1, 5), Decimal("100"), Decimal("-20"))
        assert cycle.pending_amount == Decimal("0.00")

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            CycleWithPending(1, 1, 2024, date(2024, 1, 5), Decimal("-1"), Decimal("0"))

    def test_as_dict(self):
        cycle = CycleWithPending(7, 2, 2024, date(2024, 2, 5), Decimal("500"), Decimal("250.5"))
        assert cycle.as_dict() == {
            "id": 7,
            "due_month": 2,
            "due_year": 2024,
            "due_date": "2024-02-05",
            "total_due": "500.00",
            "pending_amount": "250.50",
        }


@pytest.mark.django_db
class TestRentCycleModel:

    def test_get_or_create_for_month_is_idempotent(self, tenant):
        first, created = RentCycle.objects.get_or_create_for_month(tenant, 5, 2024)
        again, created_again = RentCycle.objects.get_or_create_for_month(tenant, 5, 2024)

        assert created is True
        assert created_again is False
        assert first.id == again.id
        assert first.amount_due == Decimal("500.00")

    def test_verified_payment_closes_cycle(self, tenant, make_cycle):
        cycle = make_cycle(tenant, 1, 2024, 100, status=RentCycle.OVERDUE)

        pay(tenant, cycle, 60)
        cycle.refresh_from_db()
        assert cycle.status == RentCycle.OVERDUE

        pay(tenant, cycle, 40)
        cycle.refresh_from_db()
        assert cycle.status == RentCycle.PAID

    def test_waived_cycle_status_untouched(self, tenant, make_cycle):
        cycle = make_cycle(tenant, 1, 2024, 100, status=RentCycle.WAIVED)
        pay(tenant, cycle, 100)
        cycle.refresh_from_db()
        assert cycle.status == RentCycle.WAIVED

    def test_payment_is_append_only(self, tenant, make_cycle):
        payment = pay(tenant, make_cycle(tenant, 1, 2024, 100), 100)

        payment.amount = Decimal("1.00")
        with pytest.raises(ValueError):
            payment.save()
        with pytest.raises(ValueError):
            payment.delete()
        assert Payment.objects.get(id=payment.id).amount == Decimal("100.00")
