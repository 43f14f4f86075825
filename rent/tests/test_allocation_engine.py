import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from django.db import DatabaseError, IntegrityError

from rent.allocation_engine import AllocationEngine, AllocationRequest, GatewayReference
from rent.exceptions import AllocationError
from rent.models import Payment, RentCycle

TODAY = date(2024, 3, 10)


def manual_request(tenant, amount, **kwargs):
    kwargs.setdefault("payment_mode", Payment.CASH)
    return AllocationRequest(tenant_id=tenant.id, amount=Decimal(str(amount)), **kwargs)


def gateway_request(tenant, amount, payment_id="pay_001", **kwargs):
    return AllocationRequest(
        tenant_id=tenant.id,
        amount=Decimal(str(amount)),
        payment_mode=Payment.ONLINE_GATEWAY,
        gateway=GatewayReference("order_001", payment_id, "sig"),
        source=kwargs.pop("source", AllocationRequest.SOURCE_CHECKOUT),
        **kwargs
    )


class FailingEngine(AllocationEngine):
    """Raises on the n-th ledger write."""

    def __init__(self, fail_on, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on
        self.calls = 0

    def _write_payment(self, *args, **kwargs):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("ledger write failed")
        return super()._write_payment(*args, **kwargs)


@pytest.mark.django_db
class TestAutoAllocation:

    def test_oldest_first_partial(self, tenant, make_cycle):
        jan = make_cycle(tenant, 1, 2024, 100)
        feb = make_cycle(tenant, 2, 2024, 200)
        mar = make_cycle(tenant, 3, 2024, 50)

        result = AllocationEngine(today=TODAY).allocate(manual_request(tenant, 250))

        assert result.allocations == [(jan.id, Decimal("100.00")), (feb.id, Decimal("150.00"))]
        assert result.advance_created is False
        assert not Payment.objects.filter(rent_cycle=mar).exists()

        jan.refresh_from_db()
        feb.refresh_from_db()
        assert jan.status == RentCycle.PAID
        assert feb.status == RentCycle.PENDING
        assert feb.pending_amount() == Decimal("50.00")

    def test_amount_is_conserved(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 333.33)
        make_cycle(tenant, 2, 2024, 333.33)

        result = AllocationEngine(today=TODAY).allocate(manual_request(tenant, "1000.01"))

        written = sum(p.amount for p in Payment.objects.filter(tenant=tenant))
        assert written == Decimal("1000.01")
        assert result.total_applied == Decimal("1000.01")

    def test_overpayment_rolls_forward(self, tenant, make_cycle):
        current = make_cycle(tenant, 3, 2024, 500)

        result = AllocationEngine(today=TODAY).allocate(manual_request(tenant, 800))

        assert result.advance_created is True
        assert result.allocations[0] == (current.id, Decimal("500.00"))

        advance_cycle = RentCycle.objects.get(id=result.advance_cycle_id)
        assert (advance_cycle.due_month, advance_cycle.due_year) == (4, 2024)
        advance = Payment.objects.get(rent_cycle=advance_cycle)
        assert advance.amount == Decimal("300.00")
        assert advance.is_advance is True
        assert advance.notes == "Advance payment for 4/2024"

    def test_no_pending_cycles_becomes_advance(self, tenant):
        result = AllocationEngine(today=date(2024, 12, 20)).allocate(manual_request(tenant, 1000))

        assert result.advance_created is True
        assert result.payments_created == 1
        cycle = RentCycle.objects.get(id=result.advance_cycle_id)
        assert (cycle.due_month, cycle.due_year) == (1, 2025)
        assert cycle.amount_due == tenant.individual_rent
        assert Payment.objects.get(rent_cycle=cycle).amount == Decimal("1000.00")

    def test_advance_reuses_existing_next_month_cycle(self, tenant, make_cycle):
        april = make_cycle(tenant, 4, 2024, 500, status=RentCycle.PAID)

        result = AllocationEngine(today=TODAY).allocate(manual_request(tenant, 200))

        assert result.advance_cycle_id == april.id
        assert result.allocations == [(april.id, Decimal("200.00"))]
        assert RentCycle.objects.filter(tenant=tenant).count() == 1

    @pytest.mark.parametrize("make_request", [
        lambda tenant: manual_request(tenant, 1500),
        lambda tenant: gateway_request(tenant, 1500, payment_id="pay_ahead"),
    ], ids=["manual", "gateway"])
    def test_remainder_joins_pending_next_month_cycle(self, tenant, make_cycle, make_request):
        march = make_cycle(tenant, 3, 2024, 500)
        april = make_cycle(tenant, 4, 2024, 500)

        result = AllocationEngine(today=TODAY).allocate(make_request(tenant))

        assert result.already_recorded is False
        assert result.advance_cycle_id == april.id
        assert result.allocations == [(march.id, Decimal("500.00")), (april.id, Decimal("1000.00"))]
        written = sum(p.amount for p in Payment.objects.filter(tenant=tenant))
        assert written == Decimal("1500.00")
        assert Payment.objects.get(rent_cycle=april).is_advance is True

    def test_paid_and_waived_cycles_are_skipped(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 100, status=RentCycle.PAID)
        make_cycle(tenant, 2, 2024, 100, status=RentCycle.WAIVED)
        overdue = make_cycle(tenant, 3, 2024, 100, status=RentCycle.OVERDUE)

        result = AllocationEngine(today=TODAY).allocate(manual_request(tenant, 100))

        assert result.allocations == [(overdue.id, Decimal("100.00"))]

    def test_manual_notes(self, tenant, make_cycle, admin_user):
        make_cycle(tenant, 1, 2024, 1500)

        AllocationEngine(today=TODAY).allocate(manual_request(tenant, 1500, actor=admin_user))

        payment = Payment.objects.get(tenant=tenant)
        assert payment.notes == "Multi-cycle payment: ₹1,500 for 1/2024"
        assert payment.received_by == admin_user
        assert payment.verified_by == admin_user
        assert payment.is_verified is True

    def test_given_notes_are_kept(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 100)

        AllocationEngine(today=TODAY).allocate(manual_request(tenant, 150, notes="Paid at desk"))

        notes = sorted(Payment.objects.filter(tenant=tenant).values_list("notes", flat=True))
        assert notes == ["Paid at desk", "Paid at desk (Advance payment)"]

    def test_non_positive_amount_rejected(self, tenant):
        with pytest.raises(AllocationError):
            AllocationEngine(today=TODAY).allocate(manual_request(tenant, 0))
        assert Payment.objects.count() == 0

    def test_inactive_tenant_rejected(self, tenant):
        tenant.is_active = False
        tenant.save()

        with pytest.raises(AllocationError):
            AllocationEngine(today=TODAY).allocate(manual_request(tenant, 100))


@pytest.mark.django_db
class TestTargetedAllocation:

    @pytest.mark.parametrize("amount, expected_status", [
        (300, RentCycle.PENDING),
        (500, RentCycle.PAID),
        (700, RentCycle.PAID),
    ])
    def test_single_row_no_spillover(self, tenant, make_cycle, amount, expected_status):
        target = make_cycle(tenant, 2, 2024, 500)
        make_cycle(tenant, 1, 2024, 500)

        result = AllocationEngine(today=TODAY).allocate(
            manual_request(tenant, amount, target_cycle_id=target.id)
        )

        assert result.allocations == [(target.id, Decimal(amount).quantize(Decimal("0.01")))]
        assert result.advance_created is False
        assert Payment.objects.count() == 1
        target.refresh_from_db()
        assert target.status == expected_status

    def test_foreign_cycle_rejected(self, tenant, other_tenant, make_cycle):
        foreign = make_cycle(other_tenant, 1, 2024, 500)

        with pytest.raises(AllocationError):
            AllocationEngine(today=TODAY).allocate(manual_request(tenant, 500, target_cycle_id=foreign.id))
        assert Payment.objects.count() == 0

    def test_unknown_cycle_rejected(self, tenant):
        with pytest.raises(AllocationError):
            AllocationEngine(today=TODAY).allocate(manual_request(tenant, 500, target_cycle_id=999999))


@pytest.mark.django_db
class TestGatewayAllocation:

    def test_replay_is_a_noop(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 500)
        engine = AllocationEngine(today=TODAY)

        first = engine.allocate(gateway_request(tenant, 500))
        second = engine.allocate(gateway_request(tenant, 500))

        assert first.already_recorded is False
        assert second.already_recorded is True
        assert second.payments_created == 0
        assert Payment.objects.count() == 1

    def test_split_payment_shares_gateway_id(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 300)
        make_cycle(tenant, 2, 2024, 300)

        AllocationEngine(today=TODAY).allocate(gateway_request(tenant, 600, payment_id="pay_split"))

        rows = Payment.objects.filter(razorpay_payment_id="pay_split")
        assert rows.count() == 2
        assert all(p.razorpay_order_id == "order_001" for p in rows)
        assert all(p.notes == "Online payment: Order order_001 - Multi-cycle allocation" for p in rows)

    def test_targeted_gateway_notes(self, tenant, make_cycle):
        cycle = make_cycle(tenant, 1, 2024, 500)

        AllocationEngine(today=TODAY).allocate(gateway_request(tenant, 500, target_cycle_id=cycle.id))

        assert Payment.objects.get(rent_cycle=cycle).notes == "Order: order_001"

    def test_integrity_error_without_prior_row_propagates(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 500)

        with patch.object(AllocationEngine, "_write_payment", side_effect=IntegrityError("constraint failed")):
            with pytest.raises(IntegrityError):
                AllocationEngine(today=TODAY).allocate(gateway_request(tenant, 500, payment_id="pay_new"))

        assert Payment.objects.count() == 0

    def test_webhook_advance_notes(self, tenant):
        AllocationEngine(today=TODAY).allocate(
            gateway_request(tenant, 500, source=AllocationRequest.SOURCE_WEBHOOK)
        )

        payment = Payment.objects.get(tenant=tenant)
        assert payment.is_advance is True
        assert payment.notes == "Webhook: Order order_001 - Advance payment"


@pytest.mark.django_db
class TestAllocationIsAtomic:

    def test_mid_walk_failure_rolls_back(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 100)
        make_cycle(tenant, 2, 2024, 100)

        with pytest.raises(RuntimeError):
            FailingEngine(fail_on=2, today=TODAY).allocate(manual_request(tenant, 200))

        assert Payment.objects.count() == 0
        assert not RentCycle.objects.filter(status=RentCycle.PAID).exists()

    def test_advance_cycle_failure_is_hard_failure(self, tenant, make_cycle):
        make_cycle(tenant, 1, 2024, 100)

        with patch.object(RentCycle.objects, "get_or_create_for_month", side_effect=DatabaseError("no cycle")):
            with pytest.raises(DatabaseError):
                AllocationEngine(today=TODAY).allocate(manual_request(tenant, 300))

        assert Payment.objects.count() == 0
