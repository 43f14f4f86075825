import pytest
from datetime import date
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from complaints.models import Complaint
from rent.models import Payment, RentCycle
from rooms.models import Room


def pay(tenant, cycle, amount):
    return Payment.objects.create(
        tenant=tenant, rent_cycle=cycle, amount=Decimal(str(amount)),
        payment_mode=Payment.CASH, payment_date=date(2024, 1, 6), is_verified=True
    )


@pytest.mark.django_db
class TestAdminDashboard:

    def test_collection_occupancy_and_complaints(self, admin_client, room, tenant, other_tenant, make_cycle):
        paid = make_cycle(tenant, 1, 2024, 500)
        overdue = make_cycle(other_tenant, 1, 2024, 500, status=RentCycle.OVERDUE)
        make_cycle(tenant, 2, 2024, 500, status=RentCycle.WAIVED)
        pay(tenant, paid, 500)
        pay(other_tenant, overdue, 200)
        Room.objects.create(floor=room.floor, room_number="102", capacity=3, monthly_rent=Decimal("900.00"))
        Complaint.objects.create(tenant=tenant, room=room, title="Leaking tap", description="Drips")

        response = admin_client.get(reverse("admin-dashboard-stats"), {"month": 1, "year": 2024})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["collection"] == {
            "total_expected": "1000.00",
            "total_collected": "700.00",
            "total_pending": "300.00",
            "total_rent_cycles": 2,
            "paid_count": 1,
            "pending_count": 0,
            "overdue_count": 1,
        }
        assert response.data["occupancy"] == {
            "total_rooms": 2,
            "full_rooms": 1,
            "empty_rooms": 1,
            "total_beds": 5,
            "occupied_beds": 2,
            "vacant_beds": 3,
            "occupancy_rate": 40.0,
        }
        assert response.data["complaints"]["open_count"] == 1
        assert response.data["complaints"]["recent"][0]["title"] == "Leaking tap"

    def test_waived_month_is_empty(self, admin_client, tenant, make_cycle):
        make_cycle(tenant, 2, 2024, 500, status=RentCycle.WAIVED)

        response = admin_client.get(reverse("admin-dashboard-stats"), {"month": 2, "year": 2024})

        assert response.data["collection"]["total_expected"] == "0.00"
        assert response.data["collection"]["total_rent_cycles"] == 0

    @pytest.mark.parametrize("params", [{"month": 13, "year": 2024}, {"month": "jan"}])
    def test_bad_month_is_400(self, admin_client, params):
        response = admin_client.get(reverse("admin-dashboard-stats"), params)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_tenant_forbidden(self, tenant_client):
        response = tenant_client.get(reverse("admin-dashboard-stats"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
