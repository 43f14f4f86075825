import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from django.contrib.auth import get_user_model

from rooms.models import Building, Floor, Room
from tenants.models import Tenant
from rent.models import RentCycle

User = get_user_model()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@pg.test", password="pass12345", full_name="Asha Admin", role=User.ADMIN
    )


@pytest.fixture
def tenant_user(db):
    return User.objects.create_user(
        email="tenant@pg.test", password="pass12345", full_name="Ravi Tenant", role=User.TENANT
    )


@pytest.fixture
def room(admin_user):
    building = Building.objects.create(
        name="Sunrise PG", address="12 MG Road", city="Bengaluru",
        state="Karnataka", pincode="560001", created_by=admin_user
    )
    floor = Floor.objects.create(building=building, floor_number=1, total_rooms=4)
    return Room.objects.create(floor=floor, room_number="101", capacity=2, monthly_rent=Decimal("1000.00"))


@pytest.fixture
def tenant(tenant_user, room):
    return Tenant.objects.create(
        user=tenant_user, room=room, individual_rent=Decimal("500.00"), join_date=date(2024, 1, 1)
    )


@pytest.fixture
def other_tenant(room):
    user = User.objects.create_user(email="other@pg.test", password="pass12345", full_name="Other Tenant")
    return Tenant.objects.create(
        user=user, room=room, individual_rent=Decimal("500.00"), join_date=date(2024, 1, 1)
    )


@pytest.fixture
def make_cycle():
    """Factory: make_cycle(tenant, month, year, amount, **extra)."""
    def _make(tenant, month, year, amount, **extra):
        extra.setdefault("due_date", date(year, month, 5))
        return RentCycle.objects.create(
            tenant=tenant, room=tenant.room, due_month=month, due_year=year,
            amount_due=Decimal(str(amount)), **extra
        )
    return _make


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def tenant_client(tenant_user):
    client = APIClient()
    client.force_authenticate(user=tenant_user)
    return client
