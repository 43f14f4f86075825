import pytest
from django.urls import reverse
from rest_framework import status

from complaints.models import Complaint


@pytest.fixture
def complaint(tenant):
    return Complaint.objects.create(
        tenant=tenant, room=tenant.room, title="Leaking tap", description="Bathroom tap drips all night",
        category=Complaint.PLUMBING,
    )


@pytest.mark.django_db
class TestTenantComplaints:

    def test_tenant_raises_complaint(self, tenant_client, tenant):
        response = tenant_client.post(reverse("tenant-complaints"), {
            "title": "Fan not working",
            "description": "Ceiling fan stopped yesterday",
            "category": "electrical",
            "priority": "high",
        }, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        complaint = Complaint.objects.get()
        assert complaint.tenant == tenant
        assert complaint.room == tenant.room
        assert complaint.status == Complaint.OPEN
        assert response.data["data"]["room_number"] == "101"

    def test_defaults(self, tenant_client, tenant):
        tenant_client.post(reverse("tenant-complaints"), {
            "title": "Noise", "description": "Loud music after 11pm",
        }, format="json")

        complaint = Complaint.objects.get()
        assert complaint.category == Complaint.MAINTENANCE
        assert complaint.priority == Complaint.MEDIUM

    def test_tenant_cannot_set_status(self, tenant_client, tenant):
        tenant_client.post(reverse("tenant-complaints"), {
            "title": "Noise", "description": "Loud music", "status": "closed",
        }, format="json")

        assert Complaint.objects.get().status == Complaint.OPEN

    def test_invalid_category_is_400(self, tenant_client, tenant):
        response = tenant_client.post(reverse("tenant-complaints"), {
            "title": "X", "description": "Y", "category": "parking",
        }, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Complaint.objects.count() == 0

    def test_list_shows_only_own_complaints(self, tenant_client, complaint, other_tenant):
        Complaint.objects.create(tenant=other_tenant, title="Other", description="Not mine")

        response = tenant_client.get(reverse("tenant-complaints"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 1
        assert response.data["results"][0]["id"] == complaint.id

    def test_no_tenant_profile_is_404(self, tenant_client):
        response = tenant_client.post(reverse("tenant-complaints"), {
            "title": "X", "description": "Y",
        }, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_admin_forbidden(self, admin_client):
        response = admin_client.get(reverse("tenant-complaints"))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestAdminComplaints:

    def test_list_filters_by_status(self, admin_client, complaint, tenant):
        Complaint.objects.create(tenant=tenant, title="Done", description="Fixed", status=Complaint.CLOSED)

        response = admin_client.get(reverse("admin-complaint-list"), {"status": "open"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 1
        assert response.data["results"][0]["tenant_name"] == "Ravi Tenant"

    def test_resolve_stamps_resolved_at(self, admin_client, admin_user, complaint):
        response = admin_client.patch(reverse("admin-complaint-detail", args=[complaint.id]), {
            "status": "resolved",
            "assigned_to": admin_user.id,
            "resolution_notes": "Washer replaced",
        }, format="json")

        assert response.status_code == status.HTTP_200_OK
        complaint.refresh_from_db()
        assert complaint.status == Complaint.RESOLVED
        assert complaint.resolved_at is not None
        assert complaint.assigned_to == admin_user
        assert complaint.resolution_notes == "Washer replaced"

    def test_reopen_clears_resolved_at(self, admin_client, complaint):
        url = reverse("admin-complaint-detail", args=[complaint.id])
        admin_client.patch(url, {"status": "closed"}, format="json")

        admin_client.patch(url, {"status": "in_progress"}, format="json")

        complaint.refresh_from_db()
        assert complaint.status == Complaint.IN_PROGRESS
        assert complaint.resolved_at is None

    def test_assignee_must_be_admin(self, admin_client, complaint, tenant_user):
        response = admin_client.patch(reverse("admin-complaint-detail", args=[complaint.id]), {
            "assigned_to": tenant_user.id,
        }, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_status_is_400(self, admin_client, complaint):
        response = admin_client.patch(reverse("admin-complaint-detail", args=[complaint.id]), {
            "status": "escalated",
        }, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_tenant_cannot_update(self, tenant_client, complaint):
        response = tenant_client.patch(reverse("admin-complaint-detail", args=[complaint.id]), {
            "status": "closed",
        }, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
