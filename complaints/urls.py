from django.urls import path
from .import views

urlpatterns = [
    # Tenant
    path('tenant/complaints/', views.TenantComplaintListCreateAPIView.as_view(), name='tenant-complaints'),

    # Admin
    path('admin/complaints/', views.AdminComplaintListAPIView.as_view(), name='admin-complaint-list'),
    path('admin/complaints/<int:complaint_id>/', views.AdminComplaintDetailAPIView.as_view(), name='admin-complaint-detail'),
]
