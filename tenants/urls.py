from django.urls import path
from .import views

urlpatterns = [
    path('', views.TenantListCreateAPIView.as_view(), name='tenant-list-create'),
    path('<int:tenant_id>/', views.TenantDetailAPIView.as_view(), name='tenant-detail'),
]
