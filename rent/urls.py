from django.urls import path

from .views import (
    AdminPendingCyclesAPIView,
    CreateOrderAPIView,
    MarkPaymentAPIView,
    PaymentListAPIView,
    RazorpayWebhookAPIView,
    TenantPendingCyclesAPIView,
    VerifyPaymentAPIView,
    admin_dashboard_stats,
)


urlpatterns = [
    # Admin
    path('admin/payments/', PaymentListAPIView.as_view(), name='payment-list'),
    path('admin/payments/mark/', MarkPaymentAPIView.as_view(), name='payment-mark'),
    path('admin/tenants/<int:tenant_id>/rent-cycles/pending/', AdminPendingCyclesAPIView.as_view(), name='admin-pending-cycles'),
    path('admin/dashboard/stats/', admin_dashboard_stats, name='admin-dashboard-stats'),

    # Tenant
    path('tenant/rent-cycles/pending/', TenantPendingCyclesAPIView.as_view(), name='tenant-pending-cycles'),

    # Razorpay
    path('razorpay/order/', CreateOrderAPIView.as_view(), name='razorpay-order'),
    path('razorpay/verify/', VerifyPaymentAPIView.as_view(), name='razorpay-verify'),
    path('webhooks/razorpay/', RazorpayWebhookAPIView.as_view(), name='razorpay-webhook'),
]
