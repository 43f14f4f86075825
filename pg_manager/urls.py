from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import TokenRefreshView
from django.conf import settings
from django.conf.urls.static import static

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

from home.views import MyTokenObtainPairView


# Swagger Configuration
schema_view = get_schema_view(
    openapi.Info(
        title="PG Management API",
        default_version='v1',
        description="""
        # PG / Rental Management API

        Admin and tenant API for a paying-guest / rental property.

        ## Features
        - Building, floor and room inventory
        - Tenant onboarding
        - Monthly rent cycles with late fees
        - Manual rent collection (cash, bank transfer, UPI)
        - Online rent collection through Razorpay (checkout + webhook)
        - Oldest-first allocation of a payment across pending rent cycles,
          with overpayment carried to next month's cycle
        - Tenant complaint tickets and an admin dashboard

        ## Authentication
        This API uses JWT (JSON Web Tokens) for authentication.

        ### Login Flow:
        1. Call /api/token/ with email and password
        2. Receive access and refresh tokens
        3. Use access token in Authorization header: Bearer <token>

        ## User Roles
        - *Admin*: Manages rooms, tenants and records payments
        - *Tenant*: Views dues and pays rent online
        """,
        contact=openapi.Contact(email="support@pgmanager.local"),
        license=openapi.License(name="Proprietary"),
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
    path('swagger.json', schema_view.without_ui(cache_timeout=0), name='schema-json'),

    # Auth
    path('api/token/', MyTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # API
    path('api/users/', include('home.urls')),
    path('api/admin/', include('rooms.urls')),
    path('api/admin/tenants/', include('tenants.urls')),
    path('api/', include('rent.urls')),
    path('api/', include('complaints.urls')),
]


if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
