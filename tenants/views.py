# ============================================================
# Django / DRF Imports
# ============================================================
from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.exceptions import ValidationError

from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

# ============================================================
# Local Imports
# ============================================================
from home.permissions import IsAdminUser
from .models import Tenant
from .serializers import TenantSerializer, TenantCreateSerializer

import logging
logger = logging.getLogger(__name__)


class TenantPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# ============================================
#   Tenant list & onboarding
# ============================================
class TenantListCreateAPIView(APIView):
    """
    Admin: list tenants or onboard a new one.
    """
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(
        operation_summary="List Tenants",
        manual_parameters=[
            openapi.Parameter('is_active', openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN, required=False),
            openapi.Parameter('room', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
        ],
        responses={200: TenantSerializer(many=True)},
        tags=["Tenants"]
    )
    def get(self, request):
        tenants = Tenant.objects.select_related('user', 'room', 'room__floor__building')

        is_active = request.query_params.get('is_active')
        if is_active is not None:
            tenants = tenants.filter(is_active=is_active.lower() == 'true')
        room_id = request.query_params.get('room')
        if room_id:
            tenants = tenants.filter(room_id=room_id)

        paginator = TenantPagination()
        page = paginator.paginate_queryset(tenants, request)
        serializer = TenantSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @swagger_auto_schema(
        operation_summary="Create Tenant",
        operation_description="Creates the tenant's login user and tenant profile in one step.",
        request_body=TenantCreateSerializer,
        responses={
            201: TenantSerializer,
            400: "Validation Error",
            500: "Internal Server Error",
        },
        tags=["Tenants"]
    )
    def post(self, request):
        try:
            serializer = TenantCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            tenant = serializer.save()

            logger.info(f"[TenantOnboarding] Tenant {tenant.id} created by {request.user.email}")
            return Response(
                {
                    "success": True,
                    "message": "Tenant created successfully.",
                    "data": TenantSerializer(tenant).data,
                },
                status=status.HTTP_201_CREATED,
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.exception(f"[TenantOnboarding] Error creating tenant: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================
#   Tenant detail
# ============================================
class TenantDetailAPIView(APIView):
    """
    Admin: fetch or update a tenant profile.
    """
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(operation_summary="Get Tenant", responses={200: TenantSerializer}, tags=["Tenants"])
    def get(self, request, tenant_id):
        tenant = get_object_or_404(
            Tenant.objects.select_related('user', 'room', 'room__floor__building'),
            id=tenant_id
        )
        return Response(TenantSerializer(tenant).data)

    @swagger_auto_schema(
        operation_summary="Update Tenant",
        operation_description="Partial update of room, rent, dates and status.",
        request_body=TenantSerializer,
        responses={200: TenantSerializer, 400: "Validation Error"},
        tags=["Tenants"]
    )
    def patch(self, request, tenant_id):
        tenant = get_object_or_404(Tenant, id=tenant_id)
        serializer = TenantSerializer(tenant, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"[TenantUpdate] Tenant {tenant.id} updated by {request.user.email}")
        return Response(serializer.data, status=status.HTTP_200_OK)
