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
from home.permissions import IsAdminUser, IsTenantUser
from tenants.models import Tenant
from .models import Complaint
from .serializers import ComplaintSerializer, ComplaintCreateSerializer, ComplaintUpdateSerializer

import logging
logger = logging.getLogger(__name__)


class ComplaintPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# ============================================
#   Tenant: my complaints
# ============================================
class TenantComplaintListCreateAPIView(APIView):
    """
    Tenant: list own complaints or raise a new one.
    """
    permission_classes = [IsTenantUser]

    @swagger_auto_schema(
        operation_summary="My Complaints",
        responses={200: ComplaintSerializer(many=True)},
        tags=["Complaints"]
    )
    def get(self, request):
        tenant = get_object_or_404(Tenant, user=request.user)
        complaints = Complaint.objects.filter(tenant=tenant).select_related('room', 'assigned_to')

        paginator = ComplaintPagination()
        page = paginator.paginate_queryset(complaints, request)
        return paginator.get_paginated_response(ComplaintSerializer(page, many=True).data)

    @swagger_auto_schema(
        operation_summary="Raise Complaint",
        request_body=ComplaintCreateSerializer,
        responses={
            201: ComplaintSerializer,
            400: "Validation Error",
            404: "Tenant profile not found",
        },
        tags=["Complaints"]
    )
    def post(self, request):
        try:
            tenant = Tenant.objects.get(user=request.user)
        except Tenant.DoesNotExist:
            return Response({"error": "Tenant profile not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            serializer = ComplaintCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            complaint = serializer.save(tenant=tenant, room=tenant.room)

            logger.info(f"[Complaint] Complaint {complaint.id} raised by tenant {tenant.id}")
            return Response(
                {
                    "success": True,
                    "message": "Complaint submitted successfully.",
                    "data": ComplaintSerializer(complaint).data,
                },
                status=status.HTTP_201_CREATED,
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.exception(f"[Complaint] Error creating complaint: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================
#   Admin: complaint queue
# ============================================
class AdminComplaintListAPIView(APIView):
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(
        operation_summary="List Complaints",
        manual_parameters=[
            openapi.Parameter(
                'status', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False,
                enum=[value for value, _ in Complaint.STATUS_CHOICES]
            ),
            openapi.Parameter(
                'priority', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False,
                enum=[value for value, _ in Complaint.PRIORITY_CHOICES]
            ),
            openapi.Parameter('category', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
            openapi.Parameter('tenant_id', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
        ],
        responses={200: ComplaintSerializer(many=True)},
        tags=["Complaints"]
    )
    def get(self, request):
        complaints = Complaint.objects.select_related('tenant__user', 'room', 'assigned_to')

        for param in ('status', 'priority', 'category', 'tenant_id'):
            value = request.query_params.get(param)
            if value:
                complaints = complaints.filter(**{param: value})

        paginator = ComplaintPagination()
        page = paginator.paginate_queryset(complaints, request)
        return paginator.get_paginated_response(ComplaintSerializer(page, many=True).data)


class AdminComplaintDetailAPIView(APIView):
    """
    Admin: fetch a complaint or move it through open / in progress / resolved / closed.
    """
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(operation_summary="Get Complaint", responses={200: ComplaintSerializer}, tags=["Complaints"])
    def get(self, request, complaint_id):
        complaint = get_object_or_404(
            Complaint.objects.select_related('tenant__user', 'room', 'assigned_to'),
            id=complaint_id
        )
        return Response(ComplaintSerializer(complaint).data)

    @swagger_auto_schema(
        operation_summary="Update Complaint",
        request_body=ComplaintUpdateSerializer,
        responses={200: ComplaintSerializer, 400: "Validation Error"},
        tags=["Complaints"]
    )
    def patch(self, request, complaint_id):
        complaint = get_object_or_404(Complaint, id=complaint_id)
        previous_status = complaint.status

        serializer = ComplaintUpdateSerializer(complaint, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        complaint = serializer.save()

        if complaint.status != previous_status:
            logger.info(
                f"[Complaint] Complaint {complaint.id} {previous_status} -> {complaint.status} "
                f"by {request.user.email}"
            )
        return Response(ComplaintSerializer(complaint).data, status=status.HTTP_200_OK)
