from rest_framework import viewsets, filters
from drf_yasg.utils import swagger_auto_schema

from .models import Building, Floor, Room
from .serializers import BuildingSerializer, FloorSerializer, RoomSerializer
from home.permissions import IsAdminUser

import logging
logger = logging.getLogger(__name__)


# ==================== INVENTORY ====================

class BuildingViewSet(viewsets.ModelViewSet):
    """
    Buildings. Admin only.
    """
    queryset = Building.objects.all()
    serializer_class = BuildingSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'city']
    ordering_fields = ['name', 'created_at']

    def perform_create(self, serializer):
        building = serializer.save(created_by=self.request.user)
        logger.info(f"[Inventory] Building {building.id} created by {self.request.user.email}")


class FloorViewSet(viewsets.ModelViewSet):
    """
    Floors. Admin only.
    """
    queryset = Floor.objects.select_related('building')
    serializer_class = FloorSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        building_id = self.request.query_params.get('building')
        if building_id:
            queryset = queryset.filter(building_id=building_id)
        return queryset


class RoomViewSet(viewsets.ModelViewSet):
    """
    Rooms with occupancy. Admin only.
    """
    queryset = Room.objects.select_related('floor', 'floor__building')
    serializer_class = RoomSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['room_number', 'floor__building__name']
    ordering_fields = ['room_number', 'monthly_rent', 'created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')
        return queryset

    @swagger_auto_schema(
        operation_summary="List Rooms",
        operation_description="List rooms with building, floor and current occupancy."
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_summary="Create Room",
        operation_description="Create a room on an existing floor."
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)
