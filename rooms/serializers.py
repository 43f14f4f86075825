from rest_framework import serializers
from .models import Building, Floor, Room


class BuildingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Building
        fields = [
            'id', 'name', 'address', 'city', 'state', 'pincode',
            'total_floors', 'is_active', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']


class FloorSerializer(serializers.ModelSerializer):
    building_name = serializers.CharField(source='building.name', read_only=True)

    class Meta:
        model = Floor
        fields = ['id', 'building', 'building_name', 'floor_number', 'total_rooms', 'created_at']
        read_only_fields = ['id', 'created_at']


class RoomSerializer(serializers.ModelSerializer):
    """Room with occupancy figures."""
    building_name = serializers.CharField(source='floor.building.name', read_only=True)
    floor_number = serializers.IntegerField(source='floor.floor_number', read_only=True)
    current_tenants = serializers.IntegerField(source='current_tenant_count', read_only=True)

    class Meta:
        model = Room
        fields = [
            'id', 'floor', 'building_name', 'floor_number', 'room_number',
            'capacity', 'current_tenants', 'monthly_rent', 'description',
            'is_active', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']
