from django.contrib import admin
from .models import Building, Floor, Room


@admin.register(Building)
class BuildingAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'state', 'total_floors', 'is_active']
    list_filter = ['city', 'is_active']
    search_fields = ['name', 'city', 'pincode']


@admin.register(Floor)
class FloorAdmin(admin.ModelAdmin):
    list_display = ['building', 'floor_number', 'total_rooms']
    list_filter = ['building']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['room_number', 'floor', 'capacity', 'monthly_rent', 'is_active']
    list_filter = ['is_active', 'floor__building']
    search_fields = ['room_number']
