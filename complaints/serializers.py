from rest_framework import serializers

from home.models import CustomUser
from .models import Complaint


class ComplaintSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source='tenant.user.get_full_name', read_only=True)
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    assigned_to_name = serializers.CharField(source='assigned_to.get_full_name', read_only=True, default=None)

    class Meta:
        model = Complaint
        fields = [
            'id', 'tenant', 'tenant_name', 'room', 'room_number',
            'title', 'description', 'category', 'priority', 'status',
            'assigned_to', 'assigned_to_name', 'resolution_notes', 'resolved_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ComplaintCreateSerializer(serializers.ModelSerializer):
    """Tenant raises a complaint; tenant and room come from the caller's profile."""

    class Meta:
        model = Complaint
        fields = ['title', 'description', 'category', 'priority']


class ComplaintUpdateSerializer(serializers.ModelSerializer):
    """Admin triage: status, priority, assignee and resolution notes."""
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=CustomUser.objects.filter(role=CustomUser.ADMIN, is_active=True),
        required=False,
        allow_null=True
    )

    class Meta:
        model = Complaint
        fields = ['status', 'priority', 'assigned_to', 'resolution_notes']

    def update(self, instance, validated_data):
        status = validated_data.pop('status', None)
        if status is not None:
            instance.set_status(status)
        return super().update(instance, validated_data)
