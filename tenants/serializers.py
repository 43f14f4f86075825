from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from home.models import CustomUser
from rooms.models import Room
from .models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    """Tenant with user and room details."""
    full_name = serializers.CharField(source='user.full_name', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    phone = serializers.CharField(source='user.phone', read_only=True)
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    building_name = serializers.CharField(source='room.floor.building.name', read_only=True, default=None)

    class Meta:
        model = Tenant
        fields = [
            'id', 'user', 'full_name', 'email', 'phone',
            'room', 'room_number', 'building_name',
            'individual_rent', 'join_date', 'leave_date',
            'emergency_contact', 'id_proof_url', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']


class TenantCreateSerializer(serializers.Serializer):
    """
    Input for onboarding a tenant: creates the login user and the tenant
    profile together. An existing user without a tenant profile is linked
    instead of duplicated.
    """
    email = serializers.EmailField()
    full_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=17, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    room_id = serializers.PrimaryKeyRelatedField(
        queryset=Room.objects.filter(is_active=True),
        source='room',
        required=False,
        allow_null=True
    )
    individual_rent = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=0)
    join_date = serializers.DateField(required=False)
    emergency_contact = serializers.CharField(max_length=20, required=False, allow_blank=True)
    id_proof_url = serializers.URLField(required=False, allow_blank=True)

    def validate(self, attrs):
        existing = CustomUser.objects.filter(email__iexact=attrs['email']).first()
        if existing and Tenant.objects.filter(user=existing).exists():
            raise serializers.ValidationError({
                "email": f'Tenant "{existing.get_full_name()}" already exists with email {existing.email}.'
            })
        if existing and existing.role != CustomUser.TENANT:
            raise serializers.ValidationError({
                "email": f"{existing.email} belongs to a {existing.role} account and cannot be onboarded as a tenant."
            })

        room = attrs.get('room')
        if room is not None and not room.has_vacancy():
            raise serializers.ValidationError({"room_id": f"Room {room.room_number} is full."})

        if attrs.get('individual_rent') is None:
            if room is None:
                raise serializers.ValidationError({
                    "individual_rent": "Required when no room is assigned."
                })
            attrs['individual_rent'] = room.monthly_rent

        attrs['existing_user'] = existing
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        user = validated_data.pop('existing_user')
        if user is None:
            user = CustomUser.objects.create_user(
                email=validated_data['email'],
                password=validated_data.get('password') or None,
                full_name=validated_data['full_name'],
                phone=validated_data.get('phone') or None,
                role=CustomUser.TENANT,
            )

        return Tenant.objects.create(
            user=user,
            room=validated_data.get('room'),
            individual_rent=validated_data['individual_rent'],
            join_date=validated_data.get('join_date') or timezone.localdate(),
            emergency_contact=validated_data.get('emergency_contact') or None,
            id_proof_url=validated_data.get('id_proof_url') or None,
        )
