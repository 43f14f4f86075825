"""
Tenant profiles.

A tenant is a platform user with the `tenant` role plus the occupancy and
rent details the rent module needs: the room they stay in and their
individual share of that room's rent.
"""

from django.db import models
from django.core.validators import MinValueValidator
from django.conf import settings
from decimal import Decimal

from rooms.models import Room


class Tenant(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tenant_profile'
    )
    room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tenants'
    )
    individual_rent = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Tenant's monthly share of the room rent"
    )
    join_date = models.DateField()
    leave_date = models.DateField(null=True, blank=True)
    emergency_contact = models.CharField(max_length=20, null=True, blank=True)
    id_proof_url = models.URLField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['room', 'is_active'], name='tenants_room_active_idx'),
        ]

    def __str__(self):
        return f"{self.user.get_full_name()} (Tenant #{self.id})"
