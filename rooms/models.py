from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from decimal import Decimal
from home.models import CustomUser


class Building(models.Model):
    """
    A PG / rental building.
    """
    pincode_regex = RegexValidator(
        regex=r'^\d{6}$',
        message="Pincode must be 6 digits."
    )

    name = models.CharField(max_length=200)
    address = models.TextField()
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    pincode = models.CharField(max_length=6, validators=[pincode_regex])
    total_floors = models.PositiveIntegerField(default=1)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        CustomUser,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='buildings_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'buildings'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.city})"


class Floor(models.Model):
    """
    Floor within a building.
    """
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name='floors')
    floor_number = models.IntegerField()
    total_rooms = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'floors'
        ordering = ['building', 'floor_number']
        unique_together = ['building', 'floor_number']

    def __str__(self):
        return f"Floor {self.floor_number} ({self.building.name})"


class Room(models.Model):
    """
    A rentable room. `monthly_rent` is the room's total rent, shared
    by its tenants through their individual rent.
    """
    floor = models.ForeignKey(Floor, on_delete=models.CASCADE, related_name='rooms')
    room_number = models.CharField(max_length=20)
    capacity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    monthly_rent = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    description = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rooms'
        ordering = ['floor', 'room_number']
        unique_together = ['floor', 'room_number']
        indexes = [
            models.Index(fields=['is_active'], name='rooms_active_idx'),
        ]

    def __str__(self):
        return f"Room {self.room_number} ({self.floor.building.name})"

    def current_tenant_count(self):
        return self.tenants.filter(is_active=True).count()

    def has_vacancy(self):
        return self.current_tenant_count() < self.capacity
