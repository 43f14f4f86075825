"""
Complaint tickets raised by tenants and worked by admins.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone

from rooms.models import Room
from tenants.models import Tenant


class Complaint(models.Model):
    PLUMBING = 'plumbing'
    ELECTRICAL = 'electrical'
    CLEANING = 'cleaning'
    MAINTENANCE = 'maintenance'
    NOISE = 'noise'
    SECURITY = 'security'
    OTHER = 'other'

    CATEGORY_CHOICES = [
        (PLUMBING, 'Plumbing'),
        (ELECTRICAL, 'Electrical'),
        (CLEANING, 'Cleaning'),
        (MAINTENANCE, 'Maintenance'),
        (NOISE, 'Noise'),
        (SECURITY, 'Security'),
        (OTHER, 'Other'),
    ]

    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'

    PRIORITY_CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
        (URGENT, 'Urgent'),
    ]

    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'

    STATUS_CHOICES = [
        (OPEN, 'Open'),
        (IN_PROGRESS, 'In Progress'),
        (RESOLVED, 'Resolved'),
        (CLOSED, 'Closed'),
    ]

    FINISHED_STATUSES = (RESOLVED, CLOSED)

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='complaints')
    room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='complaints'
    )
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=MAINTENANCE)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=MEDIUM)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OPEN)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_complaints'
    )
    resolution_notes = models.TextField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'complaints'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'priority'], name='complaint_status_priority_idx'),
            models.Index(fields=['tenant', 'created_at'], name='complaint_tenant_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_status_display()})"

    def set_status(self, status):
        """Stamp resolved_at on the way into resolved/closed, clear it on reopen."""
        if status in self.FINISHED_STATUSES:
            if self.resolved_at is None:
                self.resolved_at = timezone.now()
        else:
            self.resolved_at = None
        self.status = status
