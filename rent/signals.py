import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Payment, RentCycle


logger = logging.getLogger(__name__)


# ============================================================
# SIGNAL: Close a rent cycle once its verified payments cover it
# ============================================================
@receiver(post_save, sender=Payment)
def update_rent_cycle_status(sender, instance, created, **kwargs):
    if not created or not instance.is_verified:
        return

    cycle = RentCycle.objects.get(pk=instance.rent_cycle_id)
    previous = cycle.status
    if cycle.refresh_status() != previous:
        logger.info(f"[RentCycle] Cycle {cycle.id} moved {previous} -> {cycle.status} after payment {instance.id}")
