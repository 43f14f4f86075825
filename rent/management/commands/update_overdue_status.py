import logging

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from rent.models import RentCycle


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Mark past-due rent cycles overdue and apply late fees'

    def handle(self, *args, **options):
        today = timezone.localdate()
        late_fee = getattr(settings, 'RENT_LATE_FEE_AMOUNT', 0)

        with transaction.atomic():
            overdue_count = RentCycle.objects.mark_overdue(today)
            fee_count = RentCycle.objects.apply_late_fees(today, late_fee)

        logger.info(f"[OverdueUpdater] {overdue_count} cycle(s) marked overdue, late fee applied to {fee_count}")
        self.stdout.write(self.style.SUCCESS(
            f'{overdue_count} rent cycle(s) marked overdue, late fee applied to {fee_count}.'
        ))
