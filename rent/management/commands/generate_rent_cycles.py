import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from tenants.models import Tenant
from rent.models import RentCycle
from rent.utils import rent_due_date


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create the monthly rent cycle for every active tenant with a room (safe to re-run)'

    def add_arguments(self, parser):
        parser.add_argument('--month', type=int, help='Month to generate (1-12), defaults to the current month')
        parser.add_argument('--year', type=int, help='Year to generate, defaults to the current year')

    def handle(self, *args, **options):
        today = timezone.localdate()
        month = options.get('month') or today.month
        year = options.get('year') or today.year
        if not 1 <= month <= 12:
            raise CommandError(f'Invalid month: {month}')

        due_date = rent_due_date(year, month)
        tenants = Tenant.objects.filter(is_active=True, room__isnull=False, join_date__lte=due_date).select_related('room')

        created_count = 0
        for tenant in tenants:
            with transaction.atomic():
                _, created = RentCycle.objects.get_or_create_for_month(tenant, month, year)
            if created:
                created_count += 1

        logger.info(f"[RentCycleGenerator] {created_count} rent cycle(s) created for {month}/{year}")
        self.stdout.write(self.style.SUCCESS(f'Created {created_count} rent cycle(s) for {month}/{year}.'))
