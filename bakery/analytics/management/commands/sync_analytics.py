"""
Management command to refresh the daily sales cache from the accounting service.
"""
from django.core.management.base import BaseCommand, CommandError

from analytics.services import AnalyticsService
from orders.exceptions import BusinessException


class Command(BaseCommand):
    help = 'Sync daily sales summaries from the accounting service (default: yesterday)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--from',
            dest='date_from',
            help='First day to sync (YYYY-MM-DD or DD/MM/YYYY)',
        )
        parser.add_argument(
            '--to',
            dest='date_to',
            help='Last day to sync; defaults to --from',
        )

    def handle(self, *args, **options):
        try:
            result = AnalyticsService.sync_analytics(options['date_from'], options['date_to'])
        except BusinessException as e:
            raise CommandError(e.message)

        for day in result['details']:
            self.stdout.write(f"{day['date']:%Y-%m-%d}: {day['total_sales']} ({day['transaction_count']} documents)")
        self.stdout.write(self.style.SUCCESS(f"Synced {result['synced_days']} days"))
