"""
Management command to issue pending invoices (nightly cron job).
"""
import time

from django.conf import settings
from django.core.management.base import BaseCommand

from orders.services import InvoicingService


class Command(BaseCommand):
    help = 'Issue pending invoices in the accounting service, one batch at a time'

    def add_arguments(self, parser):
        parser.add_argument(
            '--batch-size',
            type=int,
            default=settings.INVOICE_BATCH_SIZE,
            help='Maximum number of invoices to issue per batch',
        )
        parser.add_argument(
            '--all',
            action='store_true',
            help='Keep running batches until nothing is pending',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=1,
            help='Pause between batches in seconds',
        )

    def handle(self, *args, **options):
        batch_size = options['batch_size']

        while True:
            results = InvoicingService.process_pending_invoices(batch_size)

            if results['total_pending'] == 0:
                self.stdout.write('No pending invoices found')
                return

            self.stdout.write(
                self.style.SUCCESS(
                    f"Processed {results['processed']} invoices, "
                    f"{results['failed']} failed, {results['remaining']} remaining"
                )
            )
            for error in results['errors']:
                self.stdout.write(self.style.WARNING(f"Order {error['order_id']}: {error['error']}"))

            # Failed orders leave PENDING, so every batch makes progress.
            if not options['all'] or results['remaining'] == 0:
                return
            time.sleep(options['interval'])
