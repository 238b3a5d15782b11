"""
Cached sales figures for the dashboard.
"""

from decimal import Decimal
from django.db import models
from django.utils import timezone


class DailySummary(models.Model):
    """
    Sales totals of one day, synced from the accounting service.

    Serves the dashboard without calling the accounting API per request.
    """

    date = models.DateField(unique=True)
    total_sales = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    transaction_count = models.PositiveIntegerField(default=0)
    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['date']
        verbose_name_plural = 'daily summaries'

    def __str__(self):
        return f"{self.date:%Y-%m-%d}: {self.total_sales} ({self.transaction_count} documents)"
