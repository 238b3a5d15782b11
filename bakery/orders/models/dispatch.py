"""
Dispatch records for bakery orders.
"""

import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone


class Dispatch(models.Model):
    """
    One dispatch event reported against an order.

    Items and notes may be edited during ``settings.DISPATCH_EDIT_WINDOW``
    after ``reported_at``; afterwards the record is frozen.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        'Order',
        on_delete=models.CASCADE,
        related_name='dispatches',
        help_text="Order this dispatch belongs to"
    )

    destination = models.CharField(
        max_length=255,
        help_text='Where the goods went, e.g. "San Marino" or "Delivery"'
    )
    notes = models.TextField(blank=True)
    reported_by = models.CharField(max_length=150, default='Producción')

    reported_at = models.DateTimeField(default=timezone.now, editable=False)
    modified_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['order', 'reported_at']
        indexes = [
            models.Index(fields=['order', 'reported_at']),
        ]

    def __str__(self):
        return f"Dispatch {self.id} to {self.destination} ({self.reported_at:%Y-%m-%d %H:%M})"

    def is_editable(self, now=None):
        """Check if the edit window is still open."""
        now = now or timezone.now()
        return now - self.reported_at <= settings.DISPATCH_EDIT_WINDOW


class DispatchItem(models.Model):
    """Quantity of one order line sent in a dispatch."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    dispatch = models.ForeignKey(
        Dispatch,
        on_delete=models.CASCADE,
        related_name='items',
    )
    order_product = models.ForeignKey(
        'OrderProduct',
        on_delete=models.CASCADE,
        related_name='dispatch_items',
        help_text="Line item this quantity counts against"
    )
    name = models.CharField(
        max_length=255,
        help_text="Snapshot of the product name"
    )
    quantity_sent = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ['dispatch', 'name']

    def __str__(self):
        return f"{self.quantity_sent} x {self.name}"
