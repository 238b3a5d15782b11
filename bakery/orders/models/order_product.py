"""
Line items of a bakery order.
"""

import uuid
from decimal import Decimal
from django.db import models


class ProductionStatus(models.TextChoices):
    """Per-line production status."""
    PENDING = 'PENDING', 'Pending'
    IN_PROCESS = 'IN_PROCESS', 'In Process'
    COMPLETED = 'COMPLETED', 'Completed'


class OrderProduct(models.Model):
    """
    A product line within an order.

    ``name`` is the key used to match production reports; ``id`` is the stable
    line identity that dispatch records point to.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        'Order',
        on_delete=models.CASCADE,
        related_name='products',
        help_text="Order this line belongs to"
    )

    name = models.CharField(max_length=255)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Quantity ordered by the customer"
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Unit price"
    )
    accounting_product_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Product id in the accounting service"
    )
    position = models.PositiveIntegerField(default=0)

    produced = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Cumulative quantity produced for this line"
    )
    production_status = models.CharField(
        max_length=20,
        choices=ProductionStatus.choices,
        default=ProductionStatus.PENDING,
    )
    production_notes = models.TextField(blank=True)

    class Meta:
        ordering = ['order', 'position']
        indexes = [
            models.Index(fields=['name']),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    @property
    def line_total(self):
        return self.quantity * self.price

    @property
    def remaining_to_produce(self):
        return max(self.quantity - self.produced, Decimal('0'))

    @property
    def is_fully_produced(self):
        return self.produced >= self.quantity
