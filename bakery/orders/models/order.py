"""
Order model for the bakery backend.
"""

import uuid
from decimal import Decimal
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone


class ProductionStage(models.TextChoices):
    """Production stage of an order as seen by the kitchen."""
    PENDING = 'PENDING', 'Pending'
    IN_PROCESS = 'IN_PROCESS', 'In Process'
    FINISHED = 'FINISHED', 'Finished'
    DELAYED = 'DELAYED', 'Delayed'


ACTIVE_PRODUCTION_STAGES = [
    ProductionStage.PENDING,
    ProductionStage.IN_PROCESS,
    ProductionStage.DELAYED,
]


class DispatchStatus(models.TextChoices):
    """Aggregate dispatch status, derived from the order's dispatch records."""
    NOT_SENT = 'NOT_SENT', 'Not Sent'
    PARTIAL = 'PARTIAL', 'Partial'
    SENT = 'SENT', 'Sent'
    PROBLEM = 'PROBLEM', 'Problem'


class DeliveryType(models.TextChoices):
    DELIVERY = 'delivery', 'Delivery'
    PICKUP = 'pickup', 'Pickup'


class Branch(models.TextChoices):
    SAN_MARINO = 'San Marino', 'San Marino'
    MALL_DEL_SOL = 'Mall del Sol', 'Mall del Sol'
    PRODUCTION_CENTER = 'Centro de Producción', 'Centro de Producción'


class InvoiceStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PROCESSED = 'PROCESSED', 'Processed'
    ERROR = 'ERROR', 'Error'


class CollectionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    REGISTERED = 'REGISTERED', 'Registered'
    ERROR = 'ERROR', 'Error'


class Order(models.Model):
    """
    Customer order, the aggregate root of the bakery backend.

    Line items (``products``) and dispatch records (``dispatches``) belong to
    the order and are only changed through the production and dispatch
    services, which recompute ``production_stage`` and ``dispatch_status``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Dates
    order_date = models.DateTimeField(default=timezone.now)
    delivery_date = models.DateTimeField(
        help_text="Due date; earlier orders are served first"
    )
    delivery_time = models.CharField(
        max_length=50,
        help_text="Delivery or pickup time requested by the customer"
    )

    # Customer
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=50)
    sales_channel = models.CharField(max_length=50, default='Web')
    responsible = models.CharField(max_length=50, default='Web')

    # Fulfilment
    delivery_type = models.CharField(
        max_length=10,
        choices=DeliveryType.choices,
        default=DeliveryType.PICKUP,
    )
    branch = models.CharField(
        max_length=50,
        choices=Branch.choices,
        blank=True,
        help_text="Branch the order leaves from or is picked up at"
    )
    delivery_address = models.TextField(blank=True)
    google_maps_link = models.URLField(max_length=500, blank=True)

    # Money
    total_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    delivery_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=50, default='Por confirmar')

    # Invoicing
    invoice_needed = models.BooleanField(default=False)
    invoice_data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Billing identity: ruc, business_name, email, address"
    )
    invoice_status = models.CharField(
        max_length=10,
        choices=InvoiceStatus.choices,
        null=True,
        blank=True,
    )
    invoice_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Accounting service response for the created invoice"
    )
    invoice_document = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        editable=False,
        help_text="Invoice number, assigned once and reused on retries"
    )
    invoice_error = models.TextField(blank=True)

    # Collections
    payment_details = models.JSONField(default=dict, blank=True)
    collection_status = models.CharField(
        max_length=10,
        choices=CollectionStatus.choices,
        null=True,
        blank=True,
    )

    comments = models.TextField(blank=True)

    # Production and dispatch
    production_stage = models.CharField(
        max_length=20,
        choices=ProductionStage.choices,
        default=ProductionStage.PENDING,
    )
    production_notes = models.TextField(blank=True)
    dispatch_status = models.CharField(
        max_length=20,
        choices=DispatchStatus.choices,
        default=DispatchStatus.NOT_SENT,
    )

    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on every persisted change of the aggregate"
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['production_stage', 'delivery_date']),
            models.Index(fields=['dispatch_status', 'delivery_date']),
            models.Index(fields=['invoice_needed', 'invoice_status']),
            models.Index(fields=['delivery_date']),
        ]

    def __str__(self):
        return f"Order {self.id} - {self.customer_name} ({self.delivery_date:%Y-%m-%d})"

    def save(self, *args, **kwargs):
        """Default the invoice status when invoicing is requested."""
        if self.invoice_needed and not self.invoice_status:
            self.invoice_status = InvoiceStatus.PENDING
        super().save(*args, **kwargs)

    def bump_version(self, update_fields=None):
        """
        Persist the given fields and increment the aggregate version.

        Args:
            update_fields: Order fields changed by the caller
        """
        fields = list(update_fields or [])
        self.version = F('version') + 1
        self.save(update_fields=fields + ['version', 'updated_at'])
        self.refresh_from_db(fields=['version', 'updated_at'])

    @property
    def is_active(self):
        """Check if the order still needs production."""
        return self.production_stage in ACTIVE_PRODUCTION_STAGES

    @property
    def is_overdue(self):
        """Check if the delivery date has passed."""
        return self.delivery_date < timezone.now()

    @property
    def can_edit_invoice(self):
        return self.invoice_status != InvoiceStatus.PROCESSED


class InvoiceSequence(models.Model):
    """Last invoice number handed out per establishment/emission prefix."""

    prefix = models.CharField(max_length=20, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.prefix}: {self.last_value}"

    @classmethod
    def next_value(cls, prefix: str) -> int:
        """Reserve the next number of the sequence."""
        with transaction.atomic():
            sequence, _ = cls.objects.select_for_update().get_or_create(prefix=prefix)
            sequence.last_value = F('last_value') + 1
            sequence.save(update_fields=['last_value'])
            sequence.refresh_from_db(fields=['last_value'])
            return sequence.last_value
