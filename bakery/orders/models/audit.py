"""
Audit log model for the bakery backend.
"""

import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    """
    Audit trail for order status changes, production and dispatch reports.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    entity_type = models.CharField(
        max_length=50,
        help_text="Type of entity (Order, Dispatch, ...)"
    )
    entity_id = models.UUIDField()

    action = models.CharField(
        max_length=50,
        help_text="Action performed (created, status_changed, production_registered, ...)"
    )
    actor = models.CharField(
        max_length=150,
        blank=True,
        help_text="User name or system label that performed the action"
    )

    old_values = models.JSONField(default=dict, blank=True)
    new_values = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id', '-timestamp']),
            models.Index(fields=['action', '-timestamp']),
        ]

    def __str__(self):
        return f"{self.entity_type} {self.entity_id} - {self.action} by {self.actor or 'system'} at {self.timestamp}"

    @classmethod
    def log_change(cls, entity, action: str, actor: str = "", old_values=None,
                   new_values=None, notes=""):
        """
        Create an audit log entry for an entity change.

        Args:
            entity: The model instance being audited
            action: The action performed
            actor: Who performed the action
            old_values: Previous state
            new_values: New state
            notes: Additional notes
        """
        def convert_decimals(obj):
            if isinstance(obj, dict):
                return {k: convert_decimals(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_decimals(item) for item in obj]
            elif isinstance(obj, Decimal):
                return str(obj)
            elif isinstance(obj, uuid.UUID):
                return str(obj)
            return obj

        return cls.objects.create(
            entity_type=entity.__class__.__name__,
            entity_id=entity.id,
            action=action,
            actor=actor or "",
            old_values=convert_decimals(old_values or {}),
            new_values=convert_decimals(new_values or {}),
            notes=notes,
        )

    @classmethod
    def log_status_change(cls, entity, field: str, old_status: str, new_status: str,
                          actor: str = "", notes=""):
        """
        Log a status change for an entity.

        Args:
            entity: The model instance
            field: Name of the status field that changed
            old_status: Previous status
            new_status: New status
            actor: Who made the change
            notes: Additional notes
        """
        return cls.log_change(
            entity=entity,
            action='status_changed',
            actor=actor,
            old_values={field: old_status},
            new_values={field: new_status},
            notes=notes
        )
