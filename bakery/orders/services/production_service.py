"""
Production Service for the bakery backend.

Builds the kitchen's task list and distributes reported production across
pending orders, earliest delivery date first.
"""

import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, List
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..models import (
    Order, ProductionStage, ProductionStatus, AuditLog,
    ACTIVE_PRODUCTION_STAGES,
)
from ..exceptions import BusinessException, NotFoundException, ValidationException
from .aggregate import load_order, check_version
from .reconciliation import (
    ZERO, allocate_fifo, derive_line_status, derive_production_stage, to_decimal,
)

logger = logging.getLogger(__name__)


def parse_quantity(value, field: str) -> Decimal:
    """Parse a strictly positive quantity or raise ValidationException."""
    try:
        quantity = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationException(f"{field} must be a number", {field: "invalid"})

    if not quantity.is_finite() or quantity <= ZERO:
        raise ValidationException(f"{field} must be greater than 0", {field: "must_be_positive"})
    # Quantities are stored with two decimal places.
    if quantity.normalize().as_tuple().exponent < -2:
        raise ValidationException(f"{field} allows at most 2 decimal places", {field: "too_precise"})
    return quantity


class ProductionService:
    """Service class for production operations."""

    RECENTLY_FINISHED_WINDOW = timedelta(hours=24)

    @staticmethod
    def mark_overdue_orders(now=None) -> int:
        """
        Move PENDING and IN_PROCESS orders past their delivery date to DELAYED.

        Returns:
            Number of orders moved
        """
        now = now or timezone.now()
        moved = 0

        with transaction.atomic():
            overdue = Order.objects.select_for_update().filter(
                production_stage__in=[ProductionStage.PENDING, ProductionStage.IN_PROCESS],
                delivery_date__lt=now,
            )
            for order in overdue:
                old_stage = order.production_stage
                order.production_stage = ProductionStage.DELAYED
                order.bump_version(['production_stage'])

                AuditLog.log_status_change(
                    entity=order,
                    field='production_stage',
                    old_status=old_stage,
                    new_status=ProductionStage.DELAYED,
                    notes="Delivery date passed before production finished"
                )
                moved += 1

        if moved:
            logger.info(f"Marked {moved} overdue orders as DELAYED")
        return moved

    @staticmethod
    def get_production_tasks() -> List[Order]:
        """
        Get the production to-do list, most urgent first.

        Flags overdue orders as DELAYED first, then returns every unfinished
        order plus orders finished within the last 24 hours.
        """
        now = timezone.now()
        ProductionService.mark_overdue_orders(now)

        recently = now - ProductionService.RECENTLY_FINISHED_WINDOW
        return list(
            Order.objects.filter(
                ~Q(production_stage=ProductionStage.FINISHED)
                | Q(production_stage=ProductionStage.FINISHED, updated_at__gte=recently)
            )
            .prefetch_related('products', 'dispatches__items')
            .order_by('delivery_date', 'created_at')
        )

    @staticmethod
    def get_aggregated_items() -> Dict[str, List[Dict[str, Any]]]:
        """
        Summarize pending quantities per product, bucketed by delivery day.

        Overdue orders are counted under ``today``.

        Returns:
            ``{"today": [...], "tomorrow": [...], "future": [...]}``, each a
            list of per-product summaries with a per-order breakdown
        """
        today = timezone.localdate()
        tomorrow = today + timedelta(days=1)

        buckets = {'today': {}, 'tomorrow': {}, 'future': {}}

        orders = (
            Order.objects.exclude(production_stage=ProductionStage.FINISHED)
            .prefetch_related('products')
            .order_by('delivery_date', 'created_at')
        )

        for order in orders:
            delivery_day = timezone.localtime(order.delivery_date).date()
            if delivery_day <= today:
                bucket = buckets['today']
            elif delivery_day == tomorrow:
                bucket = buckets['tomorrow']
            else:
                bucket = buckets['future']

            for line in order.products.all():
                pending = line.quantity - line.produced
                if pending <= ZERO:
                    continue

                summary = bucket.setdefault(line.name, {
                    'name': line.name,
                    'total_quantity': Decimal('0.00'),
                    'total_produced': Decimal('0.00'),
                    'pending': Decimal('0.00'),
                    'orders': [],
                })
                summary['total_quantity'] += line.quantity
                summary['total_produced'] += line.produced
                summary['pending'] += pending
                summary['orders'].append({
                    'order_id': order.id,
                    'line_id': line.id,
                    'customer_name': order.customer_name,
                    'delivery_date': order.delivery_date,
                    'delivery_time': order.delivery_time,
                    'quantity': line.quantity,
                    'produced': line.produced,
                    'pending': pending,
                })

        return {
            key: [bucket[name] for name in sorted(bucket)]
            for key, bucket in buckets.items()
        }

    @staticmethod
    def register_production_progress(product_name: str, quantity_made, reported_by: str = "") -> Dict[str, Any]:
        """
        Distribute a produced quantity over open orders, earliest due first.

        Args:
            product_name: Product name as written on the order lines
            quantity_made: Quantity produced, must be positive
            reported_by: Who reported the production

        Returns:
            Distribution summary; ``remaining`` > 0 signals overproduction

        Raises:
            ValidationException: If the name is empty or the quantity is not positive
        """
        product_name = (product_name or '').strip()
        if not product_name:
            raise ValidationException("Product name is required", {'product_name': 'required'})
        quantity = parse_quantity(quantity_made, 'quantity')

        candidate_ids = list(
            Order.objects.filter(
                production_stage__in=ACTIVE_PRODUCTION_STAGES,
                products__name=product_name,
            )
            .order_by('delivery_date', 'created_at')
            .values_list('id', flat=True)
            .distinct()
        )

        remaining = quantity
        allocations = []

        for order_id in candidate_ids:
            if remaining <= ZERO:
                break

            with transaction.atomic():
                order = load_order(order_id, lock=True)
                if order.production_stage not in ACTIVE_PRODUCTION_STAGES:
                    continue

                lines = list(order.products.all())
                needs = [
                    (line, line.quantity - line.produced)
                    for line in lines
                    if line.name == product_name and line.production_status != ProductionStatus.COMPLETED
                ]
                taken, remaining = allocate_fifo(needs, remaining)
                if not taken:
                    continue

                for line, take in taken:
                    line.produced += take
                    line.production_status = derive_line_status(line)
                    line.save(update_fields=['produced', 'production_status'])
                    allocations.append({
                        'order_id': order.id,
                        'line_id': line.id,
                        'customer_name': order.customer_name,
                        'delivery_date': order.delivery_date,
                        'quantity': take,
                        'produced': line.produced,
                        'ordered': line.quantity,
                    })

                old_stage = order.production_stage
                order.production_stage = derive_production_stage(old_stage, lines)
                order.bump_version(['production_stage'])

                AuditLog.log_change(
                    entity=order,
                    action='production_registered',
                    actor=reported_by,
                    new_values={
                        'product': product_name,
                        'quantity': sum((take for _, take in taken), ZERO),
                    },
                )
                if order.production_stage != old_stage:
                    AuditLog.log_status_change(
                        entity=order,
                        field='production_stage',
                        old_status=old_stage,
                        new_status=order.production_stage,
                        actor=reported_by,
                        notes="Recomputed after production report"
                    )

        distributed = quantity - remaining
        if remaining > ZERO:
            logger.warning(
                f"Production of '{product_name}' exceeds open demand: "
                f"{remaining} of {quantity} units left undistributed"
            )

        logger.info(
            f"Registered production of {quantity} x '{product_name}': "
            f"{distributed} distributed over {len({a['order_id'] for a in allocations})} orders"
        )
        return {
            'product': product_name,
            'quantity_made': quantity,
            'distributed': distributed,
            'remaining': remaining,
            'allocations': allocations,
        }

    @staticmethod
    def update_task(order_id: str, stage: str = None, notes: str = None,
                    expected_version: int = None, updated_by: str = "") -> Order:
        """
        Override an order's production stage and/or production notes.

        Raises:
            ValidationException: If nothing to update or the stage is unknown
            NotFoundException: If the order does not exist
            ConcurrentModificationException: If ``expected_version`` is stale
        """
        if not stage and notes is None:
            raise ValidationException("At least one field (stage or notes) is required to update")

        if stage and stage not in ProductionStage.values:
            raise ValidationException("Invalid stage value", {'stage': stage})

        with transaction.atomic():
            order = load_order(order_id, lock=True)
            check_version(order, expected_version)

            changed = []
            old_stage = order.production_stage
            if stage:
                order.production_stage = stage
                changed.append('production_stage')
            if notes is not None:
                order.production_notes = notes
                changed.append('production_notes')

            order.bump_version(changed)

            if stage and stage != old_stage:
                AuditLog.log_status_change(
                    entity=order,
                    field='production_stage',
                    old_status=old_stage,
                    new_status=stage,
                    actor=updated_by,
                    notes="Production stage set manually"
                )

        logger.info(f"Production task {order.id} updated by {updated_by or 'system'}")
        return order

    @staticmethod
    def update_product_status(order_id: str, line_id: str, status: str,
                              notes: str = None, updated_by: str = "") -> Order:
        """
        Set the production status of one order line.

        COMPLETED marks the whole line as produced. The order's stage is
        recomputed afterwards.
        """
        if status not in ProductionStatus.values:
            raise ValidationException("Invalid production status", {'status': status})

        with transaction.atomic():
            order = load_order(order_id, lock=True)
            lines = list(order.products.all())
            line = next((candidate for candidate in lines if str(candidate.id) == str(line_id)), None)
            if line is None:
                raise NotFoundException("OrderProduct", line_id)

            line.production_status = status
            if status == ProductionStatus.COMPLETED:
                line.produced = line.quantity
            if notes is not None:
                line.production_notes = notes
            line.save(update_fields=['production_status', 'produced', 'production_notes'])

            old_stage = order.production_stage
            order.production_stage = derive_production_stage(old_stage, lines)
            order.bump_version(['production_stage'])

            if order.production_stage != old_stage:
                AuditLog.log_status_change(
                    entity=order,
                    field='production_stage',
                    old_status=old_stage,
                    new_status=order.production_stage,
                    actor=updated_by,
                    notes=f"Line '{line.name}' set to {status}"
                )

        logger.info(f"Line {line.id} of order {order.id} set to {status}")
        return order

    @staticmethod
    def batch_update_tasks(updates: List[Dict[str, Any]], updated_by: str = "") -> List[Dict[str, Any]]:
        """
        Apply several task updates; a failing update does not stop the rest.

        Args:
            updates: ``[{"id": ..., "stage": ..., "notes": ...}, ...]``

        Returns:
            One result per update with ``success`` and, on failure, ``error``
        """
        results = []
        for update in updates:
            order_id = update.get('id') or update.get('order_id')
            try:
                order = ProductionService.update_task(
                    order_id,
                    stage=update.get('stage'),
                    notes=update.get('notes'),
                    expected_version=update.get('expected_version'),
                    updated_by=updated_by,
                )
                results.append({
                    'order_id': str(order.id),
                    'success': True,
                    'production_stage': order.production_stage,
                })
            except BusinessException as e:
                logger.error(f"Failed to update production task {order_id}: {e.message}")
                results.append({
                    'order_id': str(order_id),
                    'success': False,
                    'error': {'code': e.code, 'message': e.message},
                })
        return results
