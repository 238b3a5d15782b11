"""
Dispatch Service for the bakery backend.

Records what left the kitchen, either against a single order or spread over
open orders for a destination, and keeps each order's dispatch status in
sync with its dispatch records.
"""

import logging
import uuid
from typing import Dict, Any, List
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import (
    Order, Dispatch, DispatchItem, DispatchStatus, DeliveryType, AuditLog,
)
from ..exceptions import (
    ValidationException, NotFoundException, EditWindowExpiredException,
)
from .aggregate import load_order, check_version
from .production_service import parse_quantity
from .reconciliation import ZERO, allocate_fifo, derive_dispatch_status, sent_quantities

logger = logging.getLogger(__name__)

AUTO_DISPATCH_NOTE = "Despacho automático (FIFO)"

DELIVERY_DESTINATIONS = ('delivery', 'domicilio')


def refresh_dispatch_status(order: Order, actor: str = "") -> str:
    """
    Recompute and persist an order's dispatch status from all its dispatches.

    Must run inside the transaction that changed the dispatches.
    """
    lines = list(order.products.all())
    items = DispatchItem.objects.filter(dispatch__order=order)

    old_status = order.dispatch_status
    order.dispatch_status = derive_dispatch_status(lines, items)
    order.bump_version(['dispatch_status'])

    if order.dispatch_status != old_status:
        AuditLog.log_status_change(
            entity=order,
            field='dispatch_status',
            old_status=old_status,
            new_status=order.dispatch_status,
            actor=actor,
        )
    if order.dispatch_status == DispatchStatus.PROBLEM:
        logger.warning(f"Order {order.id} has more units dispatched than ordered")

    return order.dispatch_status


class DispatchService:
    """Service class for dispatch operations."""

    @staticmethod
    def candidate_orders(destination: str):
        """
        Open orders served by a destination, earliest delivery first.

        "delivery" selects delivery orders; anything else selects pickup
        orders whose branch contains the destination text.
        """
        queryset = Order.objects.exclude(dispatch_status=DispatchStatus.SENT)

        if destination.strip().lower() in DELIVERY_DESTINATIONS:
            queryset = queryset.filter(delivery_type=DeliveryType.DELIVERY)
        else:
            queryset = queryset.filter(
                delivery_type=DeliveryType.PICKUP,
                branch__icontains=destination.strip(),
            )

        return queryset.order_by('delivery_date', 'created_at')

    @staticmethod
    def register_dispatch_progress(destination: str, items: List[Dict[str, Any]],
                                   reported_by: str = None) -> List[Dict[str, Any]]:
        """
        Spread reported dispatched quantities over open orders, FIFO.

        A line can only receive what was produced for it and not sent yet,
        and never more than was ordered.

        Args:
            destination: Branch name or "delivery"
            items: ``[{"name": str, "quantity": number}, ...]``
            reported_by: Label stored on the created dispatch records

        Returns:
            One ``{item, requested, distributed, remaining}`` per reported item

        Raises:
            ValidationException: If the destination or any item is invalid
        """
        destination = (destination or '').strip()
        if not destination:
            raise ValidationException("Destination is required", {'destination': 'required'})
        if not items:
            raise ValidationException("At least one item is required", {'items': 'required'})

        reported = []
        for index, item in enumerate(items):
            name = (item.get('name') or '').strip()
            if not name:
                raise ValidationException("Item name is required", {f'items[{index}].name': 'required'})
            reported.append((name, parse_quantity(item.get('quantity'), f'items[{index}].quantity')))

        reported_by = reported_by or settings.DISPATCH_SYSTEM_LABEL
        candidate_ids = list(DispatchService.candidate_orders(destination).values_list('id', flat=True))
        results = []

        for name, requested in reported:
            remaining = requested

            for order_id in candidate_ids:
                if remaining <= ZERO:
                    break

                with transaction.atomic():
                    order = load_order(order_id, lock=True)
                    if order.dispatch_status == DispatchStatus.SENT:
                        continue

                    matching = [line for line in order.products.all() if line.name == name]
                    if not matching:
                        continue

                    sent = sent_quantities(DispatchItem.objects.filter(dispatch__order=order))
                    needs = []
                    for line in matching:
                        already_sent = sent.get(line.id, ZERO)
                        max_dispatchable = line.produced - already_sent
                        demand_remaining = line.quantity - already_sent
                        needs.append((line, min(demand_remaining, max_dispatchable)))

                    taken, remaining = allocate_fifo(needs, remaining)
                    if not taken:
                        continue

                    for line, take in taken:
                        dispatch = Dispatch.objects.create(
                            order=order,
                            destination=destination,
                            notes=AUTO_DISPATCH_NOTE,
                            reported_by=reported_by,
                        )
                        DispatchItem.objects.create(
                            dispatch=dispatch,
                            order_product=line,
                            name=line.name,
                            quantity_sent=take,
                        )

                    refresh_dispatch_status(order, reported_by)

            distributed = requested - remaining
            if remaining > ZERO:
                logger.warning(
                    f"Dispatch of '{name}' to {destination} exceeds fulfillable demand: "
                    f"{remaining} of {requested} units not assigned"
                )
            results.append({
                'item': name,
                'requested': requested,
                'distributed': distributed,
                'remaining': remaining,
            })

        logger.info(f"Registered dispatch progress to {destination} for {len(results)} items")
        return results

    @staticmethod
    def register_dispatch(order_id: str, dispatch_data: Dict[str, Any], reported_by: str = "") -> Dispatch:
        """
        Append a caller-provided dispatch record to one order.

        No FIFO and no production cap; quantities are taken as reported.

        Args:
            order_id: Order UUID
            dispatch_data: ``destination``, ``notes`` and
                ``items[{"line_item_id", "quantity_sent"}]``
            reported_by: Who reported the dispatch

        Raises:
            NotFoundException: If the order or a referenced line does not exist
            ValidationException: If the payload is incomplete
        """
        destination = (dispatch_data.get('destination') or '').strip()
        if not destination:
            raise ValidationException("Destination is required", {'destination': 'required'})

        with transaction.atomic():
            order = load_order(order_id, lock=True)
            items = DispatchService._resolve_items(order, dispatch_data.get('items'))

            dispatch = Dispatch.objects.create(
                order=order,
                destination=destination,
                notes=dispatch_data.get('notes') or '',
                reported_by=reported_by or dispatch_data.get('reported_by') or 'Producción',
            )
            for line, quantity_sent in items:
                DispatchItem.objects.create(
                    dispatch=dispatch,
                    order_product=line,
                    name=line.name,
                    quantity_sent=quantity_sent,
                )

            refresh_dispatch_status(order, reported_by)

        logger.info(f"Dispatch {dispatch.id} registered for order {order.id} to {destination}")
        return dispatch

    @staticmethod
    def update_dispatch(order_id: str, dispatch_id: str, update_data: Dict[str, Any],
                        updated_by: str = "", now=None) -> Dispatch:
        """
        Edit the items and/or notes of a dispatch inside its edit window.

        Raises:
            NotFoundException: If the order or dispatch does not exist
            EditWindowExpiredException: If the edit window has closed
            ConcurrentModificationException: If ``expected_version`` is stale
        """
        now = now or timezone.now()

        with transaction.atomic():
            order = load_order(order_id, lock=True)
            check_version(order, update_data.get('expected_version'))

            dispatch = order.dispatches.filter(id=dispatch_id).first() if _is_uuid(dispatch_id) else None
            if dispatch is None:
                raise NotFoundException("Dispatch", dispatch_id)

            if not dispatch.is_editable(now):
                window_minutes = int(settings.DISPATCH_EDIT_WINDOW.total_seconds() // 60)
                raise EditWindowExpiredException(dispatch.id, dispatch.reported_at, window_minutes)

            old_values = {
                'notes': dispatch.notes,
                'items': [
                    {'line_item_id': item.order_product_id, 'quantity_sent': item.quantity_sent}
                    for item in dispatch.items.all()
                ],
            }

            if 'items' in update_data and update_data['items'] is not None:
                items = DispatchService._resolve_items(order, update_data['items'])
                dispatch.items.all().delete()
                for line, quantity_sent in items:
                    DispatchItem.objects.create(
                        dispatch=dispatch,
                        order_product=line,
                        name=line.name,
                        quantity_sent=quantity_sent,
                    )
            if 'notes' in update_data and update_data['notes'] is not None:
                dispatch.notes = update_data['notes']

            dispatch.modified_at = now
            dispatch.save(update_fields=['notes', 'modified_at'])

            refresh_dispatch_status(order, updated_by)

            AuditLog.log_change(
                entity=dispatch,
                action='dispatch_updated',
                actor=updated_by,
                old_values=old_values,
                new_values={
                    'notes': dispatch.notes,
                    'items': [
                        {'line_item_id': item.order_product_id, 'quantity_sent': item.quantity_sent}
                        for item in dispatch.items.all()
                    ],
                },
            )

        logger.info(f"Dispatch {dispatch.id} of order {order.id} updated")
        return dispatch

    @staticmethod
    def _resolve_items(order: Order, items_data) -> List:
        """Map ``line_item_id``/``quantity_sent`` pairs onto the order's lines."""
        if not items_data:
            raise ValidationException("At least one item is required", {'items': 'required'})

        lines = {str(line.id): line for line in order.products.all()}
        resolved = []
        for index, item in enumerate(items_data):
            line_id = str(item.get('line_item_id') or item.get('product_id') or '')
            line = lines.get(line_id)
            if line is None:
                raise NotFoundException("OrderProduct", line_id)

            quantity_sent = item.get('quantity_sent')
            if quantity_sent is None:
                raise ValidationException(
                    "Quantity sent is required", {f'items[{index}].quantity_sent': 'required'}
                )
            quantity = parse_quantity(quantity_sent, f'items[{index}].quantity_sent')
            resolved.append((line, quantity))
        return resolved


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False
