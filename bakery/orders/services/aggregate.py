"""
Loading helpers for the Order aggregate.
"""

from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from ..exceptions import NotFoundException, ConcurrentModificationException
from ..models import Order


def load_order(order_id, lock: bool = False) -> Order:
    """
    Fetch an order by id.

    Args:
        order_id: Order UUID (string or UUID)
        lock: Take a row lock; must be called inside ``transaction.atomic``

    Raises:
        NotFoundException: If the id is malformed or the order does not exist
    """
    queryset = Order.objects.select_for_update() if lock else Order.objects.all()
    try:
        return queryset.get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundException("Order", order_id)


def check_version(order: Order, expected_version: Optional[int]) -> None:
    """Reject writes made against a stale copy of the order."""
    if expected_version is None:
        return
    if int(expected_version) != order.version:
        raise ConcurrentModificationException(order.id, int(expected_version), order.version)
