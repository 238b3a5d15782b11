"""
Pure helpers for production and dispatch reconciliation.

Nothing here touches the database: the functions take line items and
dispatch items (model instances or any object with the same attributes) and
compute the new state. Services load the aggregate, call these helpers and
persist the result.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Tuple

from ..models import DispatchStatus, ProductionStage, ProductionStatus

ZERO = Decimal('0')


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and strings to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def allocate_fifo(needs: Iterable[Tuple[Any, Decimal]], quantity) -> Tuple[List[Tuple[Any, Decimal]], Decimal]:
    """
    Distribute a quantity greedily over needs, in the order given.

    Args:
        needs: Ordered ``(key, needed)`` pairs, highest priority first
        quantity: Quantity available to distribute

    Returns:
        ``(allocations, remaining)`` where allocations is a list of
        ``(key, taken)`` pairs with ``taken > 0``
    """
    remaining = to_decimal(quantity)
    allocations = []

    for key, needed in needs:
        if remaining <= ZERO:
            break

        needed = to_decimal(needed)
        if needed <= ZERO:
            continue

        take = min(needed, remaining)
        allocations.append((key, take))
        remaining -= take

    return allocations, remaining


def sent_quantities(dispatch_items: Iterable) -> Dict[Any, Decimal]:
    """Sum quantity sent per line item id across dispatch items."""
    totals = defaultdict(lambda: ZERO)
    for item in dispatch_items:
        totals[item.order_product_id] += to_decimal(item.quantity_sent)
    return dict(totals)


def derive_dispatch_status(line_items: Iterable, dispatch_items: Iterable) -> str:
    """
    Derive an order's dispatch status from its lines and all of its dispatches.

    Lines are matched by identity, not by name. Overshipment on any line wins
    over partial or complete shipment.
    """
    sent = sent_quantities(dispatch_items)
    lines = [(to_decimal(line.quantity), sent.get(line.id, ZERO)) for line in line_items]

    if all(quantity_sent == ZERO for _, quantity_sent in lines):
        return DispatchStatus.NOT_SENT

    if any(quantity_sent > ordered for ordered, quantity_sent in lines):
        return DispatchStatus.PROBLEM

    if any(quantity_sent < ordered for ordered, quantity_sent in lines):
        return DispatchStatus.PARTIAL

    return DispatchStatus.SENT


def is_line_finished(line_item) -> bool:
    """A line is finished once fully produced or explicitly completed."""
    return (
        line_item.production_status == ProductionStatus.COMPLETED
        or to_decimal(line_item.produced) >= to_decimal(line_item.quantity)
    )


def derive_line_status(line_item) -> str:
    """Production status implied by a line's produced quantity."""
    produced = to_decimal(line_item.produced)
    if produced >= to_decimal(line_item.quantity):
        return ProductionStatus.COMPLETED
    if produced > ZERO:
        return ProductionStatus.IN_PROCESS
    return ProductionStatus.PENDING


def derive_production_stage(current_stage: str, line_items: Iterable) -> str:
    """
    Recompute an order's production stage after its lines changed.

    FINISHED when every line is finished; PENDING moves to IN_PROCESS once any
    line shows progress; a FINISHED order whose line was reopened goes back
    to IN_PROCESS. Any other stage is left as it was.
    """
    lines = list(line_items)

    if lines and all(is_line_finished(line) for line in lines):
        return ProductionStage.FINISHED

    if current_stage == ProductionStage.FINISHED and lines:
        return ProductionStage.IN_PROCESS

    if current_stage == ProductionStage.PENDING and any(
        to_decimal(line.produced) > ZERO for line in lines
    ):
        return ProductionStage.IN_PROCESS

    return current_stage
