"""
Bakery order models
"""

from .order import (
    Order, ProductionStage, DispatchStatus, DeliveryType, Branch,
    InvoiceStatus, CollectionStatus, InvoiceSequence, ACTIVE_PRODUCTION_STAGES,
)
from .order_product import OrderProduct, ProductionStatus
from .dispatch import Dispatch, DispatchItem
from .audit import AuditLog

__all__ = [
    # Order models
    'Order', 'ProductionStage', 'DispatchStatus', 'DeliveryType', 'Branch',
    'InvoiceStatus', 'CollectionStatus', 'InvoiceSequence', 'ACTIVE_PRODUCTION_STAGES',
    'OrderProduct', 'ProductionStatus',

    # Dispatch models
    'Dispatch', 'DispatchItem',

    # Audit
    'AuditLog',
]
