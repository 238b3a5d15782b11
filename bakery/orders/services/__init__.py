"""
Bakery order services
"""

from .reconciliation import (
    allocate_fifo, derive_dispatch_status, derive_production_stage, sent_quantities,
)
from .order_service import OrderService
from .production_service import ProductionService
from .dispatch_service import DispatchService
from .invoicing_service import InvoicingService

__all__ = [
    # Reconciliation helpers
    'allocate_fifo', 'derive_dispatch_status', 'derive_production_stage', 'sent_quantities',

    # Services
    'OrderService', 'ProductionService', 'DispatchService', 'InvoicingService',
]
