"""
Bakery order serializers
"""

from .order_serializers import (
    OrderProductSerializer, DispatchItemSerializer, DispatchSerializer,
    OrderListSerializer, OrderDetailSerializer, OrderCreateSerializer,
    InvoiceUpdateSerializer, CollectionSerializer, BatchInvoiceSerializer,
)
from .production_serializers import (
    ProductionTaskSerializer, ProductionTaskUpdateSerializer, ProductionRegisterSerializer,
    ProductionBatchSerializer, ProductStatusUpdateSerializer,
)
from .dispatch_serializers import (
    DispatchProgressSerializer, DispatchCreateSerializer, DispatchUpdateSerializer,
)
from .accounting_serializers import PersonSerializer, DocumentFilterSerializer

__all__ = [
    # Order serializers
    'OrderProductSerializer', 'DispatchItemSerializer', 'DispatchSerializer',
    'OrderListSerializer', 'OrderDetailSerializer', 'OrderCreateSerializer',
    'InvoiceUpdateSerializer', 'CollectionSerializer', 'BatchInvoiceSerializer',

    # Production serializers
    'ProductionTaskSerializer', 'ProductionTaskUpdateSerializer', 'ProductionRegisterSerializer',
    'ProductionBatchSerializer', 'ProductStatusUpdateSerializer',

    # Dispatch serializers
    'DispatchProgressSerializer', 'DispatchCreateSerializer', 'DispatchUpdateSerializer',

    # Accounting serializers
    'PersonSerializer', 'DocumentFilterSerializer',
]
