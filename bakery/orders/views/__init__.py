"""
Bakery order views
"""

from .order_views import OrderViewSet
from .production_views import ProductionViewSet
from .dispatch_views import DispatchViewSet
from .accounting_views import AccountingViewSet

__all__ = [
    'OrderViewSet',
    'ProductionViewSet',
    'DispatchViewSet',
    'AccountingViewSet',
]
