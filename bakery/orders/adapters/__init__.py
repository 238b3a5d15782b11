"""
Adapters to external systems
"""

from .accounting_adapter import (
    AccountingAdapterInterface, ContificoAccountingAdapter, MockAccountingAdapter,
    get_accounting_adapter, switch_to_mock_adapter, switch_to_real_adapter,
)

__all__ = [
    'AccountingAdapterInterface', 'ContificoAccountingAdapter', 'MockAccountingAdapter',
    'get_accounting_adapter', 'switch_to_mock_adapter', 'switch_to_real_adapter',
]
