"""
Invoicing Service for the bakery backend.

Issues pending invoices in small batches and registers customer payments
against issued invoices in the accounting service.
"""

import logging
from typing import Dict, Any
from django.conf import settings
from django.db import transaction

from ..adapters import get_accounting_adapter
from ..models import Order, InvoiceStatus, CollectionStatus, AuditLog
from ..exceptions import (
    BusinessException, ExternalServiceException, InvalidStateException, ValidationException,
)
from .aggregate import load_order
from .reconciliation import to_decimal

logger = logging.getLogger(__name__)

REQUIRED_PAYMENT_FIELDS = ('forma_cobro', 'monto', 'fecha')


class InvoicingService:
    """Service class for invoicing and collection operations."""

    @staticmethod
    def pending_invoices():
        return Order.objects.filter(
            invoice_needed=True,
            invoice_status=InvoiceStatus.PENDING,
        ).order_by('created_at')

    @staticmethod
    def process_pending_invoices(batch_size: int = None) -> Dict[str, Any]:
        """
        Issue invoices for up to ``batch_size`` pending orders.

        Each order is handled on its own: a failure is recorded on that order
        (status ERROR, message in ``invoice_error``) and the batch goes on.

        Returns:
            ``{"processed", "failed", "errors", "remaining", "total_pending"}``
        """
        batch_size = batch_size or settings.INVOICE_BATCH_SIZE
        total_pending = InvoicingService.pending_invoices().count()

        results = {
            'processed': 0,
            'failed': 0,
            'errors': [],
            'remaining': 0,
            'total_pending': total_pending,
        }
        if total_pending == 0:
            logger.info("No pending invoices to process")
            return results

        batch = list(InvoicingService.pending_invoices().values_list('id', flat=True)[:batch_size])
        logger.info(f"Processing batch of {len(batch)} invoices ({total_pending} pending)")

        adapter = get_accounting_adapter()
        for order_id in batch:
            order = load_order(order_id)
            try:
                invoice = adapter.create_invoice(order)
            except BusinessException as e:
                logger.error(f"Failed to invoice order {order.id}: {e.message}")
                InvoicingService._record_invoice_result(order, InvoiceStatus.ERROR, error=e.message)
                results['failed'] += 1
                results['errors'].append({'order_id': str(order.id), 'error': e.message})
                continue

            InvoicingService._record_invoice_result(order, InvoiceStatus.PROCESSED, invoice=invoice)
            results['processed'] += 1

        results['remaining'] = max(0, total_pending - len(batch))
        logger.info(
            f"Invoice batch done: {results['processed']} processed, {results['failed']} failed, "
            f"{results['remaining']} remaining"
        )
        return results

    @staticmethod
    def _record_invoice_result(order: Order, status: str, invoice: Dict[str, Any] = None, error: str = ""):
        with transaction.atomic():
            order = load_order(order.id, lock=True)
            old_status = order.invoice_status

            order.invoice_status = status
            order.invoice_error = error
            fields = ['invoice_status', 'invoice_error']
            if invoice is not None:
                order.invoice_info = invoice
                fields.append('invoice_info')
            order.bump_version(fields)

            AuditLog.log_status_change(
                entity=order,
                field='invoice_status',
                old_status=old_status,
                new_status=status,
                actor="invoice batch",
                notes=error,
            )

    @staticmethod
    def register_collection(order_id: str, payment: Dict[str, Any], registered_by: str = "") -> Order:
        """
        Register a customer payment against the order's invoice.

        Args:
            order_id: Order UUID
            payment: ``forma_cobro``, ``monto``, ``fecha`` (DD/MM/YYYY) and
                optional ``numero_comprobante``, ``cuenta_bancaria_id``,
                ``tipo_ping``, ``numero_tarjeta``
            registered_by: Who registered the payment

        Raises:
            NotFoundException: If the order does not exist
            ValidationException: If required payment fields are missing
            InvalidStateException: If the order has no processed invoice
            ExternalServiceException: If the accounting service call fails;
                the failure is recorded on the order first
        """
        missing = {field: 'required' for field in REQUIRED_PAYMENT_FIELDS if not payment.get(field)}
        if missing:
            raise ValidationException("Payment method, amount and date are required", missing)

        order = load_order(order_id)
        document_id = (order.invoice_info or {}).get('id')
        if order.invoice_status != InvoiceStatus.PROCESSED or not document_id:
            raise InvalidStateException(
                "Collections can only be registered for processed invoices",
                {'order_id': str(order.id), 'invoice_status': order.invoice_status}
            )

        payment = {key: value for key, value in payment.items() if value not in (None, '')}
        payment['monto'] = float(to_decimal(payment['monto']))
        failure = None
        try:
            collection = get_accounting_adapter().register_collection(document_id, payment)
            status = CollectionStatus.REGISTERED
        except ExternalServiceException as e:
            logger.error(f"Failed to register collection for order {order.id}: {e.message}")
            collection = None
            status = CollectionStatus.ERROR
            failure = e

        with transaction.atomic():
            order = load_order(order_id, lock=True)
            old_status = order.collection_status
            order.payment_details = {**payment, 'response': collection} if collection else payment
            order.collection_status = status
            order.bump_version(['payment_details', 'collection_status'])

            AuditLog.log_status_change(
                entity=order,
                field='collection_status',
                old_status=old_status,
                new_status=status,
                actor=registered_by,
            )

        if failure is not None:
            raise failure

        logger.info(f"Collection of {payment['monto']} registered for order {order.id}")
        return order
