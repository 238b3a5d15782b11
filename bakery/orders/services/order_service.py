"""
Order Service for the bakery backend.

Handles order intake, lookups and changes to the billing data of an order.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Tuple
from django.db import transaction
from django.utils import timezone

from ..models import Order, OrderProduct, DeliveryType, InvoiceStatus, AuditLog
from ..exceptions import ValidationException, InvalidStateException
from .aggregate import load_order
from .production_service import parse_quantity
from .reconciliation import to_decimal

logger = logging.getLogger(__name__)

LEGACY_DELIVERY_TYPES = {
    'retiro': DeliveryType.PICKUP,
}

BUSINESS_NAME = "NICOLE PASTRY"


def normalize_delivery_type(value) -> str:
    """Map legacy delivery type values onto the current ones."""
    value = (value or DeliveryType.PICKUP).strip().lower()
    value = LEGACY_DELIVERY_TYPES.get(value, value)
    if value not in DeliveryType.values:
        raise ValidationException("Invalid delivery type", {'delivery_type': value})
    return value


def build_confirmation_message(order: Order) -> str:
    """Customer-facing order confirmation, formatted for WhatsApp."""
    branch = order.branch or 'S/N'
    if order.delivery_type == DeliveryType.PICKUP:
        order_type = f"Retiro en local - {branch}"
        address = "N/A (Retiro)"
    else:
        order_type = f"Delivery saliendo de - {branch}"
        address = order.delivery_address

    invoice_data = order.invoice_data or {}
    items = "\n".join(
        f"{line.quantity.normalize():f} x {line.name}" for line in order.products.all()
    )
    delivery_day = timezone.localtime(order.delivery_date).strftime('%d/%m/%Y')

    return "\n\n".join([
        f"CONFIRMACIÓN DE PEDIDO - {BUSINESS_NAME}",
        f"Tipo de Orden: {order_type}",
        f"Cliente: {order.customer_name}",
        f"Cédula/RUC: {invoice_data.get('ruc') or 'N/A'}",
        f"Correo: {invoice_data.get('email') or 'N/A'}",
        f"Celular: {order.customer_phone}",
        f"Fecha de Entrega: {delivery_day}",
        f"Hora de Entrega/Retiro: {order.delivery_time}",
        "Items (Nombre Contífico):",
        items,
        f"Dirección de Entrega: {address}",
        f"Link Maps: {order.google_maps_link or 'N/A'}",
    ])


class OrderService:
    """Service class for order operations."""

    @staticmethod
    def create_order(order_data: Dict[str, Any], created_by: str = "") -> Tuple[Order, str]:
        """
        Create a new order with its product lines.

        Args:
            order_data: Order fields plus ``products``
                (``[{"name", "quantity", "price", "accounting_product_id"?}]``)
            created_by: Who took the order

        Returns:
            ``(order, confirmation_message)``

        Raises:
            ValidationException: If order data is invalid
        """
        customer_name = (order_data.get('customer_name') or '').strip()
        products = order_data.get('products') or []
        if not customer_name or not products:
            raise ValidationException(
                "Customer name and products are required",
                {'customer_name': 'required'} if not customer_name else {'products': 'required'}
            )

        if not (order_data.get('delivery_time') or '').strip():
            raise ValidationException("Delivery time is required", {'delivery_time': 'required'})

        if not order_data.get('delivery_date'):
            raise ValidationException("Delivery date is required", {'delivery_date': 'required'})

        delivery_type = normalize_delivery_type(order_data.get('delivery_type'))
        if delivery_type == DeliveryType.DELIVERY:
            missing = {
                field: 'required'
                for field in ('google_maps_link', 'delivery_address')
                if not order_data.get(field)
            }
            if missing:
                raise ValidationException(
                    "Google Maps link and delivery address are mandatory for delivery orders",
                    missing
                )

        lines = []
        for index, product in enumerate(products):
            name = (product.get('name') or '').strip()
            if not name:
                raise ValidationException("Product name is required", {f'products[{index}].name': 'required'})
            quantity = parse_quantity(product.get('quantity'), f'products[{index}].quantity')
            try:
                price = to_decimal(product.get('price', 0))
            except (InvalidOperation, TypeError, ValueError):
                raise ValidationException("Price must be a number", {f'products[{index}].price': 'invalid'})
            if price < 0:
                raise ValidationException("Price cannot be negative", {f'products[{index}].price': 'negative'})
            lines.append((name, quantity, price, product.get('accounting_product_id') or ''))

        total_value = order_data.get('total_value')
        if total_value is None:
            total_value = sum((quantity * price for _, quantity, price, _ in lines), Decimal('0.00'))

        with transaction.atomic():
            order = Order.objects.create(
                order_date=order_data.get('order_date') or timezone.now(),
                delivery_date=order_data['delivery_date'],
                delivery_time=order_data['delivery_time'].strip(),
                customer_name=customer_name,
                customer_phone=order_data.get('customer_phone') or '',
                sales_channel=order_data.get('sales_channel') or 'Web',
                responsible=order_data.get('responsible') or 'Web',
                delivery_type=delivery_type,
                branch=order_data.get('branch') or '',
                delivery_address=order_data.get('delivery_address') or '',
                google_maps_link=order_data.get('google_maps_link') or '',
                total_value=total_value,
                delivery_value=order_data.get('delivery_value') or Decimal('0.00'),
                payment_method=order_data.get('payment_method') or 'Por confirmar',
                invoice_needed=bool(order_data.get('invoice_needed')),
                invoice_data=order_data.get('invoice_data') or {},
                comments=order_data.get('comments') or '',
            )

            for position, (name, quantity, price, accounting_product_id) in enumerate(lines):
                OrderProduct.objects.create(
                    order=order,
                    name=name,
                    quantity=quantity,
                    price=price,
                    accounting_product_id=accounting_product_id,
                    position=position,
                )

            AuditLog.log_change(
                entity=order,
                action='created',
                actor=created_by,
                new_values={
                    'production_stage': order.production_stage,
                    'dispatch_status': order.dispatch_status,
                    'invoice_status': order.invoice_status,
                },
                notes=f"Order created with {len(lines)} products"
            )

        logger.info(f"Order {order.id} created for {customer_name} due {order.delivery_date:%Y-%m-%d}")
        return order, build_confirmation_message(order)

    @staticmethod
    def list_orders():
        """Orders newest first, with lines and dispatches prefetched."""
        return Order.objects.prefetch_related('products', 'dispatches__items').order_by('-created_at')

    @staticmethod
    def get_order(order_id: str) -> Order:
        """
        Raises:
            NotFoundException: If the order does not exist
        """
        return load_order(order_id)

    @staticmethod
    def update_invoice_data(order_id: str, invoice_needed: bool = None,
                            invoice_data: Dict[str, Any] = None, updated_by: str = "") -> Order:
        """
        Change whether an order is invoiced and its billing identity.

        Invoicing is retried from PENDING after any change; turning it off
        clears the invoice status.

        Raises:
            NotFoundException: If the order does not exist
            InvalidStateException: If the invoice was already issued
        """
        with transaction.atomic():
            order = load_order(order_id, lock=True)

            if not order.can_edit_invoice:
                raise InvalidStateException(
                    "Cannot edit invoice data: the invoice has already been processed",
                    {'order_id': str(order.id), 'invoice_status': order.invoice_status}
                )

            old_values = {
                'invoice_needed': order.invoice_needed,
                'invoice_data': order.invoice_data,
                'invoice_status': order.invoice_status,
            }

            if invoice_needed is not None:
                order.invoice_needed = invoice_needed
            if invoice_data:
                order.invoice_data = invoice_data

            if order.invoice_needed:
                order.invoice_status = InvoiceStatus.PENDING
            else:
                order.invoice_status = None
            order.invoice_error = ''

            order.bump_version(['invoice_needed', 'invoice_data', 'invoice_status', 'invoice_error'])

            AuditLog.log_change(
                entity=order,
                action='invoice_data_updated',
                actor=updated_by,
                old_values=old_values,
                new_values={
                    'invoice_needed': order.invoice_needed,
                    'invoice_data': order.invoice_data,
                    'invoice_status': order.invoice_status,
                },
            )

        logger.info(f"Invoice data of order {order.id} updated; status {order.invoice_status}")
        return order
