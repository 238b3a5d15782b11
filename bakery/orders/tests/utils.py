"""
Helpers for building orders in tests.
"""

from datetime import datetime, time, timedelta
from decimal import Decimal
from django.utils import timezone

from ..models import Order, OrderProduct, DeliveryType, Branch


def local_datetime(day, hour=10):
    return timezone.make_aware(datetime.combine(day, time(hour, 0)))


def days_from_today(days, hour=10):
    return local_datetime(timezone.localdate() + timedelta(days=days), hour)


def make_order(products, delivery_date=None, customer_name="Cliente", **fields):
    """
    Create an order with product lines.

    Args:
        products: ``[(name, quantity), ...]`` or ``[(name, quantity, price), ...]``
    """
    defaults = {
        'delivery_date': delivery_date or days_from_today(1),
        'delivery_time': '10:00',
        'customer_name': customer_name,
        'customer_phone': '0999999999',
        'delivery_type': DeliveryType.PICKUP,
        'branch': Branch.SAN_MARINO,
    }
    defaults.update(fields)
    order = Order.objects.create(**defaults)

    for position, product in enumerate(products):
        name, quantity = product[0], product[1]
        price = product[2] if len(product) > 2 else Decimal('10.00')
        OrderProduct.objects.create(
            order=order,
            name=name,
            quantity=Decimal(str(quantity)),
            price=Decimal(str(price)),
            position=position,
        )
    return order


def line(order, name):
    return order.products.get(name=name)
