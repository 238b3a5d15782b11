"""
Analytics Service for the bakery backend.

Keeps the daily sales cache in sync with the accounting service and builds
dashboard and order reports.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Any, Optional, Tuple
from django.db.models import Count, Sum
from django.utils import timezone

from orders.adapters import get_accounting_adapter
from orders.adapters.accounting_adapter import document_total, format_accounting_date
from orders.exceptions import ValidationException
from orders.models import Order, OrderProduct, DispatchItem, ProductionStage, DispatchStatus

from .models import DailySummary

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30
MAX_SYNC_DAYS = 366
TOP_PRODUCTS = 10

DATE_FORMATS = ('%Y-%m-%d', '%d/%m/%Y')


def parse_date(value, field: str) -> Optional[date]:
    """Accept ISO (YYYY-MM-DD) and accounting (DD/MM/YYYY) dates."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(str(value).strip(), date_format).date()
        except ValueError:
            continue
    raise ValidationException(f"{field} must be a date (YYYY-MM-DD or DD/MM/YYYY)", {field: str(value)})


def resolve_range(date_from, date_to, default_days: int) -> Tuple[date, date]:
    """
    Parse a date range, defaulting to the last ``default_days`` days.

    Raises:
        ValidationException: If a date is malformed or the range is reversed
    """
    today = timezone.localdate()
    start = parse_date(date_from, 'from') or today - timedelta(days=default_days)
    end = parse_date(date_to, 'to') or today

    if start > end:
        raise ValidationException("Start date must be before end date", {'from': str(start), 'to': str(end)})
    return start, end


class AnalyticsService:
    """Service class for analytics operations."""

    @staticmethod
    def sync_analytics(date_from=None, date_to=None) -> Dict[str, Any]:
        """
        Refresh the daily sales cache from the accounting service.

        Args:
            date_from: First day to sync; defaults to yesterday
            date_to: Last day to sync; defaults to ``date_from``

        Returns:
            ``{"synced_days", "details": [{date, total_sales, transaction_count}]}``

        Raises:
            ValidationException: If the range is malformed, reversed or too long
            ExternalServiceException: If the accounting service call fails
        """
        start = parse_date(date_from, 'from') or timezone.localdate() - timedelta(days=1)
        end = parse_date(date_to, 'to') or start

        if start > end:
            raise ValidationException("Start date must be before end date", {'from': str(start), 'to': str(end)})
        if (end - start).days >= MAX_SYNC_DAYS:
            raise ValidationException(
                f"Cannot sync more than {MAX_SYNC_DAYS} days at once",
                {'from': str(start), 'to': str(end)}
            )

        logger.info(f"Starting analytics sync from {start} to {end}")
        adapter = get_accounting_adapter()
        details = []

        current = start
        while current <= end:
            documents = adapter.get_documents({'fecha_emision': format_accounting_date(current)})
            total_sales = sum((document_total(document) for document in documents), Decimal('0'))

            summary, _ = DailySummary.objects.update_or_create(
                date=current,
                defaults={
                    'total_sales': total_sales.quantize(Decimal('0.01')),
                    'transaction_count': len(documents),
                    'last_updated': timezone.now(),
                },
            )
            details.append({
                'date': current,
                'total_sales': summary.total_sales,
                'transaction_count': summary.transaction_count,
            })
            current += timedelta(days=1)

        logger.info(f"Analytics sync completed for {len(details)} days")
        return {
            'synced_days': len(details),
            'details': details,
        }

    @staticmethod
    def get_dashboard_stats(date_from=None, date_to=None) -> Dict[str, Any]:
        """Sales totals and daily breakdown from the cache; last 30 days by default."""
        start, end = resolve_range(date_from, date_to, DEFAULT_RANGE_DAYS)

        summaries = list(DailySummary.objects.filter(date__gte=start, date__lte=end).order_by('date'))

        return {
            'range': {'from': start, 'to': end},
            'stats': {
                'total_sales': sum((summary.total_sales for summary in summaries), Decimal('0.00')),
                'transaction_count': sum(summary.transaction_count for summary in summaries),
            },
            'daily_breakdown': [
                {
                    'date': summary.date,
                    'total_sales': summary.total_sales,
                    'transaction_count': summary.transaction_count,
                    'last_updated': summary.last_updated,
                }
                for summary in summaries
            ],
        }

    @staticmethod
    def get_reports_stats(date_from=None, date_to=None) -> Dict[str, Any]:
        """
        Order report for orders due in a date range.

        Returns:
            Order count and value, counts per production stage and dispatch
            status, and the most ordered products with produced and sent totals
        """
        start, end = resolve_range(date_from, date_to, DEFAULT_RANGE_DAYS)

        orders = Order.objects.filter(delivery_date__date__gte=start, delivery_date__date__lte=end)
        totals = orders.aggregate(count=Count('id'), total_value=Sum('total_value'))

        by_stage = {stage: 0 for stage in ProductionStage.values}
        for row in orders.order_by().values('production_stage').annotate(count=Count('id')):
            by_stage[row['production_stage']] = row['count']

        by_dispatch = {status: 0 for status in DispatchStatus.values}
        for row in orders.order_by().values('dispatch_status').annotate(count=Count('id')):
            by_dispatch[row['dispatch_status']] = row['count']

        products = (
            OrderProduct.objects.filter(order__in=orders)
            .order_by()
            .values('name')
            .annotate(quantity=Sum('quantity'), produced=Sum('produced'))
            .order_by('-quantity', 'name')[:TOP_PRODUCTS]
        )
        sent = {
            row['order_product__name']: row['sent']
            for row in DispatchItem.objects.filter(order_product__order__in=orders)
            .order_by()
            .values('order_product__name')
            .annotate(sent=Sum('quantity_sent'))
        }

        return {
            'range': {'from': start, 'to': end},
            'orders': totals['count'],
            'total_value': totals['total_value'] or Decimal('0.00'),
            'by_production_stage': by_stage,
            'by_dispatch_status': by_dispatch,
            'top_products': [
                {
                    'name': row['name'],
                    'quantity': row['quantity'],
                    'produced': row['produced'],
                    'sent': sent.get(row['name'], Decimal('0.00')),
                }
                for row in products
            ],
        }
