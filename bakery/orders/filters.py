"""
List filters for the bakery API.
"""

import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    customer_name = django_filters.CharFilter(lookup_expr='icontains')
    branch = django_filters.CharFilter(lookup_expr='icontains')
    delivery_from = django_filters.DateFilter(field_name='delivery_date', lookup_expr='date__gte')
    delivery_to = django_filters.DateFilter(field_name='delivery_date', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = [
            'production_stage', 'dispatch_status', 'invoice_status',
            'collection_status', 'delivery_type', 'invoice_needed',
        ]
