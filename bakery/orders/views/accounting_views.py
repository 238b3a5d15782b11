"""
Accounting service passthrough views for the bakery backend.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action

from ..adapters import get_accounting_adapter
from ..adapters.accounting_adapter import document_total, format_accounting_date
from ..exceptions import BusinessException, NotFoundException, ValidationException
from ..permissions import IsBackofficeUser
from ..serializers import PersonSerializer, DocumentFilterSerializer
from .common import success_response, error_response, validate_payload

logger = logging.getLogger(__name__)

DOCUMENTS_DEFAULT_DAYS = 30


class AccountingViewSet(viewsets.ViewSet):
    """
    ViewSet exposing the accounting service catalogue, customers and
    sales documents to the backoffice.
    """

    permission_classes = [IsBackofficeUser]

    @action(detail=False, methods=['get'])
    def products(self, request):
        """Search accounting products by ``filtro``, ``codigo_barra`` or ``categoria_id``."""
        try:
            filters = {
                key: request.query_params.get(key)
                for key in ('filtro', 'codigo_barra', 'categoria_id')
                if request.query_params.get(key)
            }
            return success_response(get_accounting_adapter().get_products(filters))
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['get', 'post'])
    def persons(self, request):
        """Find customers (GET ``identificacion`` or ``search``) or create one (POST)."""
        try:
            if request.method == 'POST':
                person_data = validate_payload(PersonSerializer, request.data)
                person = get_accounting_adapter().create_person(dict(person_data))
                return success_response(person, status.HTTP_201_CREATED)

            query = request.query_params.get('identificacion') or request.query_params.get('search')
            if not query:
                raise ValidationException(
                    "Search parameter (identificacion or search) is required",
                    {'identificacion': 'required'}
                )

            persons = get_accounting_adapter().get_person(query)
            if not persons:
                raise NotFoundException("Person", query)
            return success_response(persons)
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['get'])
    def documents(self, request):
        """
        List sales documents with sales totals.

        Without a date filter the last 30 days are returned.
        """
        try:
            filters = dict(validate_payload(DocumentFilterSerializer, request.query_params))
            if not any(filters.get(key) for key in ('fecha_emision', 'fecha_inicial', 'fecha_final')):
                today = timezone.localdate()
                filters['fecha_inicial'] = format_accounting_date(today - timedelta(days=DOCUMENTS_DEFAULT_DAYS))
                filters['fecha_final'] = format_accounting_date(today)
                logger.info(f"No date filter, defaulting to {filters['fecha_inicial']} - {filters['fecha_final']}")

            documents = get_accounting_adapter().get_documents(filters)
            total_sales = sum((document_total(document) for document in documents), Decimal('0'))

            return success_response({
                'count': len(documents),
                'stats': {
                    'total_sales': total_sales.quantize(Decimal('0.01')),
                    'count': len(documents),
                },
                'filters': filters,
                'documents': documents,
            })
        except BusinessException as e:
            return error_response(e)
