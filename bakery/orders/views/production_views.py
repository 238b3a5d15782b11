"""
Production views for the bakery backend.
"""

from rest_framework import viewsets
from rest_framework.decorators import action

from ..exceptions import BusinessException
from ..permissions import IsBackofficeUser, IsProductionStaff
from ..serializers import (
    ProductionTaskSerializer, ProductionTaskUpdateSerializer, ProductionRegisterSerializer,
    ProductionBatchSerializer, ProductStatusUpdateSerializer,
)
from ..services import ProductionService
from .common import success_response, error_response, validate_payload, actor_name


class ProductionViewSet(viewsets.ViewSet):
    """
    ViewSet for the production board.

    Lists orders to produce, takes production reports and lets the kitchen
    adjust stages and line statuses.
    """

    def get_permissions(self):
        if self.action in ('list', 'aggregated'):
            return [IsBackofficeUser()]
        return [IsProductionStaff()]

    def list(self, request):
        """Get the production task list, most urgent first."""
        tasks = ProductionService.get_production_tasks()
        return success_response(ProductionTaskSerializer(tasks, many=True).data)

    def partial_update(self, request, pk=None):
        """Override the production stage and/or notes of an order."""
        try:
            data = validate_payload(ProductionTaskUpdateSerializer, request.data)
            order = ProductionService.update_task(
                pk,
                stage=data.get('stage'),
                notes=data.get('notes'),
                expected_version=data.get('expected_version'),
                updated_by=actor_name(request),
            )
            return success_response(ProductionTaskSerializer(order).data)
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['get'])
    def aggregated(self, request):
        """Pending quantities per product for today, tomorrow and later."""
        return success_response(ProductionService.get_aggregated_items())

    @action(detail=False, methods=['post'])
    def register(self, request):
        """Distribute a produced quantity over pending orders."""
        try:
            data = validate_payload(ProductionRegisterSerializer, request.data)
            result = ProductionService.register_production_progress(
                data['product_name'], data['quantity'], reported_by=actor_name(request)
            )
            return success_response(result)
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['post'])
    def batch(self, request):
        """Apply several stage/notes updates at once."""
        try:
            data = validate_payload(ProductionBatchSerializer, request.data)
            results = ProductionService.batch_update_tasks(data['updates'], updated_by=actor_name(request))
            return success_response(results)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['patch'], url_path=r'products/(?P<line_id>[^/.]+)')
    def product_status(self, request, pk=None, line_id=None):
        """Set the production status of one order line."""
        try:
            data = validate_payload(ProductStatusUpdateSerializer, request.data)
            order = ProductionService.update_product_status(
                pk, line_id, data['status'], notes=data.get('notes'), updated_by=actor_name(request)
            )
            return success_response(ProductionTaskSerializer(order).data)
        except BusinessException as e:
            return error_response(e)
