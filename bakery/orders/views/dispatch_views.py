"""
Dispatch views for the bakery backend.
"""

from rest_framework import viewsets
from rest_framework.decorators import action

from ..exceptions import BusinessException
from ..permissions import IsProductionStaff
from ..serializers import DispatchProgressSerializer
from ..services import DispatchService
from .common import success_response, error_response, validate_payload


class DispatchViewSet(viewsets.ViewSet):
    """ViewSet for dispatch reports that span several orders."""

    permission_classes = [IsProductionStaff]

    @action(detail=False, methods=['post'])
    def register(self, request):
        """Spread dispatched quantities over open orders for a destination."""
        try:
            data = validate_payload(DispatchProgressSerializer, request.data)
            results = DispatchService.register_dispatch_progress(
                data['destination'],
                data['items'],
                reported_by=data.get('reported_by') or None,
            )
            return success_response(results)
        except BusinessException as e:
            return error_response(e)
