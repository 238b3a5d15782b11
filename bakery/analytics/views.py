"""
Analytics views for the bakery backend.
"""

from rest_framework import viewsets
from rest_framework.decorators import action

from orders.exceptions import BusinessException
from orders.permissions import IsBackofficeUser
from orders.views.common import success_response, error_response

from .services import AnalyticsService


class AnalyticsViewSet(viewsets.ViewSet):
    """ViewSet for the sales dashboard and order reports."""

    permission_classes = [IsBackofficeUser]

    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        """Cached sales totals; query params ``from`` and ``to``."""
        try:
            stats = AnalyticsService.get_dashboard_stats(
                request.query_params.get('from'), request.query_params.get('to')
            )
            return success_response(stats)
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['post'])
    def sync(self, request):
        """Refresh the sales cache; body ``from`` and ``to``, default yesterday."""
        try:
            result = AnalyticsService.sync_analytics(request.data.get('from'), request.data.get('to'))
            return success_response(result)
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['get'])
    def reports(self, request):
        """Order report for orders due between ``from`` and ``to``."""
        try:
            report = AnalyticsService.get_reports_stats(
                request.query_params.get('from'), request.query_params.get('to')
            )
            return success_response(report)
        except BusinessException as e:
            return error_response(e)
