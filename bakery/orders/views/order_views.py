"""
Order views for the bakery backend.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action

from ..exceptions import BusinessException
from ..filters import OrderFilter
from ..permissions import IsBackofficeUser, IsProductionStaff
from ..serializers import (
    OrderListSerializer, OrderDetailSerializer, OrderCreateSerializer,
    InvoiceUpdateSerializer, CollectionSerializer, BatchInvoiceSerializer, DispatchSerializer,
    DispatchCreateSerializer, DispatchUpdateSerializer,
)
from ..services import OrderService, InvoicingService, DispatchService
from .common import success_response, error_response, validate_payload, actor_name


class OrderViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for Order management.

    Provides order intake and lookups, invoice and collection actions and
    the dispatch records of a single order.
    """

    permission_classes = [IsBackofficeUser]
    filterset_class = OrderFilter

    def get_queryset(self):
        return OrderService.list_orders()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return OrderListSerializer
        return OrderDetailSerializer

    def retrieve(self, request, pk=None):
        """Get one order with its products and dispatches."""
        try:
            order = OrderService.get_order(pk)
            return success_response(OrderDetailSerializer(order).data)
        except BusinessException as e:
            return error_response(e)

    def create(self, request):
        """Take a new order and return the customer confirmation message."""
        try:
            order_data = validate_payload(OrderCreateSerializer, request.data)
            order, message = OrderService.create_order(order_data, created_by=actor_name(request))
            return success_response({
                'order': OrderDetailSerializer(order).data,
                'whatsapp_message': message,
            }, status.HTTP_201_CREATED)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['put'])
    def invoice(self, request, pk=None):
        """Update the billing data of an order that was not invoiced yet."""
        try:
            data = validate_payload(InvoiceUpdateSerializer, request.data)
            order = OrderService.update_invoice_data(
                pk,
                invoice_needed=data.get('invoice_needed'),
                invoice_data=data.get('invoice_data'),
                updated_by=actor_name(request),
            )
            return success_response(OrderDetailSerializer(order).data)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['post'])
    def collection(self, request, pk=None):
        """Register a payment against the order's invoice."""
        try:
            payment = validate_payload(CollectionSerializer, request.data)
            order = InvoicingService.register_collection(pk, dict(payment), registered_by=actor_name(request))
            return success_response({
                'order_id': str(order.id),
                'collection_status': order.collection_status,
                'payment_details': order.payment_details,
            })
        except BusinessException as e:
            return error_response(e)

    @action(detail=False, methods=['post'], url_path='batch-invoice')
    def batch_invoice(self, request):
        """Issue the next batch of pending invoices."""
        try:
            data = validate_payload(BatchInvoiceSerializer, request.data)
            results = InvoicingService.process_pending_invoices(data.get('batch_size'))
            return success_response(results)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['post'], permission_classes=[IsProductionStaff])
    def dispatches(self, request, pk=None):
        """Append a dispatch record to the order."""
        try:
            data = validate_payload(DispatchCreateSerializer, request.data)
            dispatch = DispatchService.register_dispatch(
                pk, data, reported_by=data.get('reported_by') or actor_name(request)
            )
            return success_response(DispatchSerializer(dispatch).data, status.HTTP_201_CREATED)
        except BusinessException as e:
            return error_response(e)

    @action(
        detail=True,
        methods=['patch'],
        url_path=r'dispatches/(?P<dispatch_id>[^/.]+)',
        permission_classes=[IsProductionStaff],
    )
    def update_dispatch(self, request, pk=None, dispatch_id=None):
        """Edit a dispatch record while its edit window is open."""
        try:
            data = validate_payload(DispatchUpdateSerializer, request.data)
            dispatch = DispatchService.update_dispatch(pk, dispatch_id, data, updated_by=actor_name(request))
            return success_response(DispatchSerializer(dispatch).data)
        except BusinessException as e:
            return error_response(e)
