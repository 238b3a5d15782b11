"""
Tests for dispatch reconciliation.
"""

from datetime import timedelta
from decimal import Decimal
from django.conf import settings
from django.test import TestCase
from django.utils import timezone

from ..models import Dispatch, DispatchItem, DispatchStatus, DeliveryType, Branch, ProductionStage
from ..services import DispatchService, ProductionService
from ..exceptions import (
    ValidationException, NotFoundException, EditWindowExpiredException, ConcurrentModificationException,
)
from .utils import make_order, line


class RegisterDispatchProgressTest(TestCase):
    """Test FIFO distribution of dispatched quantities."""

    def setUp(self):
        self.first = make_order([('Tarta', 10)], delivery_date=timezone.now() + timedelta(hours=2),
                                branch=Branch.SAN_MARINO)
        self.second = make_order([('Tarta', 5)], delivery_date=timezone.now() + timedelta(days=1),
                                 branch=Branch.SAN_MARINO)

    def test_dispatch_is_capped_by_production(self):
        ProductionService.register_production_progress('Tarta', 12)

        results = DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 15}])

        self.assertEqual(results, [{
            'item': 'Tarta',
            'requested': Decimal('15'),
            'distributed': Decimal('12'),
            'remaining': Decimal('3'),
        }])
        self.first.refresh_from_db()
        self.second.refresh_from_db()
        self.assertEqual(self.first.dispatch_status, DispatchStatus.SENT)
        self.assertEqual(self.second.dispatch_status, DispatchStatus.PARTIAL)

    def test_nothing_produced_means_nothing_dispatched(self):
        results = DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 4}])

        self.assertEqual(results[0]['distributed'], Decimal('0'))
        self.assertEqual(results[0]['remaining'], Decimal('4'))
        self.assertFalse(Dispatch.objects.exists())

    def test_already_sent_quantity_is_not_sent_again(self):
        ProductionService.register_production_progress('Tarta', 15)
        DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 6}])

        results = DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 20}])

        self.assertEqual(results[0]['distributed'], Decimal('9'))
        self.assertEqual(results[0]['remaining'], Decimal('11'))
        sent = sum(item.quantity_sent for item in DispatchItem.objects.filter(order_product=line(self.first, 'Tarta')))
        self.assertEqual(sent, Decimal('10'))

    def test_fully_produced_and_dispatched_order_is_sent_and_finished(self):
        ProductionService.register_production_progress('Tarta', 10)

        DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 10}])

        self.first.refresh_from_db()
        self.assertEqual(self.first.production_stage, ProductionStage.FINISHED)
        self.assertEqual(self.first.dispatch_status, DispatchStatus.SENT)

    def test_automatic_dispatch_records(self):
        ProductionService.register_production_progress('Tarta', 2)

        DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 2}])

        dispatch = Dispatch.objects.get(order=self.first)
        self.assertEqual(dispatch.reported_by, settings.DISPATCH_SYSTEM_LABEL)
        self.assertEqual(dispatch.destination, 'San Marino')
        self.assertEqual(dispatch.items.get().quantity_sent, Decimal('2'))

    def test_destination_selects_orders(self):
        delivery = make_order([('Tarta', 3)], delivery_date=timezone.now() + timedelta(hours=1),
                              delivery_type=DeliveryType.DELIVERY, branch=Branch.SAN_MARINO,
                              delivery_address="Av. 1", google_maps_link="https://maps.app/x")
        mall = make_order([('Tarta', 3)], delivery_date=timezone.now() + timedelta(hours=1),
                          branch=Branch.MALL_DEL_SOL)
        ProductionService.register_production_progress('Tarta', 30)

        DispatchService.register_dispatch_progress('DELIVERY', [{'name': 'Tarta', 'quantity': 3}])
        DispatchService.register_dispatch_progress('mall', [{'name': 'Tarta', 'quantity': 3}])

        delivery.refresh_from_db()
        mall.refresh_from_db()
        self.first.refresh_from_db()
        self.assertEqual(delivery.dispatch_status, DispatchStatus.SENT)
        self.assertEqual(mall.dispatch_status, DispatchStatus.SENT)
        self.assertEqual(self.first.dispatch_status, DispatchStatus.NOT_SENT)

    def test_invalid_input_is_rejected(self):
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch_progress('', [{'name': 'Tarta', 'quantity': 1}])
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch_progress('San Marino', [])
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': 0}])
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch_progress('San Marino', [{'name': '', 'quantity': 1}])
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch_progress('San Marino', [{'name': 'Tarta', 'quantity': '1.005'}])


class RegisterDispatchTest(TestCase):
    """Test dispatch records reported against one order."""

    def setUp(self):
        self.order = make_order([('Tarta', 2), ('Pan', 6)])
        self.tarta = line(self.order, 'Tarta')
        self.pan = line(self.order, 'Pan')

    def test_partial_then_sent(self):
        DispatchService.register_dispatch(str(self.order.id), {
            'destination': 'San Marino',
            'items': [{'line_item_id': self.tarta.id, 'quantity_sent': 2}],
        })
        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.PARTIAL)

        DispatchService.register_dispatch(str(self.order.id), {
            'destination': 'San Marino',
            'items': [{'line_item_id': self.pan.id, 'quantity_sent': 6}],
        })
        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.SENT)

    def test_overshipment_is_flagged(self):
        DispatchService.register_dispatch(str(self.order.id), {
            'destination': 'San Marino',
            'items': [
                {'line_item_id': self.tarta.id, 'quantity_sent': 3},
                {'line_item_id': self.pan.id, 'quantity_sent': 6},
            ],
        })

        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.PROBLEM)

    def test_unknown_line_is_rejected(self):
        other = make_order([('Tarta', 1)])

        with self.assertRaises(NotFoundException):
            DispatchService.register_dispatch(str(self.order.id), {
                'destination': 'San Marino',
                'items': [{'line_item_id': line(other, 'Tarta').id, 'quantity_sent': 1}],
            })
        self.assertFalse(Dispatch.objects.exists())

    def test_destination_is_required(self):
        with self.assertRaises(ValidationException):
            DispatchService.register_dispatch(str(self.order.id), {
                'items': [{'line_item_id': self.tarta.id, 'quantity_sent': 1}],
            })


class UpdateDispatchTest(TestCase):
    """Test editing dispatch records within the edit window."""

    def setUp(self):
        self.order = make_order([('Tarta', 2), ('Pan', 6)])
        self.tarta = line(self.order, 'Tarta')
        self.pan = line(self.order, 'Pan')
        self.dispatch = DispatchService.register_dispatch(str(self.order.id), {
            'destination': 'San Marino',
            'notes': 'primera salida',
            'items': [{'line_item_id': self.tarta.id, 'quantity_sent': 2}],
        })

    def test_edit_inside_window_recomputes_status(self):
        dispatch = DispatchService.update_dispatch(str(self.order.id), str(self.dispatch.id), {
            'items': [
                {'line_item_id': self.tarta.id, 'quantity_sent': 2},
                {'line_item_id': self.pan.id, 'quantity_sent': 6},
            ],
            'notes': 'corregido',
        })

        self.assertEqual(dispatch.notes, 'corregido')
        self.assertEqual(dispatch.items.count(), 2)
        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.SENT)

    def test_edit_after_window_fails_and_changes_nothing(self):
        later = self.dispatch.reported_at + settings.DISPATCH_EDIT_WINDOW + timedelta(minutes=1)
        version = Dispatch.objects.get(id=self.dispatch.id).order.version

        with self.assertRaises(EditWindowExpiredException):
            DispatchService.update_dispatch(str(self.order.id), str(self.dispatch.id), {
                'items': [{'line_item_id': self.tarta.id, 'quantity_sent': 1}],
                'notes': 'tarde',
            }, now=later)

        self.dispatch.refresh_from_db()
        self.assertEqual(self.dispatch.notes, 'primera salida')
        self.assertEqual(self.dispatch.items.get().quantity_sent, Decimal('2'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.version, version)
        self.assertEqual(self.order.dispatch_status, DispatchStatus.PARTIAL)

    def test_edit_at_window_boundary_is_allowed(self):
        boundary = self.dispatch.reported_at + settings.DISPATCH_EDIT_WINDOW

        dispatch = DispatchService.update_dispatch(
            str(self.order.id), str(self.dispatch.id), {'notes': 'justo a tiempo'}, now=boundary
        )

        self.assertEqual(dispatch.notes, 'justo a tiempo')

    def test_stale_version_is_rejected(self):
        with self.assertRaises(ConcurrentModificationException):
            DispatchService.update_dispatch(str(self.order.id), str(self.dispatch.id), {
                'notes': 'x', 'expected_version': 1,
            })

    def test_unknown_dispatch(self):
        other = make_order([('Tarta', 1)])
        other_dispatch = DispatchService.register_dispatch(str(other.id), {
            'destination': 'San Marino',
            'items': [{'line_item_id': line(other, 'Tarta').id, 'quantity_sent': 1}],
        })

        with self.assertRaises(NotFoundException):
            DispatchService.update_dispatch(str(self.order.id), str(other_dispatch.id), {'notes': 'x'})
        with self.assertRaises(NotFoundException):
            DispatchService.update_dispatch(str(self.order.id), 'nope', {'notes': 'x'})
