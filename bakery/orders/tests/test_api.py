"""
Tests for the orders, production, dispatch and accounting API endpoints.
"""

from datetime import timedelta
from decimal import Decimal
from django.contrib.auth.models import User, Group
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from ..adapters import switch_to_mock_adapter
from ..models import Dispatch, DispatchStatus, InvoiceStatus, ProductionStage
from ..services import DispatchService, ProductionService
from .utils import make_order, line, days_from_today


class APITestCase(TestCase):
    """Authenticated clients for a backoffice user and a production user."""

    def setUp(self):
        switch_to_mock_adapter()
        self.seller = User.objects.create_user('ventas', password='secret')
        self.baker = User.objects.create_user('cocina', password='secret')
        self.baker.groups.add(Group.objects.create(name='production'))

        self.client = APIClient()
        self.client.force_authenticate(user=self.seller)
        self.kitchen = APIClient()
        self.kitchen.force_authenticate(user=self.baker)


class OrderAPITest(APITestCase):

    def test_create_order(self):
        response = self.client.post('/api/orders/', {
            'customer_name': 'María',
            'customer_phone': '0991234567',
            'delivery_date': days_from_today(1).isoformat(),
            'delivery_time': '10:00',
            'delivery_type': 'retiro',
            'branch': 'San Marino',
            'products': [{'name': 'Tarta', 'quantity': '2', 'price': '12.50'}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['order']['delivery_type'], 'pickup')
        self.assertEqual(len(response.data['data']['order']['products']), 1)
        self.assertIn('NICOLE PASTRY', response.data['data']['whatsapp_message'])

    def test_create_order_validation_error(self):
        response = self.client.post('/api/orders/', {
            'customer_name': 'María',
            'delivery_date': days_from_today(1).isoformat(),
            'delivery_time': '10:00',
            'delivery_type': 'delivery',
            'products': [{'name': 'Tarta', 'quantity': '2', 'price': '12.50'}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['code'], 'VALIDATION_ERROR')

    def test_retrieve_unknown_order(self):
        response = self.client.get('/api/orders/00000000-0000-0000-0000-000000000000/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'NOT_FOUND')

    def test_list_filters_by_customer(self):
        make_order([('Tarta', 1)], customer_name='Ana')
        make_order([('Tarta', 1)], customer_name='Luis')

        response = self.client.get('/api/orders/', {'customer_name': 'an'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([order['customer_name'] for order in response.data['results']], ['Ana'])

    def test_requires_authentication(self):
        response = APIClient().get('/api/orders/')

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_invoice_and_collection_flow(self):
        order = make_order([('Tarta', 2, '12.50')])

        response = self.client.put(f'/api/orders/{order.id}/invoice/', {
            'invoice_needed': True,
            'invoice_data': {'ruc': '0912345678001', 'business_name': 'Cliente SA'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['invoice_status'], InvoiceStatus.PENDING)

        response = self.client.post('/api/orders/batch-invoice/', {'batch_size': 5}, format='json')
        self.assertEqual(response.data['data']['processed'], 1)

        response = self.client.post(f'/api/orders/{order.id}/collection/', {
            'forma_cobro': 'EF', 'monto': '28.75', 'fecha': '15/10/2026',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['collection_status'], 'REGISTERED')

        response = self.client.put(f'/api/orders/{order.id}/invoice/', {'invoice_needed': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'INVALID_STATE')


class ProductionAPITest(APITestCase):

    def setUp(self):
        super().setUp()
        self.order = make_order([('Tarta', 10)])

    def test_register_production(self):
        response = self.kitchen.post('/api/production/register/', {
            'product_name': 'Tarta', 'quantity': '12',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['distributed'], Decimal('10'))
        self.assertEqual(response.data['data']['remaining'], Decimal('2'))

    def test_backoffice_user_cannot_register_production(self):
        response = self.client.post('/api/production/register/', {
            'product_name': 'Tarta', 'quantity': '1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(line(self.order, 'Tarta').produced, Decimal('0'))

    def test_backoffice_user_can_see_the_board(self):
        response = self.client.get('/api/production/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['id'], str(self.order.id))

    def test_batch_update_applies_valid_items(self):
        response = self.kitchen.post('/api/production/batch/', {
            'updates': [
                {'id': str(self.order.id), 'stage': 'IN_PROCESS'},
                {'id': str(self.order.id), 'stage': 'HORNEANDO'},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['data']
        self.assertTrue(results[0]['success'])
        self.assertFalse(results[1]['success'])
        self.assertEqual(results[1]['error']['code'], 'VALIDATION_ERROR')
        self.order.refresh_from_db()
        self.assertEqual(self.order.production_stage, ProductionStage.IN_PROCESS)

    def test_stale_version_conflict(self):
        response = self.kitchen.patch(f'/api/production/{self.order.id}/', {
            'notes': 'Horno 1', 'expected_version': self.order.version + 5,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'CONCURRENT_MODIFICATION')


class DispatchAPITest(APITestCase):

    def setUp(self):
        super().setUp()
        self.order = make_order([('Tarta', 4)])
        ProductionService.register_production_progress('Tarta', 4)

    def test_register_dispatch_progress(self):
        response = self.kitchen.post('/api/dispatch/register/', {
            'destination': 'San Marino',
            'items': [{'name': 'Tarta', 'quantity': '6'}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['distributed'], Decimal('4'))
        self.assertEqual(response.data['data'][0]['remaining'], Decimal('2'))
        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.SENT)

    def test_order_dispatch_and_expired_edit(self):
        tarta = line(self.order, 'Tarta')
        response = self.kitchen.post(f'/api/orders/{self.order.id}/dispatches/', {
            'destination': 'San Marino',
            'items': [{'line_item_id': str(tarta.id), 'quantity_sent': '2'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        dispatch_id = response.data['data']['id']

        Dispatch.objects.filter(id=dispatch_id).update(
            reported_at=Dispatch.objects.get(id=dispatch_id).reported_at - timedelta(hours=2)
        )
        response = self.kitchen.patch(f'/api/orders/{self.order.id}/dispatches/{dispatch_id}/', {
            'notes': 'tarde',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'EDIT_WINDOW_EXPIRED')
        self.assertEqual(Dispatch.objects.get(id=dispatch_id).notes, '')

    def test_order_dispatch_edit_inside_window(self):
        dispatch = DispatchService.register_dispatch(str(self.order.id), {
            'destination': 'San Marino',
            'items': [{'line_item_id': line(self.order, 'Tarta').id, 'quantity_sent': 1}],
        })

        response = self.kitchen.patch(f'/api/orders/{self.order.id}/dispatches/{dispatch.id}/', {
            'items': [{'line_item_id': str(line(self.order, 'Tarta').id), 'quantity_sent': '4'}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.dispatch_status, DispatchStatus.SENT)


class AccountingAPITest(APITestCase):

    def setUp(self):
        super().setUp()
        self.adapter = switch_to_mock_adapter()

    def test_product_search(self):
        response = self.client.get('/api/accounting/products/', {'filtro': 'yuca'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([product['id'] for product in response.data['data']], ['PROD-PAN'])

    def test_create_and_find_person(self):
        response = self.client.post('/api/accounting/persons/', {
            'ruc': '0912345678',
            'razon_social': 'Ana Pérez',
            'email': 'ana@example.com',
            'direccion': 'Urdesa',
            'telefonos': '0991234567',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/accounting/persons/', {'identificacion': '0912345678'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['razon_social'], 'Ana Pérez')

    def test_person_lookup_errors(self):
        response = self.client.get('/api/accounting/persons/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/accounting/persons/', {'search': 'nadie'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_documents_with_sales_total(self):
        self.adapter.documents = [
            {'id': 'D1', 'fecha_emision': '14/10/2026', 'total': '10.25'},
            {'id': 'D2', 'fecha_emision': '14/10/2026', 'total': '4.75'},
        ]

        response = self.client.get('/api/accounting/documents/', {'fecha_emision': '14/10/2026'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 2)
        self.assertEqual(response.data['data']['stats']['total_sales'], Decimal('15.00'))

    def test_documents_default_to_last_days(self):
        response = self.client.get('/api/accounting/documents/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('fecha_inicial', response.data['data']['filters'])
