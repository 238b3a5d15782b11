"""
Accounting Adapter for the bakery backend.

Provides the interface to the accounting service (Contifico) used for
invoices, collections, products, customers and sales documents, with a
deterministic mock implementation for tests and development.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Dict, Any, Optional

import requests
from django.conf import settings
from django.utils import timezone

from ..exceptions import ExternalServiceException, ValidationException
from ..models import InvoiceSequence

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_accounting_date(value) -> str:
    """Dates travel as DD/MM/YYYY in the accounting API."""
    return value.strftime('%d/%m/%Y')


def document_total(document) -> Decimal:
    """Total of a sales document; malformed totals count as zero."""
    try:
        return Decimal(str(document.get('total') or '0'))
    except InvalidOperation:
        logger.warning(f"Ignoring document {document.get('id')} with invalid total {document.get('total')!r}")
        return Decimal('0')


def document_number(order, prefix: str) -> str:
    """
    Invoice number for an order: establishment/emission prefix plus a 9 digit sequence.

    The number is reserved on first use and stored on the order, so a retry
    after an accounting error sends the same number again.
    """
    if not order.invoice_document:
        order.invoice_document = f"{prefix}-{InvoiceSequence.next_value(prefix):09d}"
        order.save(update_fields=['invoice_document'])
    return order.invoice_document


def build_invoice_payload(order, config: Dict[str, Any], issued_on=None) -> Dict[str, Any]:
    """
    Build the invoice document for an order.

    Every line is taxed at ``config['TAX_RATE']`` percent. Totals are rounded
    to cents per line, the way the accounting service recomputes them.

    Raises:
        ValidationException: If the order has no billing identity or no lines
    """
    invoice_data = order.invoice_data or {}
    missing = [field for field in ('ruc', 'business_name') if not invoice_data.get(field)]
    if missing:
        raise ValidationException(
            f"Order {order.id} is missing invoice data",
            {field: 'required' for field in missing}
        )

    lines = list(order.products.all())
    if not lines:
        raise ValidationException(f"Order {order.id} has no products to invoice")

    tax_rate = Decimal(str(config['TAX_RATE']))
    subtotal_zero = Decimal('0')
    subtotal_taxed = Decimal('0')
    total_tax = Decimal('0')
    details = []

    for line in lines:
        line_total = to_cents(line.quantity * line.price)
        base_zero = Decimal('0')
        base_taxed = Decimal('0')

        if tax_rate > 0:
            base_taxed = line_total
            line_tax = to_cents(base_taxed * tax_rate / 100)
            subtotal_taxed += base_taxed
            total_tax += line_tax
        else:
            base_zero = line_total
            subtotal_zero += base_zero

        details.append({
            'producto_id': line.accounting_product_id or config['DEFAULT_PRODUCT_ID'],
            'cantidad': float(line.quantity),
            'precio': float(line.price),
            'descripcion': line.name,
            'porcentaje_iva': float(tax_rate),
            'porcentaje_descuento': 0,
            'base_cero': float(base_zero),
            'base_gravable': float(base_taxed),
            'base_no_gravable': 0,
        })

    ruc = str(invoice_data['ruc'])
    issued_on = issued_on or timezone.localdate()

    return {
        'pos': config['POS_TOKEN'],
        'fecha_emision': format_accounting_date(issued_on),
        'tipo_documento': 'FAC',
        'documento': document_number(order, config['DOCUMENT_PREFIX']),
        'estado': 'P',
        'electronico': True,
        'autorizacion': '',
        'cliente': {
            'razon_social': invoice_data['business_name'],
            'ruc': ruc,
            'cedula': ruc if len(ruc) == 10 else '',
            'email': invoice_data.get('email', ''),
            'direccion': invoice_data.get('address', ''),
            'tipo': 'C',
            'telefonos': order.customer_phone,
        },
        'detalles': details,
        'subtotal_0': float(to_cents(subtotal_zero)),
        'subtotal_12': 0,
        'subtotal_15': float(to_cents(subtotal_taxed)),
        'iva': float(to_cents(total_tax)),
        'ice': 0,
        'servicio': 0,
        'propina': 0,
        'total': float(to_cents(subtotal_zero + subtotal_taxed + total_tax)),
        'metodo_pago': config['PAYMENT_METHOD'],
    }


class AccountingAdapterInterface(ABC):
    """
    Interface for accounting service integration.

    This abstract base class defines the operations the bakery backend needs
    from the accounting service.
    """

    @abstractmethod
    def create_invoice(self, order) -> Dict[str, Any]:
        """
        Create an electronic invoice for an order.

        Args:
            order: Order with ``invoice_data`` and products

        Returns:
            The created document as returned by the accounting service

        Raises:
            ExternalServiceException: If the service rejects or cannot be reached
            ValidationException: If the order lacks billing data
        """
        pass

    @abstractmethod
    def register_collection(self, document_id: str, payment: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a payment against an invoice document.

        Args:
            document_id: Accounting document id of the invoice
            payment: ``forma_cobro``, ``monto``, ``fecha`` and optional
                ``numero_comprobante``, ``cuenta_bancaria_id``, ``tipo_ping``,
                ``numero_tarjeta``
        """
        pass

    @abstractmethod
    def get_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Search the product catalogue (``filtro``, ``codigo_barra``, ``categoria_id``)."""
        pass

    @abstractmethod
    def get_person(self, query: str) -> List[Dict[str, Any]]:
        """Find customers by identification number or name."""
        pass

    @abstractmethod
    def create_person(self, person_data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a customer record."""
        pass

    @abstractmethod
    def get_documents(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """List sales documents (``fecha_emision``, ``fecha_inicial``, ``fecha_final``, ...)."""
        pass


class ContificoAccountingAdapter(AccountingAdapterInterface):
    """HTTP client for the Contifico REST API."""

    def __init__(self, config: Dict[str, Any] = None):
        self.config = dict(config or settings.ACCOUNTING)
        self.base_url = self.config['BASE_URL'].rstrip('/')
        self.timeout = self.config['TIMEOUT']

        if not self.config['API_KEY'] or not self.config['POS_TOKEN']:
            logger.warning("Accounting credentials are not configured")

    def _request(self, method: str, path: str, params: Dict[str, Any] = None, payload: Any = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = requests.request(
                method,
                url,
                params=params,
                json=payload,
                headers={
                    'Authorization': self.config['API_KEY'],
                    'Content-Type': 'application/json',
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            body = _response_body(e.response)
            logger.error(f"Accounting service rejected {method} {path}: {e.response.status_code} {body}")
            raise ExternalServiceException(
                f"Accounting service returned {e.response.status_code}",
                {'status_code': e.response.status_code, 'response': body}
            )
        except requests.RequestException as e:
            logger.error(f"Accounting service unreachable for {method} {path}: {e}")
            raise ExternalServiceException(f"Accounting service unreachable: {e}")

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceException(
                f"Accounting service returned a non-JSON body for {method} {path}",
                {'response': response.text[:500]}
            )

    def create_invoice(self, order) -> Dict[str, Any]:
        payload = build_invoice_payload(order, self.config)
        logger.info(f"Sending invoice {payload['documento']} for order {order.id}")
        return self._request('POST', '/documento/', payload=payload)

    def register_collection(self, document_id: str, payment: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Registering collection for document {document_id}")
        return self._request('POST', f'/documento/{document_id}/cobro/', payload=payment)

    def get_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = {
            key: value for key, value in (filters or {}).items()
            if key in ('filtro', 'codigo_barra', 'categoria_id') and value
        }
        return _as_list(self._request('GET', '/producto/', params=params))

    def get_person(self, query: str) -> List[Dict[str, Any]]:
        params = {'identificacion': query} if query.isdigit() else {'filtro': query}
        return _as_list(self._request('GET', '/persona/', params=params))

    def create_person(self, person_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {'tipo': 'N', 'es_cliente': True, **person_data}
        return self._request('POST', '/persona/', params={'pos': self.config['POS_TOKEN']}, payload=payload)

    def get_documents(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return _as_list(self._request('GET', '/documento/', params=filters or {}))


class MockAccountingAdapter(AccountingAdapterInterface):
    """
    Deterministic mock implementation for testing and development.

    Keeps created invoices, collections and customers in memory; created
    invoices show up in ``get_documents`` for their issue date.
    """

    def __init__(self, config: Dict[str, Any] = None):
        self.config = dict(config or settings.ACCOUNTING)

        # Mock catalogue - deterministic for testing
        self.products = [
            {'id': 'PROD-TARTA', 'codigo': 'TAR-001', 'nombre': 'Tarta de Chocolate', 'pvp1': '25.00'},
            {'id': 'PROD-PAN', 'codigo': 'PAN-001', 'nombre': 'Pan de Yuca', 'pvp1': '0.50'},
            {'id': 'PROD-CHEESE', 'codigo': 'CHE-001', 'nombre': 'Cheesecake', 'pvp1': '30.00'},
        ]
        self.persons = {}  # ruc -> person
        self.documents = []
        self.collections = []

    def create_invoice(self, order) -> Dict[str, Any]:
        payload = build_invoice_payload(order, self.config)
        document = {
            'id': f"DOC-{payload['documento']}",
            'documento': payload['documento'],
            'fecha_emision': payload['fecha_emision'],
            'tipo_documento': 'FAC',
            'estado': 'P',
            'total': f"{payload['total']:.2f}",
            'cliente': payload['cliente'],
        }
        self.documents.append(document)
        return document

    def register_collection(self, document_id: str, payment: Dict[str, Any]) -> Dict[str, Any]:
        if not any(document['id'] == document_id for document in self.documents):
            raise ExternalServiceException(
                f"Document {document_id} does not exist",
                {'status_code': 404, 'response': {'mensaje': 'Documento no encontrado'}}
            )

        collection = {'id': f"COB-{len(self.collections) + 1}", 'documento_id': document_id, **payment}
        self.collections.append(collection)
        return collection

    def get_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        text = (filters or {}).get('filtro', '').lower()
        return [product for product in self.products if text in product['nombre'].lower()]

    def get_person(self, query: str) -> List[Dict[str, Any]]:
        text = query.lower()
        return [
            person for ruc, person in self.persons.items()
            if ruc == query or text in person.get('razon_social', '').lower()
        ]

    def create_person(self, person_data: Dict[str, Any]) -> Dict[str, Any]:
        person = {'id': f"PER-{person_data['ruc']}", **person_data}
        self.persons[person_data['ruc']] = person
        return person

    def get_documents(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        issued = (filters or {}).get('fecha_emision')
        if issued:
            return [document for document in self.documents if document['fecha_emision'] == issued]
        return list(self.documents)


def _response_body(response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _as_list(data) -> List[Dict[str, Any]]:
    return data if isinstance(data, list) else []


# Global adapter instance, built from settings on first use
accounting_adapter = None


def get_accounting_adapter() -> AccountingAdapterInterface:
    """
    Factory function to get the current accounting adapter.

    ``settings.ACCOUNTING['ADAPTER']`` selects the implementation:
    ``"contifico"`` for the real API, ``"mock"`` for the in-memory one.
    """
    global accounting_adapter
    if accounting_adapter is None:
        if settings.ACCOUNTING.get('ADAPTER') == 'mock':
            accounting_adapter = MockAccountingAdapter()
        else:
            accounting_adapter = ContificoAccountingAdapter()
    return accounting_adapter


def switch_to_mock_adapter() -> MockAccountingAdapter:
    """Switch to a fresh mock adapter for testing."""
    global accounting_adapter
    accounting_adapter = MockAccountingAdapter()
    return accounting_adapter


def switch_to_real_adapter(real_adapter: AccountingAdapterInterface = None):
    """
    Switch to a real accounting adapter implementation.

    Args:
        real_adapter: Implementation to use; defaults to the Contifico client
    """
    global accounting_adapter
    accounting_adapter = real_adapter or ContificoAccountingAdapter()
