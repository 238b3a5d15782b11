"""
Order serializers for the bakery backend.
"""

from rest_framework import serializers

from ..models import Order, OrderProduct, Dispatch, DispatchItem, DeliveryType, Branch


class OrderProductSerializer(serializers.ModelSerializer):
    """Serializer for OrderProduct model."""

    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    remaining_to_produce = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderProduct
        fields = [
            'id', 'name', 'quantity', 'price', 'accounting_product_id', 'position',
            'produced', 'production_status', 'production_notes',
            'line_total', 'remaining_to_produce',
        ]
        read_only_fields = fields


class DispatchItemSerializer(serializers.ModelSerializer):
    line_item_id = serializers.UUIDField(source='order_product_id', read_only=True)

    class Meta:
        model = DispatchItem
        fields = ['id', 'line_item_id', 'name', 'quantity_sent']
        read_only_fields = fields


class DispatchSerializer(serializers.ModelSerializer):
    """Serializer for Dispatch records with their items."""

    items = DispatchItemSerializer(many=True, read_only=True)
    is_editable = serializers.SerializerMethodField()

    class Meta:
        model = Dispatch
        fields = [
            'id', 'destination', 'notes', 'reported_by', 'reported_at',
            'modified_at', 'is_editable', 'items',
        ]
        read_only_fields = fields

    def get_is_editable(self, obj):
        return obj.is_editable()


class OrderListSerializer(serializers.ModelSerializer):
    """Serializer for order listing."""

    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'customer_name', 'customer_phone', 'delivery_date', 'delivery_time',
            'delivery_type', 'branch', 'total_value', 'production_stage',
            'dispatch_status', 'invoice_status', 'collection_status',
            'products_count', 'version', 'created_at',
        ]

    def get_products_count(self, obj):
        return len(obj.products.all())


class OrderDetailSerializer(serializers.ModelSerializer):
    """Serializer for order details."""

    products = OrderProductSerializer(many=True, read_only=True)
    dispatches = DispatchSerializer(many=True, read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_date', 'delivery_date', 'delivery_time',
            'customer_name', 'customer_phone', 'sales_channel', 'responsible',
            'delivery_type', 'branch', 'delivery_address', 'google_maps_link',
            'total_value', 'delivery_value', 'payment_method',
            'invoice_needed', 'invoice_data', 'invoice_status', 'invoice_document', 'invoice_info',
            'invoice_error',
            'payment_details', 'collection_status', 'comments',
            'production_stage', 'production_notes', 'dispatch_status', 'is_overdue',
            'version', 'created_at', 'updated_at',
            'products', 'dispatches',
        ]
        read_only_fields = fields


class InvoiceDataSerializer(serializers.Serializer):
    ruc = serializers.CharField(max_length=13)
    business_name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)


class OrderProductInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    accounting_product_id = serializers.CharField(max_length=100, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    """
    Serializer for creating orders.

    Field types are checked here; business rules are enforced by
    ``OrderService.create_order``.
    """

    order_date = serializers.DateTimeField(required=False)
    delivery_date = serializers.DateTimeField(required=False)
    delivery_time = serializers.CharField(max_length=50, required=False, allow_blank=True)
    customer_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    sales_channel = serializers.CharField(max_length=50, required=False, allow_blank=True)
    responsible = serializers.CharField(max_length=50, required=False, allow_blank=True)
    delivery_type = serializers.CharField(max_length=10, required=False, default=DeliveryType.PICKUP)
    branch = serializers.ChoiceField(choices=Branch.choices, required=False, allow_blank=True)
    delivery_address = serializers.CharField(required=False, allow_blank=True)
    google_maps_link = serializers.URLField(max_length=500, required=False, allow_blank=True)
    total_value = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    delivery_value = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True)
    invoice_needed = serializers.BooleanField(required=False, default=False)
    invoice_data = InvoiceDataSerializer(required=False)
    comments = serializers.CharField(required=False, allow_blank=True)
    products = OrderProductInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if attrs.get('invoice_needed') and not attrs.get('invoice_data'):
            raise serializers.ValidationError({'invoice_data': "Invoice data is required when an invoice is needed"})
        return attrs


class InvoiceUpdateSerializer(serializers.Serializer):
    invoice_needed = serializers.BooleanField(required=False)
    invoice_data = InvoiceDataSerializer(required=False)


class CollectionSerializer(serializers.Serializer):
    """Payment registered against an issued invoice."""

    forma_cobro = serializers.CharField(max_length=10)
    monto = serializers.DecimalField(max_digits=12, decimal_places=2)
    fecha = serializers.CharField(max_length=10, help_text="DD/MM/YYYY")
    numero_comprobante = serializers.CharField(required=False, allow_blank=True)
    cuenta_bancaria_id = serializers.CharField(required=False, allow_blank=True)
    tipo_ping = serializers.CharField(required=False, allow_blank=True)
    numero_tarjeta = serializers.CharField(required=False, allow_blank=True)

    def validate_monto(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0")
        return value


class BatchInvoiceSerializer(serializers.Serializer):
    batch_size = serializers.IntegerField(required=False, min_value=1, max_value=100)
