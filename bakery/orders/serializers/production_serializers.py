"""
Production serializers for the bakery backend.
"""

from rest_framework import serializers

from ..models import Order, ProductionStage, ProductionStatus
from .order_serializers import OrderProductSerializer, DispatchSerializer


class ProductionTaskSerializer(serializers.ModelSerializer):
    """An order as shown on the production board."""

    products = OrderProductSerializer(many=True, read_only=True)
    dispatches = DispatchSerializer(many=True, read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'customer_name', 'delivery_date', 'delivery_time', 'delivery_type',
            'branch', 'comments', 'production_stage', 'production_notes',
            'dispatch_status', 'is_overdue', 'version', 'updated_at',
            'products', 'dispatches',
        ]
        read_only_fields = fields


class ProductionTaskUpdateSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=ProductionStage.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    expected_version = serializers.IntegerField(required=False, min_value=1)


class ProductionRegisterSerializer(serializers.Serializer):
    """Quantity of a product that just came out of the kitchen."""

    product_name = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)


class ProductionBatchItemSerializer(ProductionTaskUpdateSerializer):
    id = serializers.CharField()
    # Unknown stages fail per item in ProductionService.batch_update_tasks.
    stage = serializers.CharField(required=False, allow_blank=True)


class ProductionBatchSerializer(serializers.Serializer):
    updates = ProductionBatchItemSerializer(many=True, allow_empty=False)


class ProductStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductionStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
