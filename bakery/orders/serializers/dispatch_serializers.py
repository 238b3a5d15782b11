"""
Dispatch serializers for the bakery backend.
"""

from rest_framework import serializers


class DispatchProgressItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)


class DispatchProgressSerializer(serializers.Serializer):
    """Goods sent to a branch or out for delivery, by product name."""

    destination = serializers.CharField(max_length=255)
    items = DispatchProgressItemSerializer(many=True, allow_empty=False)
    reported_by = serializers.CharField(max_length=150, required=False, allow_blank=True)


class DispatchItemInputSerializer(serializers.Serializer):
    line_item_id = serializers.UUIDField()
    quantity_sent = serializers.DecimalField(max_digits=12, decimal_places=2)


class DispatchCreateSerializer(serializers.Serializer):
    """Dispatch record reported against one order."""

    destination = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True)
    reported_by = serializers.CharField(max_length=150, required=False, allow_blank=True)
    items = DispatchItemInputSerializer(many=True, allow_empty=False)


class DispatchUpdateSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    items = DispatchItemInputSerializer(many=True, required=False, allow_empty=False)
    expected_version = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if 'notes' not in attrs and 'items' not in attrs:
            raise serializers.ValidationError("At least one field (items or notes) is required to update")
        return attrs
