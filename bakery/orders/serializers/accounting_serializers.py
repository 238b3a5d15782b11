"""
Serializers for the accounting service passthrough endpoints.
"""

from rest_framework import serializers


class PersonSerializer(serializers.Serializer):
    """Minimum customer data the accounting service needs to issue an invoice."""

    ruc = serializers.CharField(max_length=13)
    razon_social = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    direccion = serializers.CharField()
    telefonos = serializers.CharField(max_length=50)
    cedula = serializers.CharField(max_length=10, required=False, allow_blank=True)
    tipo = serializers.CharField(max_length=1, required=False)


class DocumentFilterSerializer(serializers.Serializer):
    fecha_emision = serializers.CharField(required=False)
    fecha_inicial = serializers.CharField(required=False)
    fecha_final = serializers.CharField(required=False)
    tipo = serializers.CharField(required=False)
    persona_identificacion = serializers.CharField(required=False)
