"""
Response helpers shared by the bakery API views.
"""

from rest_framework import status
from rest_framework.response import Response

from ..exceptions import BusinessException, ValidationException


def success_response(data, status_code=status.HTTP_200_OK) -> Response:
    return Response({
        'success': True,
        'data': data
    }, status=status_code)


def error_response(exc: BusinessException) -> Response:
    """Translate a business exception into the API error envelope."""
    return Response({
        'success': False,
        'error': {
            'code': exc.code,
            'message': exc.message,
            'details': exc.details,
        }
    }, status=exc.http_status)


def validate_payload(serializer_class, data, **kwargs):
    """
    Run a serializer over request data.

    Returns:
        The validated data

    Raises:
        ValidationException: With the serializer errors as details
    """
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise ValidationException("Invalid request data", serializer.errors)
    return serializer.validated_data


def actor_name(request) -> str:
    """Name recorded in audit entries for the requesting user."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return ""
    return user.get_username()
