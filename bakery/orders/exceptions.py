"""
Custom exceptions for the bakery order backend.
"""

from typing import Dict, Any


class BusinessException(Exception):
    """Base exception for business logic errors."""

    http_status = 400

    def __init__(self, message: str, code: str = "BUSINESS_ERROR", details: Dict[str, Any] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(BusinessException):
    """Raised when an order, line item or dispatch record does not exist."""

    http_status = 404

    def __init__(self, entity_type: str, entity_id):
        message = f"{entity_type} {entity_id} not found"
        super().__init__(message, "NOT_FOUND", {
            "entity_type": entity_type,
            "entity_id": str(entity_id),
        })


class ValidationException(BusinessException):
    """Raised when data validation fails."""

    def __init__(self, message: str, field_errors: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", field_errors or {})


class InvalidStateException(BusinessException):
    """Raised when an operation is not allowed in the order's current state."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "INVALID_STATE", details)


class EditWindowExpiredException(BusinessException):
    """Raised when a dispatch record is edited after its edit window closed."""

    http_status = 409

    def __init__(self, dispatch_id, reported_at, window_minutes: int):
        message = (
            f"Dispatch {dispatch_id} can no longer be edited: "
            f"edits are allowed for {window_minutes} minutes after it was reported"
        )
        super().__init__(message, "EDIT_WINDOW_EXPIRED", {
            "dispatch_id": str(dispatch_id),
            "reported_at": reported_at.isoformat(),
            "window_minutes": window_minutes,
        })


class ConcurrentModificationException(BusinessException):
    """Raised when a caller writes against a stale order version."""

    http_status = 409

    def __init__(self, order_id, expected_version: int, current_version: int):
        message = (
            f"Order {order_id} was modified concurrently: "
            f"expected version {expected_version}, found {current_version}"
        )
        super().__init__(message, "CONCURRENT_MODIFICATION", {
            "order_id": str(order_id),
            "expected_version": expected_version,
            "current_version": current_version,
        })


class ExternalServiceException(BusinessException):
    """Raised when the accounting service call fails."""

    http_status = 502

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "EXTERNAL_SERVICE_ERROR", details)
