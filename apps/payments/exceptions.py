"""
Domain exceptions for payments app.

This module defines the exception hierarchy for payment-related errors.
Views translate them into HTTP responses.
"""


class PaymentServiceError(Exception):
    """Base exception for payment service errors."""
    pass


class PaymentNotFoundError(PaymentServiceError):
    """Raised when a payment does not exist."""
    pass


class InvalidPaymentError(PaymentServiceError):
    """Raised when payment data breaks a business rule."""
    pass


class InvalidStateTransitionError(PaymentServiceError):
    """Raised when a status change is not allowed from the current status."""
    pass


class PaymentPermissionError(PaymentServiceError):
    """Raised when a user is neither a participant nor a group admin."""
    pass
