"""
Custom exceptions for customers.
"""
from core_backend.exceptions import DomainError


class CustomerValidationError(DomainError):
    """Customer data is invalid."""
    code = "CUSTOMER_INVALID"

    def __init__(self, errors, message=None):
        self.errors = errors
        super().__init__(message or "Customer data is invalid.", details=errors)
