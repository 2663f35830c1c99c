"""
Project-wide API exception handling.

Domain services raise subclasses of DomainError; DRF's exception handler is
extended here so those errors reach the client as
``{"error": ..., "code": ...}`` bodies with the status the error declares,
instead of surfacing as 500s.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """
    Base class for business-rule failures raised by the service layer.

    Subclasses set ``code`` (a stable machine-readable identifier) and
    ``http_status``. ``details`` carries optional structured context such as
    a field -> message mapping.
    """
    code = "DOMAIN_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, details=None):
        self.message = message or (self.__class__.__doc__ or self.code).strip().splitlines()[0]
        self.details = details or {}
        super().__init__(self.message)

    def to_response_data(self):
        data = {"error": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


def domain_exception_handler(exc, context):
    """
    Custom exception handler that understands DomainError and Django's
    ValidationError in addition to DRF's own exceptions.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    request = context.get("request")
    path = request.path if request is not None else ""

    if isinstance(exc, DomainError):
        logger.info(f"{exc.__class__.__name__} on {path}: {exc.message}")
        return Response(exc.to_response_data(), status=exc.http_status)

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
        return Response(
            {"error": "Validation failed.", "code": "VALIDATION_ERROR", "details": details},
            status=status.HTTP_400_BAD_REQUEST,
        )

    return None
