"""
Custom exceptions for cash sessions and sale settlement.
"""
from rest_framework import status

from core_backend.exceptions import DomainError


class SettlementError(DomainError):
    """Cash session operation failed."""
    code = "SETTLEMENT_ERROR"


class InvalidBalanceError(SettlementError):
    """Raised when an opening or counted balance is negative."""
    code = "INVALID_BALANCE"


class SessionNotOpenError(SettlementError):
    """Raised when an operation needs an open session."""
    code = "SESSION_NOT_OPEN"

    def __init__(self, session, message=None):
        self.session = session
        super().__init__(
            message or f"Cash session {session.pk} is not open.",
            details={"session_id": session.pk, "status": session.status},
        )


class SessionNotClosedError(SettlementError):
    """Raised when verifying a session that is still open."""
    code = "SESSION_NOT_CLOSED"

    def __init__(self, session, message=None):
        self.session = session
        super().__init__(
            message or f"Cash session {session.pk} must be closed first.",
            details={"session_id": session.pk, "status": session.status},
        )


class ApproverRequiredError(SettlementError):
    """Raised when a non-manager tries to verify or force-close a session."""
    code = "APPROVER_REQUIRED"
    http_status = status.HTTP_403_FORBIDDEN


class SaleProcessingError(SettlementError):
    """
    Raised when a sale could not be recorded. Nothing of the sale is
    persisted when this is raised.
    """
    code = "SALE_FAILED"
