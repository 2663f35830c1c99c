"""
Custom exceptions for the finance ledger.
"""
from rest_framework import status

from core_backend.exceptions import DomainError


class LedgerError(DomainError):
    """Ledger operation failed."""
    code = "LEDGER_ERROR"


class LedgerValidationError(LedgerError):
    """Ledger entry data is invalid."""
    code = "LEDGER_INVALID"

    def __init__(self, errors, message=None):
        self.errors = errors
        super().__init__(message or "Ledger entry data is invalid.", details=errors)


class LedgerEntryLockedError(LedgerError):
    """Raised when deleting an entry that mirrors a recorded sale."""
    code = "LEDGER_ENTRY_LOCKED"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, entry, message=None):
        self.entry = entry
        super().__init__(
            message or "Sale entries follow their order and cannot be deleted.",
            details={"entry_id": entry.pk, "order_id": str(entry.order_id)},
        )
