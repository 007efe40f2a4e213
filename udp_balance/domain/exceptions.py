"""Domain-specific exceptions"""

from typing import Any


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ParseError(DomainException):
    """A transaction record could not be parsed"""

    def __init__(self, record_id: Any, field: str, value: Any, reason: str = "") -> None:
        self.record_id = record_id
        self.field = field
        self.value = value
        message = f"Transaction {record_id!r}: invalid {field} {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidWindowError(DomainException, ValueError):
    """Requested time window is unknown or inverted"""

    pass


class LedgerAPIError(DomainException):
    """Ledger API returned an error or is unavailable"""

    pass
