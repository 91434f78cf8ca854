"""Domain error types.

Each error carries a stable machine-readable ``kind`` that the API layer puts
in the ``error`` field of the response body.
"""
from typing import Optional


class DomainError(Exception):
    """Base domain error."""

    kind = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Malformed or missing request field. Never retried."""

    kind = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class AuthError(DomainError):
    """Missing or wrong bearer credential."""

    kind = "unauthorized"

    def __init__(self, message: str = "Invalid or missing API key"):
        super().__init__(message)


class StoreBusyError(DomainError):
    """Transient store contention (database busy/locked, pool exhausted)."""

    kind = "store_busy"

    def __init__(self, message: str = "Store is busy, try again"):
        super().__init__(message)


class StoreFatalError(DomainError):
    """Schema or connectivity failure. Aborts the current request only."""

    kind = "internal_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
