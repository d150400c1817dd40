"""Domain errors raised by the reservation/payment workflow.

Each error carries the HTTP status it maps to; ``app.api.errors`` turns them
into the standard ``{success, message, error}`` envelope.
"""
from __future__ import annotations


class SafariaError(Exception):
    status_code = 500

    def __init__(self, message: str, *, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(SafariaError):
    """Missing or malformed input. Raised before any mutation."""
    status_code = 400

    def __init__(self, message: str, *, missing: list[str] | None = None,
                 invalid: list[str] | None = None, detail: str | None = None):
        super().__init__(message, detail=detail)
        self.missing = missing or []
        self.invalid = invalid or []


class NotFoundError(SafariaError):
    status_code = 404


class ConflictError(SafariaError):
    """Identifier collisions kept happening after every retry."""
    status_code = 409


class RenderError(SafariaError):
    status_code = 500


class StorageError(SafariaError):
    """Database, upload or download failure."""
    status_code = 500


class ReceiptPendingError(StorageError):
    """The payment exists but its receipt has not been stored yet."""
    status_code = 503
