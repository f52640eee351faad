"""Error taxonomy shared by the stock services and the JSON API."""
from __future__ import annotations

from ..utils.error_messages import ErrorMessages as EM


class PharmacyStockError(RuntimeError):
    """Base exception for every failure surfaced to a caller."""

    status_code = 400
    field: str | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def errors(self) -> dict:
        if self.field:
            return {self.field: [self.message]}
        return {}


class ValidationError(PharmacyStockError):
    """Malformed input; the operation was never attempted."""

    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InsufficientStockError(PharmacyStockError):
    """A distribution would drive a lot below zero."""

    status_code = 409
    field = 'quantity'

    def __init__(self, lot_id: int, requested: int, available: int):
        super().__init__(EM.INSUFFICIENT_STOCK.format(available=available))
        self.lot_id = lot_id
        self.requested = requested
        self.available = available


class NotFoundError(PharmacyStockError):
    """A referenced barcode, lot or service no longer exists."""

    status_code = 404

    def __init__(self, resource: str, field: str, message: str):
        super().__init__(message)
        self.resource = resource
        self.field = field


class RemoteServiceError(PharmacyStockError):
    """The suggestion service failed or answered with something unusable."""

    status_code = 502


class StoreTransactionError(PharmacyStockError):
    """The database could not complete the transaction."""

    status_code = 503
