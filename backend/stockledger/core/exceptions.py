"""
Error taxonomy for StockLedger

Every error the engine surfaces carries a stable ``kind``, the HTTP status
the API maps it to, and whether the caller may simply retry.
"""
from typing import Optional


class StockLedgerError(Exception):
    """Base class for errors surfaced to API callers"""

    kind = "error"
    status_code = 500
    retryable = False

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.__class__.__doc__ or self.kind
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "status": "error",
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }


class NotFound(StockLedgerError):
    """Referenced entity does not exist"""

    kind = "not_found"
    status_code = 404


class InvalidQuantity(StockLedgerError):
    """Quantity sold must be a positive integer"""

    kind = "invalid_quantity"
    status_code = 400


class InsufficientStock(StockLedgerError):
    """Not enough stock to complete the sale"""

    kind = "insufficient_stock"
    status_code = 409

    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"available {available}, requested {requested}"
        )


class AlreadyCancelled(StockLedgerError):
    """Sale has already been cancelled"""

    kind = "already_cancelled"
    status_code = 400

    def __init__(self, sale_id: str):
        self.sale_id = sale_id
        super().__init__(f"Sale {sale_id} is already cancelled")


class TransactionConflict(StockLedgerError):
    """Concurrent updates kept conflicting; retries exhausted"""

    kind = "transaction_conflict"
    status_code = 409
    retryable = True


class TransactionTimeout(StockLedgerError):
    """Transaction did not commit before its deadline"""

    kind = "transaction_timeout"
    status_code = 504
    retryable = True


class StorageUnavailable(StockLedgerError):
    """Storage backend could not be reached"""

    kind = "storage_unavailable"
    status_code = 503
    retryable = True


class ConflictDetected(Exception):
    """
    Raised inside a storage adapter when a commit loses an optimistic
    concurrency race. Never leaves the adapter: it is either retried or
    turned into TransactionConflict.
    """
