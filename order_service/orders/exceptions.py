"""
Errors raised by order creation and listing.

Every error carries a human readable `message` and a machine readable `code`
so the HTTP layer can render it without knowing the concrete type.
"""
from typing import Optional


class OrderServiceError(Exception):
    """Base exception for the order service."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ProductNotFoundError(OrderServiceError):
    """The product service has no product with this id."""

    def __init__(self, product_id):
        super().__init__(
            message=f"Product with id '{product_id}' not found",
            code="PRODUCT_NOT_FOUND",
        )
        self.product_id = product_id


class InsufficientStockError(OrderServiceError):
    """Raised when stock is insufficient."""

    def __init__(self, product_id, requested: int, available: int):
        super().__init__(
            message=f"Insufficient stock for product '{product_id}': requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class UpstreamError(OrderServiceError):
    """The product service answered with a failure status or an unreadable body."""

    def __init__(self, status_code: int, detail: str = ""):
        message = f"Product service returned status {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message=message, code="UPSTREAM_ERROR")
        self.status_code = status_code


class ConnectivityError(OrderServiceError):
    """No usable response from the product service (refused, timed out, undecodable body)."""

    def __init__(self, detail: str):
        super().__init__(
            message=f"Cannot reach product service: {detail}",
            code="UPSTREAM_UNREACHABLE",
        )


class StorageError(OrderServiceError):
    """Persisting an order failed. The original exception is kept as `cause`."""

    def __init__(self, cause: Exception):
        super().__init__(
            message=f"Failed to save order: {cause}",
            code="STORAGE_ERROR",
        )
        self.cause = cause
