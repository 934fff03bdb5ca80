"""
Order service error taxonomy.

Each error carries the HTTP status it is surfaced with; the order API maps
any OrderError to ``{"detail": str(exc)}`` with that status.
"""

from __future__ import annotations


class OrderError(Exception):
    """Base class for failures of an order operation."""

    status_code = 500


class MalformedRequest(OrderError):
    """Client-caused: bad body, bad identifiers."""

    status_code = 400


class UnknownProduct(MalformedRequest):
    """An order line references a product the catalog does not have."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class NotFound(OrderError):
    status_code = 404


class OrderNotFound(NotFound):
    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class InsufficientInventory(OrderError):
    """Requested quantity exceeds the snapshot's inventory count."""

    status_code = 409

    def __init__(self, product_name: str, requested: int, available: int) -> None:
        super().__init__(f"There is not enough of {product_name!r} to fulfill this order")
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InvalidStatus(OrderError):
    """Target status is not one an order can be moved to."""

    status_code = 400

    def __init__(self, status: str, message: str | None = None) -> None:
        super().__init__(message or f"Invalid order status: {status}")
        self.status = status


class IllegalTransition(InvalidStatus):
    """Target status is valid but not reachable from the current one."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(target, f"Cannot transition order from {current} to {target}")
        self.current = current


class InvariantViolation(OrderError):
    """Reconciliation would drive an inventory count negative."""


class CatalogUnavailable(OrderError):
    """The catalog snapshot could not be fetched."""


class CatalogUpdateFailed(OrderError):
    """The inventory write-back was not acknowledged by the catalog."""


class CatalogVersionConflict(CatalogUpdateFailed):
    """The catalog rejected the write-back because a record changed since the snapshot."""
