"""
Building blocks shared by the order and product services.

Domain models, the error taxonomy, the in-memory stores and logging setup.
Nothing here imports FastAPI.
"""

from common.errors import (
    CatalogUnavailable,
    CatalogUpdateFailed,
    CatalogVersionConflict,
    IllegalTransition,
    InsufficientInventory,
    InvalidStatus,
    InvariantViolation,
    MalformedRequest,
    NotFound,
    OrderError,
    OrderNotFound,
    UnknownProduct,
)
from common.logging import setup_logging
from common.models import (
    Order,
    OrderCreateRequest,
    OrderItem,
    OrderItemRequest,
    OrderStatus,
    OrderUpdateRequest,
    Product,
    ProductCatalog,
)
from common.storage import OrderStore, ProductStore
from common.timeutils import as_utc, utc_now

__all__ = [
    "setup_logging",
    "Product",
    "ProductCatalog",
    "OrderStatus",
    "OrderItemRequest",
    "OrderCreateRequest",
    "OrderUpdateRequest",
    "OrderItem",
    "Order",
    "OrderError",
    "MalformedRequest",
    "UnknownProduct",
    "NotFound",
    "OrderNotFound",
    "InsufficientInventory",
    "InvalidStatus",
    "IllegalTransition",
    "InvariantViolation",
    "CatalogUnavailable",
    "CatalogUpdateFailed",
    "CatalogVersionConflict",
    "OrderStore",
    "ProductStore",
    "utc_now",
    "as_utc",
]
