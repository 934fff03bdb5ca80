"""
Catalog and order records plus the request bodies the order API accepts.

Prices are kept as ``Decimal`` and written to JSON as plain numbers. Request
bodies reject unknown keys; an empty ``status`` in an update means no change.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

# Decimal in memory, JSON number on the wire.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------


class Product(BaseModel):
    """Catalog entry owned by the product service."""

    id: int = Field(..., gt=0)
    name: str
    price: Money = Field(..., ge=0)
    inventory_count: int = Field(..., ge=0)
    category: str
    created_at: datetime
    version: int | None = None


class ProductCatalog(BaseModel):
    """Full catalog snapshot as returned by GET /products."""

    products: list[Product]


# -----------------------------------------------------------------------------
# Orders
# -----------------------------------------------------------------------------


class OrderStatus(str, Enum):
    PLACED = "Placed"
    DISPATCHED = "Dispatched"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class OrderItemRequest(BaseModel):
    """Line item as submitted by a client: product and positive quantity."""

    model_config = ConfigDict(extra="forbid")

    product_id: int
    product_qty: int = Field(..., gt=0, description="Quantity must be positive")

    def __str__(self) -> str:
        return f"{self.product_id}:{self.product_qty}"


class OrderCreateRequest(BaseModel):
    """Request to place an order: at least one item."""

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemRequest] = Field(..., min_length=1)


class OrderUpdateRequest(BaseModel):
    """Partial update of an order: target status and/or dispatch date."""

    model_config = ConfigDict(extra="forbid")

    status: str | None = None
    dispatch_date: datetime | None = None

    @field_validator("status")
    @classmethod
    def empty_status_means_no_change(cls, value: str | None) -> str | None:
        return value or None


class OrderItem(BaseModel):
    """Line item with the unit price frozen at placement time."""

    product_id: int
    product_price: Money
    product_qty: int = Field(..., gt=0)

    @property
    def line_total(self) -> Decimal:
        return self.product_price * self.product_qty


class Order(BaseModel):
    """Persisted order. ``id`` is 0 until the order store assigns one."""

    id: int = 0
    items: list[OrderItem]
    value: Money
    discount: int = 0
    status: OrderStatus = OrderStatus.PLACED
    dispatch_date: datetime | None = None
    creation_date_time: datetime

    @property
    def raw_value(self) -> Decimal:
        """Pre-discount value: sum of frozen unit price times quantity."""
        return sum((item.line_total for item in self.items), Decimal("0"))
