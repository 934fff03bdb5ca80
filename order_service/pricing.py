"""
Order pricing against a catalog snapshot.

Pure: no I/O, and the snapshot passed in is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from common.errors import InsufficientInventory, UnknownProduct
from common.models import OrderItem, OrderItemRequest, Product


@dataclass(frozen=True)
class DiscountPolicy:
    """Tier discount: ``percent`` off when enough line items are in ``category``."""

    category: str = "Premium"
    threshold: int = 3
    percent: int = 10


@dataclass(frozen=True)
class PricedOrder:
    items: list[OrderItem]
    raw_value: Decimal
    value: Decimal
    discount: int


def price_order(
    items: Sequence[OrderItemRequest],
    catalog: Mapping[int, Product],
    policy: DiscountPolicy = DiscountPolicy(),
) -> PricedOrder:
    """
    Validate ``items`` against ``catalog`` and compute the order value.

    Inventory is checked per product against the snapshot; repeated lines for
    one product are checked against their running total. The discount counts
    qualifying line items, not units.
    """
    priced: list[OrderItem] = []
    requested: dict[int, int] = {}
    raw_value = Decimal("0")
    qualifying = 0

    for item in items:
        product = catalog.get(item.product_id)
        if product is None:
            raise UnknownProduct(item.product_id)

        requested[product.id] = requested.get(product.id, 0) + item.product_qty
        if product.inventory_count < requested[product.id]:
            raise InsufficientInventory(
                product.name, requested[product.id], product.inventory_count
            )

        raw_value += product.price * item.product_qty
        priced.append(
            OrderItem(
                product_id=product.id,
                product_price=product.price,
                product_qty=item.product_qty,
            )
        )
        if product.category == policy.category:
            qualifying += 1

    if qualifying >= policy.threshold:
        discount = policy.percent
        value = raw_value * (Decimal(100 - discount) / Decimal(100))
    else:
        discount = 0
        value = raw_value

    return PricedOrder(items=priced, raw_value=raw_value, value=value, discount=discount)
