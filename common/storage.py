"""
In-memory stores for orders and catalog products.

Both stores serialize every access behind a single lock and copy records in
and out, so callers never hold a reference into the store's state.
"""

from __future__ import annotations

import threading
from typing import Iterable

from common.errors import OrderNotFound
from common.models import Order, Product


class OrderStore:
    """
    Order id -> Order map with a monotonically increasing id counter.

    >>> from decimal import Decimal
    >>> from common.timeutils import utc_now
    >>> store = OrderStore()
    >>> o = Order(items=[], value=Decimal("0"), creation_date_time=utc_now())
    >>> store.create(o), store.create(o)
    (1, 2)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: dict[int, Order] = {}
        self._next_id = 1

    def create(self, order: Order) -> int:
        """Assign the next id to ``order``, persist a copy and return the id."""
        with self._lock:
            order_id = self._next_id
            self._next_id += 1
            order.id = order_id
            self._orders[order_id] = order.model_copy(deep=True)
        return order_id

    def get(self, order_id: int) -> Order:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            return order.model_copy(deep=True)

    def list(self) -> list[Order]:
        with self._lock:
            return [o.model_copy(deep=True) for o in self._orders.values()]

    def save(self, order: Order) -> None:
        """Overwrite an existing order. Ids are only ever assigned by create()."""
        with self._lock:
            if order.id not in self._orders:
                raise OrderNotFound(order.id)
            self._orders[order.id] = order.model_copy(deep=True)


class VersionMismatch(Exception):
    def __init__(self, product_id: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Product {product_id} changed: expected version {expected}, found {actual}"
        )
        self.product_id = product_id


class UnknownProductId(KeyError):
    def __init__(self, product_id: int) -> None:
        super().__init__(product_id)
        self.product_id = product_id


class ProductStore:
    """
    Catalog owned by the product service. Every write bumps the product's version.
    """

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._lock = threading.Lock()
        self._products: dict[int, Product] = {}
        for p in products:
            self._products[p.id] = p.model_copy(update={"version": p.version or 1})

    def list(self) -> list[Product]:
        with self._lock:
            return [p.model_copy() for p in self._products.values()]

    def get(self, product_id: int) -> Product:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise UnknownProductId(product_id)
            return product.model_copy()

    def update_inventory(self, updates: Iterable[Product]) -> list[Product]:
        """
        Overwrite inventory_count for each record, all-or-nothing.

        Records carrying a version must match the stored version; records
        without one overwrite unconditionally.
        """
        updates = list(updates)
        with self._lock:
            for u in updates:
                current = self._products.get(u.id)
                if current is None:
                    raise UnknownProductId(u.id)
                if u.version is not None and u.version != current.version:
                    raise VersionMismatch(u.id, u.version, current.version)
            for u in updates:
                current = self._products[u.id]
                self._products[u.id] = current.model_copy(
                    update={
                        "inventory_count": u.inventory_count,
                        "version": current.version + 1,
                    }
                )
            return [self._products[u.id].model_copy() for u in updates]
