"""
Order placement and status updates across the order store and the remote catalog.

Placement flow:

    1. fetch the catalog snapshot
    2. validate and price the order against it
    3. compute new absolute inventory counts
    4. write them back to the catalog
    5. persist the order locally

The remote write happens before the local one. If step 4 fails nothing has
been written locally, so there is nothing to compensate. If the process dies
between 4 and 5 the catalog is decremented for an order that does not exist;
that window is accepted.

The snapshot is not locked across steps 1-4. With the default commit mode two
concurrent placements can both pass step 2 and both write back, overselling.
With optimistic commit every written record carries the snapshot's version,
the catalog rejects stale writes, and the whole flow is retried from step 1
up to ``max_commit_attempts`` times.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Iterable, Mapping, Sequence, TypeVar

from common.errors import CatalogVersionConflict, InvariantViolation
from common.models import (
    Order,
    OrderItem,
    OrderItemRequest,
    OrderStatus,
    OrderUpdateRequest,
    Product,
)
from common.storage import OrderStore
from common.timeutils import utc_now
from order_service.catalog_client import CatalogClient
from order_service.pricing import DiscountPolicy, PricedOrder, price_order
from order_service.state_machine import transition

logger = logging.getLogger(__name__)

T = TypeVar("T")

Snapshot = Mapping[int, Product]


def _quantities(items: Iterable[OrderItem | OrderItemRequest]) -> dict[int, int]:
    """Total quantity per product, in first-seen order."""
    totals: dict[int, int] = {}
    for item in items:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.product_qty
    return totals


class OrderCoordinator:
    def __init__(
        self,
        store: OrderStore,
        catalog: CatalogClient,
        policy: DiscountPolicy = DiscountPolicy(),
        *,
        restock_on_cancel: bool = False,
        optimistic_commit: bool = False,
        max_commit_attempts: int = 3,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.policy = policy
        self.restock_on_cancel = restock_on_cancel
        self.optimistic_commit = optimistic_commit
        self.max_commit_attempts = max(1, max_commit_attempts)
        # Entries live only while some update of that order holds or awaits the lock.
        self._order_locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}

    # -- placement ---------------------------------------------------------

    async def place_order(self, items: Sequence[OrderItemRequest]) -> Order:
        priced = await self._commit(lambda snapshot: self._reserve(items, snapshot))

        order = Order(
            items=priced.items,
            value=priced.value,
            discount=priced.discount,
            status=OrderStatus.PLACED,
            creation_date_time=utc_now(),
        )
        self.store.create(order)
        logger.info(
            "Order %s placed: %d items, value %s, discount %s%%",
            order.id,
            len(order.items),
            order.value,
            order.discount,
        )
        return order

    def _reserve(
        self, items: Sequence[OrderItemRequest], snapshot: Snapshot
    ) -> tuple[list[Product], PricedOrder]:
        priced = price_order(items, snapshot, self.policy)
        records = []
        for product_id, qty in _quantities(priced.items).items():
            product = snapshot[product_id]
            remaining = product.inventory_count - qty
            if remaining < 0:
                raise InvariantViolation(
                    f"Inventory of product {product_id} would become {remaining}"
                )
            records.append(self._record(product, remaining))
        return records, priced

    # -- status updates ----------------------------------------------------

    @asynccontextmanager
    async def _order_lock(self, order_id: int) -> AsyncIterator[None]:
        lock = self._order_locks.setdefault(order_id, asyncio.Lock())
        self._lock_users[order_id] = self._lock_users.get(order_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[order_id] -= 1
            if not self._lock_users[order_id]:
                del self._lock_users[order_id]
                del self._order_locks[order_id]

    async def update_order(self, order_id: int, update: OrderUpdateRequest) -> Order:
        self.store.get(order_id)  # unknown ids fail before a lock is allocated
        async with self._order_lock(order_id):
            order = self.store.get(order_id)
            updated = transition(order, update.status, update.dispatch_date)

            if (
                self.restock_on_cancel
                and updated.status is OrderStatus.CANCELLED
                and order.status is not OrderStatus.CANCELLED
            ):
                await self._commit(lambda snapshot: (self._restock(order, snapshot), None))
                logger.info("Order %s cancelled, inventory restocked", order_id)

            self.store.save(updated)

        if updated.status is not order.status:
            logger.info("Order %s: %s -> %s", order_id, order.status.value, updated.status.value)
        return updated

    def _restock(self, order: Order, snapshot: Snapshot) -> list[Product]:
        records = []
        for product_id, qty in _quantities(order.items).items():
            product = snapshot.get(product_id)
            if product is None:
                logger.warning(
                    "Product %s of order %s no longer in catalog, not restocked",
                    product_id,
                    order.id,
                )
                continue
            records.append(self._record(product, product.inventory_count + qty))
        return records

    def list_orders(self) -> list[Order]:
        return self.store.list()

    # -- catalog write-back ------------------------------------------------

    def _record(self, product: Product, inventory_count: int) -> Product:
        return product.model_copy(
            update={
                "inventory_count": inventory_count,
                "version": product.version if self.optimistic_commit else None,
            }
        )

    async def _commit(self, plan: Callable[[Snapshot], tuple[list[Product], T]]) -> T:
        """
        Fetch a snapshot, let ``plan`` turn it into write-back records, and
        apply them. Only version conflicts are retried, and only in optimistic
        mode.
        """
        attempts = self.max_commit_attempts if self.optimistic_commit else 1
        attempt = 1
        while True:
            products = await self.catalog.fetch_catalog()
            records, result = plan({p.id: p for p in products})
            if not records:
                return result
            try:
                await self.catalog.apply_inventory_deltas(records)
            except CatalogVersionConflict:
                if attempt >= attempts:
                    logger.warning("Catalog commit conflicted %d times, giving up", attempt)
                    raise
                logger.warning(
                    "Catalog changed during commit, retrying (attempt %d/%d)",
                    attempt,
                    attempts,
                )
                attempt += 1
                continue
            return result
