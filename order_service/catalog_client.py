"""
HTTP client for the product service catalog.

Two calls only: fetch the full catalog snapshot, and write back full product
records with new absolute inventory counts. Transport failures, timeouts and
non-200 responses become typed errors. Nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Sequence

import httpx
from pydantic import ValidationError

from common.errors import CatalogUnavailable, CatalogUpdateFailed, CatalogVersionConflict
from common.models import Product, ProductCatalog

logger = logging.getLogger(__name__)


class CatalogClient:
    def __init__(
        self,
        base_url: str,
        timeout_ms: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000.0
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def fetch_catalog(self) -> list[Product]:
        async with self._client() as client:
            try:
                resp = await client.get("/products")
            except httpx.TimeoutException as e:
                logger.warning("Catalog fetch timed out: %s", e)
                raise CatalogUnavailable("Catalog request timed out") from e
            except httpx.RequestError as e:
                logger.warning("Catalog fetch failed: %s", e)
                raise CatalogUnavailable(f"Failed to get product catalog: {e}") from e

        if resp.status_code != 200:
            raise CatalogUnavailable(
                f"Failed to get product catalog: status {resp.status_code}"
            )
        try:
            catalog = ProductCatalog.model_validate_json(resp.content)
        except ValidationError as e:
            raise CatalogUnavailable(f"Malformed product catalog: {e}") from e
        return catalog.products

    async def apply_inventory_deltas(self, products: Sequence[Product]) -> None:
        """
        Overwrite inventory counts for ``products``.

        Counts are absolute; the caller computes them. A ``version`` on a
        record makes the write conditional on the catalog still holding that
        version.
        """
        payload = [p.model_dump(mode="json", exclude_none=True) for p in products]
        async with self._client() as client:
            try:
                resp = await client.patch("/products", json=payload)
            except httpx.TimeoutException as e:
                logger.warning("Catalog update timed out: %s", e)
                raise CatalogUpdateFailed("Update product request timed out") from e
            except httpx.RequestError as e:
                logger.warning("Catalog update failed: %s", e)
                raise CatalogUpdateFailed(f"Failed to do update product request: {e}") from e

        if resp.status_code == 409:
            raise CatalogVersionConflict(f"Catalog changed since snapshot: {resp.text}")
        if resp.status_code != 200:
            raise CatalogUpdateFailed(
                f"Update product request failed with status: {resp.status_code}"
            )
