"""Test fixtures: a fresh product catalog served in-process, and an order service wired to it."""

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from common import OrderStore, ProductStore
from order_service import app as order_app
from order_service.catalog_client import CatalogClient
from order_service.coordinator import OrderCoordinator
from product_service import app as product_app

PRODUCT_URL = "http://product-service"


@pytest.fixture
def product_store() -> ProductStore:
    return ProductStore(product_app.seed_products())


@pytest.fixture
def product_service(product_store) -> Iterator[httpx.ASGITransport]:
    product_app.app.dependency_overrides[product_app.get_store] = lambda: product_store
    yield httpx.ASGITransport(app=product_app.app)
    product_app.app.dependency_overrides.clear()


@pytest.fixture
def catalog(product_service) -> CatalogClient:
    return CatalogClient(PRODUCT_URL, transport=product_service)


@pytest.fixture
def order_store() -> OrderStore:
    return OrderStore()


@pytest.fixture
def coordinator(order_store, catalog) -> OrderCoordinator:
    return OrderCoordinator(order_store, catalog)


@pytest.fixture
def order_client(coordinator) -> Iterator[TestClient]:
    order_app.app.dependency_overrides[order_app.get_coordinator] = lambda: coordinator
    with TestClient(order_app.app) as client:
        yield client
    order_app.app.dependency_overrides.clear()


@pytest.fixture
def product_client(product_service, product_store) -> Iterator[TestClient]:
    with TestClient(product_app.app) as client:
        yield client
