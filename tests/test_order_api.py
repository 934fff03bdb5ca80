"""HTTP tests for the order service endpoints."""

from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from common.models import Order
from common.timeutils import utc_now
from order_service import app as order_app
from order_service.catalog_client import CatalogClient
from order_service.coordinator import OrderCoordinator
from product_service import app as product_app


def place(client, *pairs):
    return client.post(
        "/orders",
        json={"items": [{"product_id": p, "product_qty": q} for p, q in pairs]},
    )


def stock(product_store, product_id):
    return product_store.get(product_id).inventory_count


def test_health(order_client):
    assert order_client.get("/health").json() == {"status": "ok", "service": "order-service"}


def test_list_orders_empty(order_client):
    resp = order_client.get("/orders")

    assert resp.status_code == 200
    assert resp.json() == []


def test_place_premium_order(order_client, product_store):
    resp = place(order_client, (1, 2), (4, 1), (6, 1))

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == 1
    assert body["status"] == "Placed"
    assert body["discount"] == 10
    assert body["value"] == pytest.approx(38.7)
    assert body["dispatch_date"] is None
    assert body["items"] == [
        {"product_id": 1, "product_price": 10.5, "product_qty": 2},
        {"product_id": 4, "product_price": 12.5, "product_qty": 1},
        {"product_id": 6, "product_price": 9.5, "product_qty": 1},
    ]
    assert stock(product_store, 1) == 3


def test_placed_order_is_listed(order_client):
    place(order_client, (2, 1))
    place(order_client, (3, 2))

    orders = [Order.model_validate(o) for o in order_client.get("/orders").json()]

    assert sorted(o.id for o in orders) == [1, 2]


def test_insufficient_inventory_is_a_conflict(order_client, product_store):
    resp = place(order_client, (1, 6))

    assert resp.status_code == 409
    assert "Product 1" in resp.json()["detail"]
    assert stock(product_store, 1) == 5
    assert order_client.get("/orders").json() == []


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"items": []},
        {"items": [{"product_id": 1}]},
        {"items": [{"product_id": 1, "product_qty": 0}]},
        {"items": [{"product_id": "one", "product_qty": 1}]},
        {"items": [{"product_id": 1, "product_qty": 1, "note": "x"}]},
    ],
)
def test_malformed_order_body(order_client, body):
    resp = order_client.post("/orders", json=body)

    assert resp.status_code == 400


def test_unparseable_order_body(order_client):
    resp = order_client.post(
        "/orders", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert resp.status_code == 400


def test_unknown_product_is_a_client_error(order_client):
    resp = place(order_client, (77, 1))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Product not found: 77"


def test_catalog_unavailable(order_store):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    catalog = CatalogClient("http://product-service", transport=httpx.MockTransport(handler))
    coordinator = OrderCoordinator(order_store, catalog)
    order_app.app.dependency_overrides[order_app.get_coordinator] = lambda: coordinator
    try:
        with TestClient(order_app.app) as client:
            resp = place(client, (1, 1))
    finally:
        order_app.app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert order_store.list() == []


def test_catalog_update_failure(order_client, product_store, monkeypatch):
    monkeypatch.setattr(product_app, "FAIL", True)

    resp = place(order_client, (1, 1))

    assert resp.status_code == 500
    assert order_client.get("/orders").json() == []


def test_dispatch_then_fetch(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]
    start = utc_now()

    resp = order_client.patch(f"/orders/{order_id}", json={"status": "Dispatched"})
    end = utc_now()

    assert resp.status_code == 200
    [listed] = [Order.model_validate(o) for o in order_client.get("/orders").json()]
    assert listed.status.value == "Dispatched"
    assert start <= listed.dispatch_date <= end


def test_dispatch_with_explicit_date(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]

    resp = order_client.patch(
        f"/orders/{order_id}",
        json={"status": "Dispatched", "dispatch_date": "2024-05-01T08:00:00Z"},
    )

    assert Order.model_validate(resp.json()).dispatch_date == datetime(
        2024, 5, 1, 8, 0, tzinfo=timezone.utc
    )


def test_invalid_status_leaves_order_unchanged(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]

    resp = order_client.patch(f"/orders/{order_id}", json={"status": "Shipped"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid order status: Shipped"
    [listed] = order_client.get("/orders").json()
    assert listed["status"] == "Placed"


def test_terminal_status_is_not_reopened(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]
    order_client.patch(f"/orders/{order_id}", json={"status": "Completed"})

    resp = order_client.patch(f"/orders/{order_id}", json={"status": "Cancelled"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot transition order from Completed to Cancelled"
    [listed] = order_client.get("/orders").json()
    assert listed["status"] == "Completed"


def test_empty_status_means_no_change(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]

    resp = order_client.patch(f"/orders/{order_id}", json={"status": ""})

    assert resp.status_code == 200
    assert resp.json()["status"] == "Placed"
    assert resp.json()["dispatch_date"] is None


def test_same_status_is_accepted(order_client):
    order_id = place(order_client, (2, 1)).json()["id"]
    first = order_client.patch(f"/orders/{order_id}", json={"status": "Cancelled"})

    second = order_client.patch(f"/orders/{order_id}", json={"status": "Cancelled"})

    assert second.status_code == 200
    assert second.json() == first.json()


def test_patch_invalid_id(order_client):
    resp = order_client.patch("/orders/abc", json={"status": "Completed"})

    assert resp.status_code == 400


def test_patch_unknown_order(order_client):
    resp = order_client.patch("/orders/99", json={"status": "Completed"})

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Order not found: 99"
