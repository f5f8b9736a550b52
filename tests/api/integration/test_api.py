"""Integration tests for the storefront HTTP API."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from storefront.app import create_app

ADDRESS = {
    "name": "Asha Rao",
    "line1": "221 Linking Road",
    "city": "Mumbai",
    "state": "MH",
    "postal_code": "400050",
}


@pytest.fixture()
def client(storefront):
    return TestClient(create_app(storefront))


@pytest.fixture()
def product_id(client):
    response = client.post("/products", json={"name": "Smart Speaker", "price": "100.00", "stock": 5})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture()
def shopper(client):
    response = client.post("/customers", json={"name": "Asha Rao", "email": "asha@example.com"})
    assert response.status_code == 201
    client.post("/sessions", json={"session_id": "web-1"})
    client.post("/sessions/web-1/login", json={"email": "asha@example.com"})
    return response.json()["id"]


def _checkout(client, product_id, quantity=2):
    client.post("/sessions/web-1/cart/items", json={"product_id": product_id, "quantity": quantity})
    return client.post("/sessions/web-1/checkout", json={"fulfillment_mode": "ship", "shipping_address": ADDRESS})


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["store"] == "InMemoryResourceStore"
        assert response.json()["pickup_locations"] == 3


class TestShopperFlow:
    def test_cart_totals(self, client, shopper, product_id):
        client.post("/sessions/web-1/cart/items", json={"product_id": product_id, "quantity": 2})

        ship = client.get("/sessions/web-1/cart/totals", params={"mode": "ship"}).json()
        pickup = client.get("/sessions/web-1/cart/totals", params={"mode": "pickup"}).json()

        assert Decimal(ship["total"]) == Decimal("270.00")
        assert Decimal(pickup["total"]) == Decimal("220.00")

    def test_checkout_to_delivery_with_points(self, client, shopper, product_id):
        response = _checkout(client, product_id)
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["tracking_status"] == "Processing"
        assert client.get("/sessions/web-1").json()["items"] == []
        assert client.get(f"/products/{product_id}").json()["stock"] == 3

        options = client.get(f"/orders/{order['id']}/tracking-options").json()
        assert set(options["options"]) == {"pending", "shipped", "cancelled"}

        client.put(f"/orders/{order['id']}/status", json={"status": "shipped", "tracking_status": "In Transit"})
        response = client.put(
            f"/orders/{order['id']}/status",
            json={"status": "delivered", "tracking_status": "Delivered", "award_points": True},
        )
        assert response.status_code == 200

        loyalty = client.get(f"/customers/{shopper}/loyalty").json()
        assert loyalty["balance"] == 27
        assert [entry["order_id"] for entry in loyalty["entries"]] == [order["id"]]
        assert client.get("/sessions/web-1").json()["loyalty_balance"] == 27

        # Retrying the award is a no-op
        retry = client.post(f"/orders/{order['id']}/loyalty-award").json()
        assert retry["points_awarded"] == 0

        assert client.get(f"/orders/{order['id']}/tracking-options").json() == {"finalized": True, "options": {}}

    def test_set_quantity_route(self, client, store, shopper, product_id):
        client.post("/sessions/web-1/cart/items", json={"product_id": product_id})
        store.patch("products", product_id, {"stock": 12})

        response = client.put(f"/sessions/web-1/cart/items/{product_id}", json={"quantity": 9})

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 9

    def test_campaign_roi(self, client, shopper, product_id):
        campaign = client.post(
            "/campaigns",
            json={"name": "Spring Sale", "budget": "100.00", "start_date": "2026-03-01", "end_date": "2026-03-31"},
        ).json()
        client.post("/sessions/web-1/campaign", json={"campaign_id": campaign["id"]})
        order = _checkout(client, product_id).json()
        assert order["campaign_id"] == campaign["id"]

        client.put(f"/orders/{order['id']}/status", json={"status": "shipped"})
        client.put(f"/orders/{order['id']}/status", json={"status": "delivered"})

        roi = client.get(f"/campaigns/{campaign['id']}/roi").json()
        assert Decimal(roi["revenue"]) == Decimal("270.00")
        assert Decimal(roi["roi"]) == Decimal("170.00")
        assert roi["order_count"] == 1

    def test_dashboard(self, client, shopper, product_id):
        _checkout(client, product_id, quantity=1)
        stats = client.get("/orders/stats").json()
        assert stats["order_count"] == 1
        assert stats["orders_by_status"]["pending"] == 1
        assert [p["id"] for p in stats["low_stock"]] == [product_id]


class TestErrorResponses:
    def test_missing_address_is_400(self, client, shopper, product_id):
        client.post("/sessions/web-1/cart/items", json={"product_id": product_id})
        response = client.post("/sessions/web-1/checkout", json={"fulfillment_mode": "ship"})
        assert response.status_code == 400
        assert "shipping_address" in response.json()["error"]

    def test_unknown_order_is_404(self, client):
        assert client.get("/orders/does-not-exist").status_code == 404

    def test_out_of_stock_is_409(self, client, shopper, product_id):
        response = client.post("/sessions/web-1/cart/items", json={"product_id": product_id, "quantity": 6})
        assert response.status_code == 409
        assert response.json()["available"] == 5

    def test_invalid_transition_is_409(self, client, shopper, product_id):
        order = _checkout(client, product_id).json()
        response = client.put(f"/orders/{order['id']}/status", json={"status": "delivered"})
        assert response.status_code == 409
        assert response.json()["current"] == "pending"

    def test_failed_award_is_502_with_status_kept(self, client, store, shopper, product_id):
        order = _checkout(client, product_id).json()
        client.put(f"/orders/{order['id']}/status", json={"status": "shipped"})
        store.configure(failing_operations={("replace", "customers")})

        response = client.put(f"/orders/{order['id']}/status", json={"status": "delivered", "award_points": True})

        assert response.status_code == 502
        assert response.json()["status_persisted"] is True
        assert client.get(f"/orders/{order['id']}").json()["status"] == "delivered"

        store.configure()
        assert client.post(f"/orders/{order['id']}/loyalty-award").json()["points_awarded"] == 27

    def test_unreachable_store_is_503(self, client, store):
        store.configure(reachable=False)
        response = client.get("/products")
        assert response.status_code == 503
        assert response.json()["retryable"] is True
