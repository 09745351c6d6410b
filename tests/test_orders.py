import re

from .conftest import headers_for

ADMIN = headers_for("admin")


def _create_order(client, product, quantity=2, customer="Ana Hoxha"):
    return client.post(
        "/api/orders/",
        json={"customer": customer, "items": [{"productId": product["id"], "quantity": quantity}]},
        headers=headers_for("tech"),
    )


def test_create_order_totals_lines_and_creates_customer(client, product):
    response = _create_order(client, product)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    order = body["data"]
    assert re.fullmatch(r"PRS-\d{4}-\d{3}", order["id"])
    assert order["status"] == "pending"
    assert order["source"] == "Manual"
    assert order["total"] == 19.98
    assert order["products"][0]["quantity"] == 2
    assert order["products"][0]["subtotal"] == 19.98
    assert order["customer"]["email"] == "ana.hoxha@example.com"
    assert order["shippingInfo"] == {"address": "", "city": "", "zipCode": "", "method": ""}


def test_second_order_reuses_customer_by_name(client, product):
    first = _create_order(client, product).json()["data"]
    second = _create_order(client, product, quantity=1).json()["data"]
    assert second["customerId"] == first["customerId"]
    assert second["id"] != first["id"]
    assert second["total"] == 9.99


def test_order_requires_customer_and_items(client):
    response = client.post("/api/orders/", json={"customer": "Ana"}, headers=ADMIN)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Klienti dhe produktet janë të detyrueshëm"}


def test_unknown_product_is_rejected(client):
    response = client.post(
        "/api/orders/",
        json={"customer": "Ana", "items": [{"productId": "missing", "quantity": 1}]},
        headers=ADMIN,
    )
    assert response.status_code == 400
    assert client.get("/api/orders/", headers=ADMIN).json()["pagination"]["total"] == 0


def test_zero_quantity_fails_validation(client, product):
    response = _create_order(client, product, quantity=0)
    assert response.status_code == 400
    assert response.json()["error"] == "Të dhëna të pavlefshme"


def test_status_change_stamps_and_clears_completion(client, product):
    order_id = _create_order(client, product).json()["data"]["id"]
    delivered = client.put(f"/api/orders/{order_id}", json={"status": "delivered"}, headers=ADMIN)
    assert delivered.status_code == 200
    assert delivered.json()["data"]["completedAt"]

    reopened = client.put(f"/api/orders/{order_id}", json={"status": "processing"}, headers=ADMIN)
    assert reopened.json()["data"]["completedAt"] is None


def test_invalid_status_is_rejected(client, product):
    order_id = _create_order(client, product).json()["data"]["id"]
    response = client.put(f"/api/orders/{order_id}", json={"status": "lost"}, headers=ADMIN)
    assert response.status_code == 400


def test_replacing_items_recomputes_total(client, product):
    order_id = _create_order(client, product).json()["data"]["id"]
    response = client.put(
        f"/api/orders/{order_id}",
        json={"items": [{"productId": product["id"], "quantity": 3}]},
        headers=ADMIN,
    )
    order = response.json()["data"]
    assert order["total"] == 29.97
    assert len(order["products"]) == 1


def test_list_filters_and_paginates(client, product):
    for _ in range(3):
        _create_order(client, product)
    order_id = client.get("/api/orders/", headers=ADMIN).json()["data"][0]["id"]
    client.put(f"/api/orders/{order_id}", json={"status": "shipped"}, headers=ADMIN)

    page = client.get("/api/orders/?limit=2&page=1", headers=ADMIN).json()
    assert len(page["data"]) == 2
    assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    shipped = client.get("/api/orders/?status=shipped", headers=ADMIN).json()
    assert [o["id"] for o in shipped["data"]] == [order_id]


def test_stats_overview(client, product):
    _create_order(client, product)
    _create_order(client, product, quantity=1)
    stats = client.get("/api/orders/stats/overview", headers=ADMIN).json()["data"]
    assert stats["total"] == 2
    assert stats["pending"] == 2
    assert stats["totalRevenue"] == 29.97


def test_only_admin_deletes(client, product):
    order_id = _create_order(client, product).json()["data"]["id"]
    assert client.delete(f"/api/orders/{order_id}", headers=headers_for("manager")).status_code == 403
    assert client.delete(f"/api/orders/{order_id}", headers=ADMIN).status_code == 200
    missing = client.get(f"/api/orders/{order_id}", headers=ADMIN)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Porosia nuk u gjet"
