import pytest

from .conftest import headers_for

ADMIN = headers_for("admin")


def test_final_price_is_base_plus_additional(client):
    response = client.post(
        "/api/products/", json={"title": "Kabllo HDMI", "basePrice": "7.5", "additionalCost": 2.5}, headers=ADMIN
    )
    assert response.status_code == 201
    product = response.json()["data"]
    assert product["finalPrice"] == 10.0
    assert product["source"] == "Manual"
    assert product["wooCommerceStatus"] == "active"


def test_update_recomputes_with_stored_parts(client, product):
    response = client.put(f"/api/products/{product['id']}", json={"additionalCost": 1}, headers=ADMIN)
    assert response.json()["data"]["finalPrice"] == pytest.approx(10.99)


def test_title_required(client):
    assert client.post("/api/products/", json={"basePrice": 1}, headers=ADMIN).status_code == 400


def test_only_admin_manages_products(client):
    response = client.post("/api/products/", json={"title": "x"}, headers=headers_for("tech"))
    assert response.status_code == 403
    assert response.json()["error"] == "Kërkohet roli i adminit"


def test_limit_is_capped(client, product):
    listed = client.get("/api/products/?limit=500", headers=ADMIN).json()
    assert listed["pagination"]["limit"] == 100
    assert listed["pagination"]["total"] == 1


def test_source_filter(client, product):
    assert client.get("/api/products/?source=WooCommerce", headers=ADMIN).json()["data"] == []
    assert len(client.get("/api/products/?source=Manual", headers=ADMIN).json()["data"]) == 1


def test_delete(client, product):
    assert client.delete(f"/api/products/{product['id']}", headers=ADMIN).status_code == 200
    assert client.get(f"/api/products/{product['id']}", headers=ADMIN).status_code == 404
