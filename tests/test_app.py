from .conftest import headers_for

ADMIN = headers_for("admin")


def test_health_needs_no_user(client):
    body = client.get("/api/health").json()
    assert body["status"] == "OK"
    assert body["timestamp"]


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here", headers=ADMIN)
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_dashboard_counts(client, product):
    client.post(
        "/api/orders/",
        json={"customer": "Ana", "items": [{"productId": product["id"], "quantity": 2}]},
        headers=ADMIN,
    )
    client.post("/api/services/", json={"problem": "Tastiera", "customer": "Ana"}, headers=ADMIN)
    dashboard = client.get("/api/reports/dashboard", headers=ADMIN).json()["data"]
    assert dashboard["orders"]["total"] == 1
    assert dashboard["orders"]["totalRevenue"] == 19.98
    assert dashboard["services"]["received"] == 1
    assert dashboard["customers"]["internal"] == 1
    assert dashboard["products"]["active"] == 1


def test_entity_report_filters(client, product):
    client.post(
        "/api/orders/",
        json={"customer": "Ana", "items": [{"productId": product["id"], "quantity": 1}]},
        headers=ADMIN,
    )
    report = client.get("/api/reports/orders?status=pending", headers=ADMIN).json()
    assert report["count"] == 1
    assert report["data"][0]["customer"]["name"] == "Ana"
    assert client.get("/api/reports/orders?status=delivered", headers=ADMIN).json()["count"] == 0
