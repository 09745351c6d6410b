from .conftest import headers_for

USER = headers_for("tech")


def _create_customer(client, **extra):
    body = {"name": "Ana Hoxha", "email": "ana@example.com", "city": "Prishtinë"}
    body.update(extra)
    return client.post("/api/customers/", json=body, headers=USER)


def test_create_and_get(client):
    created = _create_customer(client)
    assert created.status_code == 201
    customer = created.json()["data"]
    fetched = client.get(f"/api/customers/{customer['id']}", headers=USER).json()["data"]
    assert fetched["email"] == "ana@example.com"
    assert fetched["orders"] == []
    assert fetched["services"] == []


def test_name_and_email_required(client):
    response = client.post("/api/customers/", json={"name": "Ana"}, headers=USER)
    assert response.status_code == 400
    assert response.json()["error"] == "Emri dhe emaili janë të detyrueshëm"


def test_duplicate_email_rejected(client):
    _create_customer(client)
    response = _create_customer(client, name="Ana Tjetër")
    assert response.status_code == 400
    assert response.json()["error"] == "Emaili tashmë ekziston"


def test_search(client):
    _create_customer(client)
    _create_customer(client, name="Besnik Krasniqi", email="besnik@example.com", city="Prizren")
    found = client.get("/api/customers/?search=Prizren", headers=USER).json()
    assert [c["name"] for c in found["data"]] == ["Besnik Krasniqi"]


def test_delete_blocked_by_orders(client, product):
    customer = _create_customer(client).json()["data"]
    client.post(
        "/api/orders/",
        json={"customerId": customer["id"], "items": [{"productId": product["id"], "quantity": 1}]},
        headers=USER,
    )
    response = client.delete(f"/api/customers/{customer['id']}", headers=USER)
    assert response.status_code == 400
    assert response.json()["error"] == "Nuk mund të fshihet klienti pasi ka porosi të lidhura"


def test_delete_blocked_by_services(client):
    customer = _create_customer(client).json()["data"]
    client.post("/api/services/", json={"problem": "Bateria", "customerId": customer["id"]}, headers=USER)
    response = client.delete(f"/api/customers/{customer['id']}", headers=USER)
    assert response.status_code == 400


def test_delete_unreferenced_customer(client):
    customer = _create_customer(client).json()["data"]
    assert client.delete(f"/api/customers/{customer['id']}", headers=USER).status_code == 200
    assert client.get(f"/api/customers/{customer['id']}", headers=USER).status_code == 404


def test_stats_by_source(client):
    _create_customer(client)
    _create_customer(client, email="b@example.com", source="WooCommerce")
    stats = client.get("/api/customers/stats/overview", headers=USER).json()["data"]
    assert stats["total"] == 2
    assert stats["woocommerce"] == 1
