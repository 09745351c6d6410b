import re

from .conftest import headers_for

TECH = headers_for("tech")


def _create_service(client, **extra):
    body = {"problem": "Ekrani nuk ndizet", "customer": "Ana Hoxha", "category": "Laptop"}
    body.update(extra)
    return client.post("/api/services/", json=body, headers=TECH)


def test_create_service(client):
    response = _create_service(client)
    assert response.status_code == 201
    service = response.json()["data"]
    assert re.fullmatch(r"SRV-\d{4}-\d{3}", service["id"])
    assert service["status"] == "received"
    assert service["problemDescription"] == "Ekrani nuk ndizet"
    assert service["createdBy"] == "Arben Tech"


def test_problem_description_and_customer_are_required(client):
    assert client.post("/api/services/", json={"customer": "Ana"}, headers=TECH).status_code == 400
    assert client.post("/api/services/", json={"problem": "x"}, headers=TECH).status_code == 400


def test_completion_timestamp_follows_status(client):
    service_id = _create_service(client).json()["data"]["id"]

    completed = client.put(f"/api/services/{service_id}", json={"status": "completed"}, headers=TECH)
    assert completed.status_code == 200
    assert completed.json()["data"]["completedAt"]

    back = client.put(f"/api/services/{service_id}", json={"status": "in-progress"}, headers=TECH)
    assert back.json()["data"]["completedAt"] is None


def test_history_records_creation_and_status_changes(client):
    service_id = _create_service(client).json()["data"]["id"]
    client.put(f"/api/services/{service_id}", json={"status": "in-progress"}, headers=TECH)
    client.post(
        f"/api/services/{service_id}/history",
        json={"action": "Klienti u njoftua", "notes": "Telefonatë"},
        headers=TECH,
    )

    service = client.get(f"/api/services/{service_id}", headers=TECH).json()["data"]
    assert len(service["serviceHistory"]) == 3
    assert service["customer"]["name"] == "Ana Hoxha"


def test_invalid_status_is_rejected(client):
    service_id = _create_service(client).json()["data"]["id"]
    response = client.put(f"/api/services/{service_id}", json={"status": "fixed"}, headers=TECH)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_service_comments(client):
    service_id = _create_service(client).json()["data"]["id"]
    created = client.post(
        f"/api/services/{service_id}/comments", json={"content": "Pjesa u porosit"}, headers=TECH
    )
    assert created.status_code == 201
    comments = client.get(f"/api/services/{service_id}/comments", headers=TECH).json()["data"]
    assert [c["content"] for c in comments] == ["Pjesa u porosit"]


def test_delete_requires_admin(client):
    service_id = _create_service(client).json()["data"]["id"]
    assert client.delete(f"/api/services/{service_id}", headers=TECH).status_code == 403
    assert client.delete(f"/api/services/{service_id}", headers=headers_for("admin")).status_code == 200
    assert client.get(f"/api/services/{service_id}", headers=TECH).status_code == 404


def test_unknown_customer_id_is_rejected(client):
    response = client.post(
        "/api/services/", json={"problem": "Bateria", "customerId": "does-not-exist"}, headers=TECH
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Klienti nuk u gjet"
    assert client.get("/api/customers/", headers=TECH).json()["pagination"]["total"] == 0


def test_update_with_unknown_customer_id_keeps_customer(client):
    service = _create_service(client).json()["data"]
    response = client.put(
        f"/api/services/{service['id']}", json={"customerId": "does-not-exist"}, headers=TECH
    )
    assert response.status_code == 400
    fetched = client.get(f"/api/services/{service['id']}", headers=TECH).json()["data"]
    assert fetched["customerId"] == service["customerId"]
    assert client.get("/api/customers/", headers=TECH).json()["pagination"]["total"] == 1


def test_existing_customer_id_is_used(client):
    customer = client.post(
        "/api/customers/", json={"name": "Besa", "email": "besa@example.com"}, headers=TECH
    ).json()["data"]
    service = client.post(
        "/api/services/", json={"problem": "Tastiera", "customerId": customer["id"]}, headers=TECH
    ).json()["data"]
    assert service["customerId"] == customer["id"]
