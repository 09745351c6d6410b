from .conftest import USERS, headers_for

ADMIN = headers_for("admin")
TECH = headers_for("tech")


def test_missing_or_unknown_user_is_unauthorized(client):
    missing = client.get("/api/users/me")
    assert missing.status_code == 401
    assert missing.json() == {"success": False, "error": "User ID mungon"}
    assert client.get("/api/users/me", headers={"X-User-ID": "nobody"}).status_code == 401


def test_inactive_user_is_unauthorized(client):
    client.put(f"/api/users/{USERS['other']['id']}", json={"isActive": False}, headers=ADMIN)
    assert client.get("/api/users/me", headers=headers_for("other")).status_code == 401


def test_me_records_last_login(client):
    me = client.get("/api/users/me", headers=TECH).json()["data"]
    assert me["name"] == "Arben Tech"
    profile = client.get(f"/api/users/{USERS['tech']['id']}", headers=TECH).json()["data"]
    assert profile["lastLogin"]


def test_list_is_admin_only(client):
    listed = client.get("/api/users/", headers=ADMIN).json()
    assert listed["count"] == len(USERS)
    assert client.get("/api/users/", headers=TECH).status_code == 403


def test_profile_visible_to_self_or_admin(client):
    other_id = USERS["other"]["id"]
    assert client.get(f"/api/users/{other_id}", headers=TECH).status_code == 403
    assert client.get(f"/api/users/{other_id}", headers=ADMIN).status_code == 200


def test_only_admin_changes_roles(client):
    tech_id = USERS["tech"]["id"]
    assert client.put(f"/api/users/{tech_id}", json={"role": "admin"}, headers=TECH).status_code == 403
    renamed = client.put(f"/api/users/{tech_id}", json={"phone": "044111222"}, headers=TECH)
    assert renamed.json()["data"]["phone"] == "044111222"
    promoted = client.put(f"/api/users/{tech_id}", json={"role": "Manager"}, headers=ADMIN)
    assert promoted.json()["data"]["role"] == "manager"


def test_create_user_with_explicit_id(client):
    response = client.post(
        "/api/users/", json={"id": "idp-123", "name": "Dea", "email": "dea@startech.com"}, headers=ADMIN
    )
    assert response.status_code == 201
    assert response.json()["data"]["id"] == "idp-123"
    assert response.json()["data"]["role"] == "user"


def test_admin_cannot_delete_self(client):
    response = client.delete(f"/api/users/{USERS['admin']['id']}", headers=ADMIN)
    assert response.status_code == 400
    assert response.json()["error"] == "Nuk mund të fshini vetë profilin tuaj"
    assert client.delete(f"/api/users/{USERS['other']['id']}", headers=ADMIN).status_code == 200
