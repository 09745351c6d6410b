import re

from startech_api.app.services.sequencer import IdSequencer

from .conftest import headers_for

TECH = headers_for("tech")


def _create_ticket(client, title="Printeri nuk printon", **extra):
    return client.post("/api/tickets/", json=dict(title=title, **extra), headers=TECH)


def test_identifiers_are_sequential(client):
    first = _create_ticket(client).json()["data"]
    second = _create_ticket(client, title="Wi-Fi bie").json()["data"]
    match = re.fullmatch(r"TIK-(\d{4})-001", first["id"])
    assert match
    assert second["id"] == f"TIK-{match.group(1)}-002"
    assert first["status"] == "open"
    assert first["priority"] == "medium"


def test_duplicate_identifier_is_a_conflict(client, monkeypatch):
    existing = _create_ticket(client).json()["data"]["id"]
    monkeypatch.setattr(IdSequencer, "next_id", lambda self, prefix, year=None: existing)

    response = _create_ticket(client, title="Dy njëkohësisht")
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert client.get("/api/tickets/", headers=TECH).json()["pagination"]["total"] == 1


def test_title_is_required(client):
    assert client.post("/api/tickets/", json={"description": "x"}, headers=TECH).status_code == 400


def test_resolving_stamps_resolved_at(client):
    ticket_id = _create_ticket(client).json()["data"]["id"]
    resolved = client.put(f"/api/tickets/{ticket_id}", json={"status": "resolved"}, headers=TECH)
    assert resolved.json()["data"]["resolvedAt"]

    reopened = client.put(f"/api/tickets/{ticket_id}", json={"status": "in-progress"}, headers=TECH)
    assert reopened.json()["data"]["resolvedAt"] is None


def test_comments_and_missing_ticket(client):
    ticket_id = _create_ticket(client).json()["data"]["id"]
    client.post(f"/api/tickets/{ticket_id}/comments", json={"content": "Po shikoj"}, headers=TECH)
    ticket = client.get(f"/api/tickets/{ticket_id}", headers=TECH).json()["data"]
    assert [c["content"] for c in ticket["comments"]] == ["Po shikoj"]

    missing = client.get("/api/tickets/TIK-1999-001", headers=TECH)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Tiketa nuk u gjet"


def test_stats(client):
    _create_ticket(client, priority="urgent")
    _create_ticket(client)
    stats = client.get("/api/tickets/stats/overview", headers=TECH).json()["data"]
    assert stats["total"] == 2
    assert stats["byStatus"]["open"] == 2
    assert stats["byPriority"]["urgent"] == 1
    assert stats["recent"] == 2
