import pytest

from .conftest import headers_for

TECH = headers_for("tech")
OTHER = headers_for("other")


@pytest.fixture
def task_id(client):
    response = client.post("/api/tasks/", json={"title": "Rrjeti"}, headers=headers_for("admin"))
    return response.json()["data"]["id"]


def _comment(client, task_id, content="Koment", headers=TECH, parent_id=None):
    body = {"entityType": "task", "entityId": task_id, "content": content}
    if parent_id is not None:
        body["parentId"] = parent_id
    return client.post("/api/comments/", json=body, headers=headers)


def test_threads_are_one_level_deep(client, task_id):
    root = _comment(client, task_id, "Rrënja").json()["data"]
    reply = _comment(client, task_id, "Përgjigje", parent_id=root["id"]).json()["data"]
    nested = _comment(client, task_id, "Përgjigje e përgjigjes", parent_id=reply["id"]).json()["data"]
    assert nested["parentId"] == root["id"]

    listed = client.get(f"/api/comments/?entityType=task&entityId={task_id}", headers=TECH).json()["data"]
    assert len(listed) == 1
    assert [r["content"] for r in listed[0]["replies"]] == ["Përgjigje", "Përgjigje e përgjigjes"]
    assert listed[0]["user"]["name"] == "Arben Tech"


def test_entity_must_exist(client):
    response = _comment(client, "TSK-1999-001")
    assert response.status_code == 404


def test_invalid_entity_type(client, task_id):
    response = client.post(
        "/api/comments/", json={"entityType": "order", "entityId": task_id, "content": "x"}, headers=TECH
    )
    assert response.status_code == 400


def test_list_requires_entity(client):
    assert client.get("/api/comments/", headers=TECH).status_code == 400


def test_vote_toggles_and_switches(client, task_id):
    comment_id = _comment(client, task_id).json()["data"]["id"]
    url = f"/api/comments/{comment_id}/vote"

    assert client.post(url, json={"voteType": "upvote"}, headers=OTHER).json()["data"] == {
        "upvotes": 1,
        "downvotes": 0,
    }
    assert client.post(url, json={"voteType": "downvote"}, headers=OTHER).json()["data"] == {
        "upvotes": 0,
        "downvotes": 1,
    }
    assert client.post(url, json={"voteType": "downvote"}, headers=OTHER).json()["data"] == {
        "upvotes": 0,
        "downvotes": 0,
    }
    assert client.post(url, json={"voteType": "sideways"}, headers=OTHER).status_code == 400


def test_only_owner_edits_or_deletes(client, task_id):
    comment_id = _comment(client, task_id).json()["data"]["id"]
    assert client.put(f"/api/comments/{comment_id}", json={"content": "x"}, headers=OTHER).status_code == 403
    assert client.delete(f"/api/comments/{comment_id}", headers=OTHER).status_code == 403

    edited = client.put(f"/api/comments/{comment_id}", json={"content": "Ndryshuar"}, headers=TECH)
    assert edited.json()["data"]["content"] == "Ndryshuar"
    assert client.delete(f"/api/comments/{comment_id}", headers=TECH).status_code == 200
    assert client.delete(f"/api/comments/{comment_id}", headers=TECH).status_code == 404
