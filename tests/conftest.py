"""
Shared fixtures.

Each test gets its own SQLite file with four users already seeded:
an administrator, a manager and two technicians.  Requests identify
the caller with the ``X-User-ID`` header, see ``headers_for``.
"""

import dataclasses
import os
import tempfile

# The module-level app built on import must not touch the project database.
os.environ.setdefault("DATABASE_URL", os.path.join(tempfile.gettempdir(), "startech_test_import.db"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ACTIVITY_LOG_DIR", os.path.join(tempfile.gettempdir(), "startech_test_activity"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from startech_api.app.core.config import settings  # noqa: E402
from startech_api.app.core.db import Database, now_iso  # noqa: E402
from startech_api.app.main import create_app  # noqa: E402

USERS = {
    "admin": {"id": "u-admin", "name": "Admin Startech", "email": "admin@startech.com", "role": "admin"},
    "manager": {"id": "u-manager", "name": "Drita Manager", "email": "drita@startech.com", "role": "manager"},
    "tech": {"id": "u-tech", "name": "Arben Tech", "email": "arben@startech.com", "role": "technician"},
    "other": {"id": "u-other", "name": "Blerta Tech", "email": "blerta@startech.com", "role": "technician"},
}


def headers_for(role: str) -> dict:
    return {"X-User-ID": USERS[role]["id"]}


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "startech.db"))
    database.init()
    now = now_iso()
    with database.cursor() as cursor:
        for user in USERS.values():
            cursor.execute(
                "INSERT INTO users (id, name, email, role, is_active, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, 1, ?, ?)",
                (user["id"], user["name"], user["email"], user["role"], now, now),
            )
    return database


@pytest.fixture
def activity_dir(tmp_path):
    return tmp_path / "activity"


@pytest.fixture
def client(db, activity_dir):
    app_settings = dataclasses.replace(settings, activity_log_dir=str(activity_dir))
    return TestClient(create_app(settings=app_settings, db=db))


@pytest.fixture
def product(client):
    """A catalogue product priced at 9.99."""
    response = client.post(
        "/api/products/",
        json={"title": "Mouse Logitech", "basePrice": 9.99, "additionalCost": 0, "category": "Aksesorë"},
        headers=headers_for("admin"),
    )
    assert response.status_code == 201
    return response.json()["data"]
