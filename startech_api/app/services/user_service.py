"""
Service for user profiles.

Accounts and passwords live with the external identity provider; this
table holds the profile (name, role, department ...) that the API uses
to authorise requests.  A profile id is normally the identity provider's
user id, so ``create_user`` accepts an explicit ``id`` and only falls
back to a random UUID when none is given.
"""

import uuid
from typing import Any, Dict, List, Optional

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, PermissionDeniedError, ValidationError
from ..core.security import is_admin
from .base import fetch_row, insert_row, update_row
from .transform import to_api_shape, to_storage_shape

ADMIN_ONLY_FIELDS = ("role", "is_active")


class UserService:
    """CRUD for user profiles with self-or-admin rules."""

    @classmethod
    async def list_users(cls, db: Database) -> List[Dict[str, Any]]:
        with db.cursor() as cursor:
            rows = cursor.execute("SELECT * FROM users ORDER BY created_at DESC").fetchall()
        return [to_api_shape(dict(row)) for row in rows]

    @classmethod
    async def get_user(
        cls, db: Database, user_id: str, current_user: Dict[str, Any]
    ) -> Dict[str, Any]:
        if current_user["id"] != user_id and not is_admin(current_user):
            raise PermissionDeniedError("Nuk keni leje për të parë këtë profil")
        with db.cursor() as cursor:
            user = fetch_row(cursor, "users", user_id)
        if not user:
            raise NotFoundError("Përdoruesi nuk u gjet")
        return to_api_shape(user)

    @classmethod
    async def create_user(cls, db: Database, payload: Dict[str, Any]) -> Dict[str, Any]:
        values = to_storage_shape(payload)
        if not values.get("name") or not values.get("email"):
            raise ValidationError("Emri dhe emaili janë të detyrueshëm")
        now = now_iso()
        values.update(
            id=values.get("id") or str(uuid.uuid4()),
            role=(values.get("role") or "user").lower(),
            is_active=1,
            credits=values.get("credits") or 0,
            created_at=now,
            updated_at=now,
        )
        with db.cursor() as cursor:
            if cursor.execute("SELECT 1 FROM users WHERE email = ?", (values["email"],)).fetchone():
                raise ValidationError("Emaili tashmë ekziston")
            insert_row(cursor, "users", values)
            created = fetch_row(cursor, "users", values["id"])
        return to_api_shape(created)

    @classmethod
    async def update_user(
        cls,
        db: Database,
        user_id: str,
        payload: Dict[str, Any],
        current_user: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Update a profile.

        Users may edit their own profile; administrators may edit any
        profile and are the only ones allowed to change ``role`` or
        ``isActive``.
        """
        admin = is_admin(current_user)
        if current_user["id"] != user_id and not admin:
            raise PermissionDeniedError("Nuk keni leje për të përditësuar këtë profil")
        values = to_storage_shape(payload)
        if not admin and any(field in values for field in ADMIN_ONLY_FIELDS):
            raise PermissionDeniedError("Vetëm administratori mund të ndryshojë rolin ose statusin")
        if values.get("role"):
            values["role"] = values["role"].lower()
        values.pop("created_at", None)
        values["updated_at"] = now_iso()
        with db.cursor() as cursor:
            if not fetch_row(cursor, "users", user_id):
                raise NotFoundError("Përdoruesi nuk u gjet")
            email: Optional[str] = values.get("email")
            if email and cursor.execute(
                "SELECT 1 FROM users WHERE email = ? AND id != ?", (email, user_id)
            ).fetchone():
                raise ValidationError("Emaili tashmë ekziston")
            update_row(cursor, "users", user_id, values)
            updated = fetch_row(cursor, "users", user_id)
        return to_api_shape(updated)

    @classmethod
    async def delete_user(cls, db: Database, user_id: str, current_user: Dict[str, Any]) -> None:
        if current_user["id"] == user_id:
            raise ValidationError("Nuk mund të fshini vetë profilin tuaj")
        with db.cursor() as cursor:
            if not fetch_row(cursor, "users", user_id):
                raise NotFoundError("Përdoruesi nuk u gjet")
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))

    @classmethod
    async def touch_last_login(cls, db: Database, user_id: str) -> None:
        with db.cursor() as cursor:
            cursor.execute("UPDATE users SET last_login = ? WHERE id = ?", (now_iso(), user_id))
