"""
Service for managing customers.

Besides plain CRUD this module owns the *find or create* rule used when
an order or a service is entered with a free-text customer name: the
value is tried as a customer id, then as an exact name, and only then a
new customer with a placeholder e-mail address is created.
"""

import logging
import re
import sqlite3
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from .base import build_where, fetch_row, insert_row, paged_query, search_clause, update_row
from .transform import to_api_shape, to_storage_shape

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("id", "name", "email", "phone", "address", "city", "neighborhood")


def placeholder_email(name: str) -> str:
    """``"Ana Hoxha"`` -> ``"ana.hoxha@example.com"``."""
    return re.sub(r"\s+", ".", name.strip().lower()) + "@example.com"


def find_or_create_customer(cursor: sqlite3.Cursor, name_or_id: str) -> str:
    """Return the id of the customer identified by ``name_or_id``.

    Runs inside the caller's transaction so that an order or service and
    the customer it creates are committed together.
    """
    row = cursor.execute("SELECT id FROM customers WHERE id = ?", (name_or_id,)).fetchone()
    if row:
        return row["id"]
    row = cursor.execute(
        "SELECT id FROM customers WHERE name = ? ORDER BY created_at LIMIT 1", (name_or_id,)
    ).fetchone()
    if row:
        return row["id"]
    customer_id = str(uuid.uuid4())
    now = now_iso()
    insert_row(
        cursor,
        "customers",
        {
            "id": customer_id,
            "name": name_or_id,
            "email": placeholder_email(name_or_id),
            "source": "Internal",
            "created_at": now,
            "updated_at": now,
        },
    )
    logger.info("Created customer %s for %r", customer_id, name_or_id)
    return customer_id


def resolve_customer(
    cursor: sqlite3.Cursor, customer: Optional[str], customer_id: Optional[str]
) -> str:
    """Resolve the customer of an order or a service.

    An explicit ``customer_id`` must name an existing customer; only the
    free-text ``customer`` goes through :func:`find_or_create_customer`.
    """
    if customer_id:
        if not fetch_row(cursor, "customers", customer_id):
            raise ValidationError("Klienti nuk u gjet")
        return customer_id
    return find_or_create_customer(cursor, customer)


class CustomerService:
    """CRUD and statistics for customers."""

    @classmethod
    async def list_customers(
        cls,
        db: Database,
        search: Optional[str] = None,
        source: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = build_where(
            [
                (search_clause(SEARCH_COLUMNS), f"%{search}%" if search else None),
                ("source = ?", source),
            ]
        )
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "customers", where, params, page, limit)
        return [to_api_shape(row) for row in rows], total

    @classmethod
    async def get_customer(cls, db: Database, customer_id: str) -> Dict[str, Any]:
        """Return the customer with its orders and services.

        Raises
        ------
        NotFoundError
            If no customer has this id.
        """
        with db.cursor() as cursor:
            customer = fetch_row(cursor, "customers", customer_id)
            if not customer:
                raise NotFoundError("Klienti nuk u gjet")
            orders = cursor.execute(
                "SELECT * FROM orders WHERE customer_id = ? ORDER BY created_at DESC",
                (customer_id,),
            ).fetchall()
            services = cursor.execute(
                "SELECT * FROM services WHERE customer_id = ? ORDER BY created_at DESC",
                (customer_id,),
            ).fetchall()
        shaped = to_api_shape(customer)
        shaped["orders"] = [to_api_shape(dict(row), "order") for row in orders]
        shaped["services"] = [to_api_shape(dict(row), "service") for row in services]
        return shaped

    @classmethod
    async def create_customer(cls, db: Database, payload: Dict[str, Any]) -> Dict[str, Any]:
        values = to_storage_shape(payload)
        if not values.get("name") or not values.get("email"):
            raise ValidationError("Emri dhe emaili janë të detyrueshëm")
        now = now_iso()
        values.update(
            id=str(uuid.uuid4()),
            source=values.get("source") or "Internal",
            created_at=now,
            updated_at=now,
        )
        with db.cursor() as cursor:
            existing = cursor.execute(
                "SELECT id FROM customers WHERE email = ?", (values["email"],)
            ).fetchone()
            if existing:
                raise ValidationError("Emaili tashmë ekziston")
            insert_row(cursor, "customers", values)
            created = fetch_row(cursor, "customers", values["id"])
        return to_api_shape(created)

    @classmethod
    async def update_customer(
        cls, db: Database, customer_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        values = to_storage_shape(payload)
        values.pop("created_at", None)
        values["updated_at"] = now_iso()
        with db.cursor() as cursor:
            if not fetch_row(cursor, "customers", customer_id):
                raise NotFoundError("Klienti nuk u gjet")
            email = values.get("email")
            if email:
                clash = cursor.execute(
                    "SELECT id FROM customers WHERE email = ? AND id != ?", (email, customer_id)
                ).fetchone()
                if clash:
                    raise ValidationError("Emaili tashmë ekziston")
            update_row(cursor, "customers", customer_id, values)
            updated = fetch_row(cursor, "customers", customer_id)
        return to_api_shape(updated)

    @classmethod
    async def delete_customer(cls, db: Database, customer_id: str) -> None:
        """Delete a customer that no order or service refers to."""
        with db.cursor() as cursor:
            if not fetch_row(cursor, "customers", customer_id):
                raise NotFoundError("Klienti nuk u gjet")
            if cursor.execute(
                "SELECT 1 FROM orders WHERE customer_id = ? LIMIT 1", (customer_id,)
            ).fetchone():
                raise ValidationError("Nuk mund të fshihet klienti pasi ka porosi të lidhura")
            if cursor.execute(
                "SELECT 1 FROM services WHERE customer_id = ? LIMIT 1", (customer_id,)
            ).fetchone():
                raise ValidationError("Nuk mund të fshihet klienti pasi ka shërbime të lidhura")
            cursor.execute("DELETE FROM customers WHERE id = ?", (customer_id,))

    @classmethod
    async def stats(cls, db: Database) -> Dict[str, int]:
        with db.cursor() as cursor:
            total = cursor.execute("SELECT COUNT(*) FROM customers").fetchone()[0]
            rows = cursor.execute(
                "SELECT source, COUNT(*) AS n FROM customers GROUP BY source"
            ).fetchall()
        by_source = {row["source"]: row["n"] for row in rows}
        return {
            "total": total,
            "internal": by_source.get("Internal", 0),
            "woocommerce": by_source.get("WooCommerce", 0),
            "website": by_source.get("Website", 0),
            "socialMedia": by_source.get("Social Media", 0),
            "referral": by_source.get("Referral", 0),
        }
