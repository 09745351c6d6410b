"""
Service layer for repair services.

A *service* is a device brought in for repair or warranty handling.  It
is identified by ``SRV-<year>-NNN``, belongs to a customer and carries a
history trail written on every change.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from ..core.security import display_name
from . import lifecycle
from .base import (
    add_history,
    build_where,
    count_by,
    fetch_row,
    insert_row,
    load_history,
    paged_query,
    update_row,
)
from .customer_service import resolve_customer
from .sequencer import IdSequencer
from .transform import to_api_shape, to_storage_shape

logger = logging.getLogger(__name__)


def _shape(cursor, row: Dict[str, Any], with_history: bool = False) -> Dict[str, Any]:
    if row.get("customer_id"):
        row["customer"] = fetch_row(cursor, "customers", row["customer_id"])
    if with_history:
        row["history"] = load_history(cursor, "service", row["id"])
    shaped = to_api_shape(row)
    if with_history:
        shaped["serviceHistory"] = shaped.pop("history")
    return shaped


class ServiceService:
    """CRUD, history and statistics for repair services."""

    @classmethod
    async def list_services(
        cls,
        db: Database,
        status: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = build_where([("status = ?", status), ("category = ?", category)])
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "services", where, params, page, limit)
            services = [_shape(cursor, row) for row in rows]
        return services, total

    @classmethod
    async def get_service(cls, db: Database, service_id: str) -> Dict[str, Any]:
        with db.cursor() as cursor:
            row = fetch_row(cursor, "services", service_id)
            if not row:
                raise NotFoundError("Shërbimi nuk u gjet")
            return _shape(cursor, row, with_history=True)

    @classmethod
    async def create_service(
        cls, db: Database, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Register a new service for a customer.

        The customer may be given as an id or a name (``customer`` or
        ``customerId``).  ``createdBy`` is the caller and ``assignedBy``
        defaults to the assignee, then to the caller.
        """
        payload = dict(payload)
        problem = payload.pop("problem", None)
        if problem and not payload.get("problemDescription"):
            payload["problemDescription"] = problem
        customer = payload.pop("customer", None)
        customer_id = payload.pop("customerId", None)
        if not payload.get("problemDescription") or not (customer or customer_id):
            raise ValidationError("Përshkrimi i problemit dhe klienti janë të detyrueshëm")

        status = payload.pop("status", None) or lifecycle.default_status(lifecycle.SERVICE)
        lifecycle.validate_status(lifecycle.SERVICE, status)

        service_id = IdSequencer(db).next_id("SRV")
        now = now_iso()
        user_name = display_name(user)
        values = to_storage_shape(payload)
        values.update(
            id=service_id,
            created_by=user_name,
            assigned_by=values.get("assigned_by") or values.get("assigned_to") or user_name,
            created_at=now,
            updated_at=now,
        )
        values.update(lifecycle.apply_status_change(lifecycle.SERVICE, {}, status, now))
        with db.cursor() as cursor:
            values["customer_id"] = resolve_customer(cursor, customer, customer_id)
            insert_row(cursor, "services", values)
            add_history(
                cursor,
                "service",
                service_id,
                "Shërbimi u krijua",
                user,
                f"Shërbimi u krijua për klientin {values['customer_id']}",
                now,
            )
            created = _shape(cursor, fetch_row(cursor, "services", service_id), with_history=True)
        logger.info("Created service %s", service_id)
        return created

    @classmethod
    async def update_service(
        cls, db: Database, service_id: str, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = dict(payload)
        problem = payload.pop("problem", None)
        if problem and not payload.get("problemDescription"):
            payload["problemDescription"] = problem
        customer = payload.pop("customer", None)
        customer_id = payload.pop("customerId", None)
        new_status = payload.pop("status", None)
        now = now_iso()
        values = to_storage_shape(payload)
        values.pop("created_at", None)
        values.pop("created_by", None)
        values["updated_at"] = now

        with db.cursor() as cursor:
            current = fetch_row(cursor, "services", service_id)
            if not current:
                raise NotFoundError("Shërbimi nuk u gjet")
            note = "Shërbimi u përditësua"
            if new_status is not None:
                lifecycle.validate_status(lifecycle.SERVICE, new_status)
                values.update(
                    lifecycle.apply_status_change(lifecycle.SERVICE, current, new_status, now)
                )
                if new_status != current["status"]:
                    note = (
                        f"Statusi u ndryshua nga {lifecycle.translate_status(current['status'])} "
                        f"në {lifecycle.translate_status(new_status)}"
                    )
            if customer or customer_id:
                values["customer_id"] = resolve_customer(cursor, customer, customer_id)
            update_row(cursor, "services", service_id, values)
            add_history(cursor, "service", service_id, "Shërbimi u përditësua", user, note, now)
            return _shape(cursor, fetch_row(cursor, "services", service_id), with_history=True)

    @classmethod
    async def delete_service(cls, db: Database, service_id: str) -> None:
        with db.cursor() as cursor:
            if not fetch_row(cursor, "services", service_id):
                raise NotFoundError("Shërbimi nuk u gjet")
            cursor.execute("DELETE FROM comments WHERE entity_type = 'service' AND entity_id = ?", (service_id,))
            cursor.execute("DELETE FROM services WHERE id = ?", (service_id,))

    @classmethod
    async def add_history_entry(
        cls,
        db: Database,
        service_id: str,
        action: str,
        notes: Optional[str],
        user: Dict[str, Any],
        email_sent: bool = False,
    ) -> Dict[str, Any]:
        now = now_iso()
        with db.cursor() as cursor:
            if not fetch_row(cursor, "services", service_id):
                raise NotFoundError("Shërbimi nuk u gjet")
            entry_id = add_history(cursor, "service", service_id, action, user, notes, now)
            if email_sent:
                cursor.execute(
                    "UPDATE service_history SET email_sent = 1 WHERE id = ?", (entry_id,)
                )
            cursor.execute("UPDATE services SET updated_at = ? WHERE id = ?", (now, service_id))
            entry = cursor.execute(
                "SELECT * FROM service_history WHERE id = ?", (entry_id,)
            ).fetchone()
        return to_api_shape(dict(entry))

    @classmethod
    async def stats(cls, db: Database) -> Dict[str, int]:
        with db.cursor() as cursor:
            by_status = count_by(cursor, "services", "status")
        return {
            "total": sum(by_status.values()),
            "received": by_status.get("received", 0),
            "inProgress": by_status.get("in-progress", 0),
            "waitingParts": by_status.get("waiting-parts", 0),
            "completed": by_status.get("completed", 0),
            "delivered": by_status.get("delivered", 0),
        }
