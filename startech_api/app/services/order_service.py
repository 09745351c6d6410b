"""
Service for manual orders.

An order is priced from the product catalogue at the moment it is
written: each line stores the product's final price as ``unit_price``
and ``unit_price * quantity`` as ``subtotal``, and the order total is
the sum of the subtotals rounded to cents.  Orders get human readable
identifiers (``PRS-<year>-NNN``).
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from . import lifecycle
from .base import build_where, count_by, fetch_row, insert_row, paged_query, update_row
from .customer_service import resolve_customer
from .sequencer import IdSequencer
from .transform import coerce_float, to_api_shape, to_storage_shape

logger = logging.getLogger(__name__)


def _write_lines(cursor: sqlite3.Cursor, order_id: str, items: Sequence[Dict[str, Any]]) -> float:
    """Insert priced lines for ``order_id`` and return the order total."""
    total = 0.0
    for item in items:
        product = fetch_row(cursor, "products", item["productId"])
        if not product:
            raise ValidationError(f"Produkti {item['productId']} nuk u gjet")
        quantity = int(item.get("quantity") or 1)
        unit_price = coerce_float(product["final_price"]) or (
            coerce_float(product["base_price"]) + coerce_float(product["additional_cost"])
        )
        subtotal = round(unit_price * quantity, 2)
        cursor.execute(
            """
            INSERT INTO order_products (order_id, product_id, quantity, unit_price, subtotal)
            VALUES (?, ?, ?, ?, ?)
            """,
            (order_id, product["id"], quantity, unit_price, subtotal),
        )
        total += subtotal
    return round(total, 2)


def _load_lines(cursor: sqlite3.Cursor, order_id: str) -> List[Dict[str, Any]]:
    rows = cursor.execute(
        "SELECT * FROM order_products WHERE order_id = ? ORDER BY id", (order_id,)
    ).fetchall()
    lines = []
    for row in rows:
        line = dict(row)
        line["product"] = fetch_row(cursor, "products", row["product_id"]) if row["product_id"] else None
        lines.append(line)
    return lines


def _load_order(cursor: sqlite3.Cursor, order_id: str) -> Optional[Dict[str, Any]]:
    order = fetch_row(cursor, "orders", order_id)
    if not order:
        return None
    order["order_products"] = _load_lines(cursor, order_id)
    if order.get("customer_id"):
        order["customer"] = fetch_row(cursor, "customers", order["customer_id"])
    return to_api_shape(order, "order")


class OrderService:
    """Create, update, list and delete orders."""

    @classmethod
    async def list_orders(
        cls,
        db: Database,
        status: Optional[str] = None,
        source: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = build_where([("status = ?", status), ("source = ?", source)])
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "orders", where, params, page, limit)
            orders = []
            for row in rows:
                row["order_products"] = _load_lines(cursor, row["id"])
                if row.get("customer_id"):
                    row["customer"] = fetch_row(cursor, "customers", row["customer_id"])
                orders.append(to_api_shape(row, "order"))
        return orders, total

    @classmethod
    async def get_order(cls, db: Database, order_id: str) -> Dict[str, Any]:
        with db.cursor() as cursor:
            order = _load_order(cursor, order_id)
        if not order:
            raise NotFoundError("Porosia nuk u gjet")
        return order

    @classmethod
    async def create_order(cls, db: Database, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a manual order from a customer reference and product lines.

        Parameters
        ----------
        db : Database
            Database handle.
        payload : dict
            camelCase body with ``customer`` or ``customerId``, ``items``
            (``productId``/``quantity``) and optional shipping and notes.

        Raises
        ------
        ValidationError
            If the customer or the items are missing, or an item refers
            to an unknown product.
        """
        payload = dict(payload)
        items = payload.pop("items", None) or []
        customer = payload.pop("customer", None)
        customer_id = payload.pop("customerId", None)
        if not (customer or customer_id) or not items:
            raise ValidationError("Klienti dhe produktet janë të detyrueshëm")

        order_id = IdSequencer(db).next_id("PRS")
        now = now_iso()
        values = to_storage_shape(payload, "order")
        values.update(
            id=order_id,
            status=lifecycle.default_status(lifecycle.ORDER),
            source="Manual",
            is_editable=1,
            total=0,
            created_at=now,
            updated_at=now,
        )
        with db.cursor() as cursor:
            values["customer_id"] = resolve_customer(cursor, customer, customer_id)
            insert_row(cursor, "orders", values)
            total = _write_lines(cursor, order_id, items)
            cursor.execute("UPDATE orders SET total = ? WHERE id = ?", (total, order_id))
            created = _load_order(cursor, order_id)
        logger.info("Created order %s with total %.2f", order_id, total)
        return created

    @classmethod
    async def update_order(
        cls, db: Database, order_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Apply a partial update.

        New ``items`` replace every line and recompute the total.  A
        status change is validated and stamps or clears ``completed_at``.
        """
        payload = dict(payload)
        items = payload.pop("items", None)
        customer = payload.pop("customer", None)
        customer_id = payload.pop("customerId", None)
        new_status = payload.pop("status", None)
        values = to_storage_shape(payload, "order")
        values.pop("total", None)
        now = now_iso()
        values["updated_at"] = now

        with db.cursor() as cursor:
            current = fetch_row(cursor, "orders", order_id)
            if not current:
                raise NotFoundError("Porosia nuk u gjet")
            if new_status is not None:
                lifecycle.validate_status(lifecycle.ORDER, new_status)
                values.update(lifecycle.apply_status_change(lifecycle.ORDER, current, new_status, now))
            if customer or customer_id:
                values["customer_id"] = resolve_customer(cursor, customer, customer_id)
            if items is not None:
                if not items:
                    raise ValidationError("Porosia duhet të ketë të paktën një produkt")
                cursor.execute("DELETE FROM order_products WHERE order_id = ?", (order_id,))
                values["total"] = _write_lines(cursor, order_id, items)
            update_row(cursor, "orders", order_id, values)
            updated = _load_order(cursor, order_id)
        return updated

    @classmethod
    async def delete_order(cls, db: Database, order_id: str) -> None:
        with db.cursor() as cursor:
            if not fetch_row(cursor, "orders", order_id):
                raise NotFoundError("Porosia nuk u gjet")
            cursor.execute("DELETE FROM orders WHERE id = ?", (order_id,))

    @classmethod
    async def stats(cls, db: Database) -> Dict[str, Any]:
        with db.cursor() as cursor:
            by_status = count_by(cursor, "orders", "status")
            revenue = cursor.execute("SELECT COALESCE(SUM(total), 0) FROM orders").fetchone()[0]
        stats: Dict[str, Any] = {"total": sum(by_status.values())}
        for status in lifecycle.STATUSES[lifecycle.ORDER]:
            stats[status] = by_status.get(status, 0)
        stats["totalRevenue"] = round(coerce_float(revenue), 2)
        return stats
