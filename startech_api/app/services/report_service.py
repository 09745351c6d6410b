"""
Service layer for reports.

Provides the dashboard overview (counts per status for every domain plus
order revenue) and date-filtered listings used by the reports page.  All
queries are read-only.
"""

from typing import Any, Dict, List, Optional

from ..core.db import Database
from .base import build_where, count_by
from .transform import coerce_float, to_api_shape

# entity -> (table, shape passed to to_api_shape, {query filter: column})
REPORTS = {
    "orders": ("orders", "order", {"status": "status", "source": "source"}),
    "services": ("services", None, {"status": "status", "category": "category"}),
    "tasks": ("tasks", "task", {"type": "type", "status": "status", "priority": "priority"}),
    "customers": ("customers", None, {"source": "source"}),
    "products": ("products", "product", {"category": "category", "status": "woo_commerce_status"}),
}


class ReportService:
    """Aggregated reports for the dashboard and the reports page."""

    @classmethod
    async def dashboard(cls, db: Database) -> Dict[str, Any]:
        """Return counts per status for orders, services, tasks, customers and products."""
        with db.cursor() as cursor:
            orders = count_by(cursor, "orders", "status")
            revenue = cursor.execute("SELECT COALESCE(SUM(total), 0) FROM orders").fetchone()[0]
            services = count_by(cursor, "services", "status")
            task_types = count_by(cursor, "tasks", "type")
            task_statuses = count_by(cursor, "tasks", "status")
            customers = count_by(cursor, "customers", "source")
            products = count_by(cursor, "products", "woo_commerce_status")
        return {
            "orders": {
                "total": sum(orders.values()),
                "pending": orders.get("pending", 0),
                "processing": orders.get("processing", 0),
                "shipped": orders.get("shipped", 0),
                "delivered": orders.get("delivered", 0),
                "totalRevenue": round(coerce_float(revenue), 2),
            },
            "services": {
                "total": sum(services.values()),
                "received": services.get("received", 0),
                "inProgress": services.get("in-progress", 0),
                "completed": services.get("completed", 0),
            },
            "tasks": {
                "total": sum(task_types.values()),
                "tasks": task_types.get("task", 0),
                "tickets": task_types.get("ticket", 0),
                "todo": task_statuses.get("todo", 0),
                "inProgress": task_statuses.get("in-progress", 0),
                "done": task_statuses.get("done", 0),
            },
            "customers": {
                "total": sum(customers.values()),
                "wooCommerce": customers.get("WooCommerce", 0),
                "internal": customers.get("Internal", 0),
            },
            "products": {
                "total": sum(products.values()),
                "active": products.get("active", 0),
                "inactive": products.get("inactive", 0),
                "draft": products.get("draft", 0),
            },
        }

    @classmethod
    async def entity_report(
        cls,
        db: Database,
        entity: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        **filters: Optional[str],
    ) -> List[Dict[str, Any]]:
        """Rows of ``entity`` created between the given dates, newest first.

        Extra keyword filters are matched for equality against the
        columns declared in ``REPORTS``; unknown filters are ignored.
        """
        table, shape, columns = REPORTS[entity]
        conditions = [("created_at >= ?", start_date), ("created_at <= ?", end_date)]
        conditions += [(f"{columns[name]} = ?", value) for name, value in filters.items() if name in columns]
        where, params = build_where(conditions)
        with db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT * FROM {table}{where} ORDER BY created_at DESC", tuple(params)
            ).fetchall()
            result = []
            for row in rows:
                record = dict(row)
                if record.get("customer_id") and table in ("orders", "services"):
                    customer = cursor.execute(
                        "SELECT * FROM customers WHERE id = ?", (record["customer_id"],)
                    ).fetchone()
                    record["customer"] = dict(customer) if customer else None
                result.append(to_api_shape(record, shape))
        return result
